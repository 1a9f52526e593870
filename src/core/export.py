import json
from typing import List

import pandas as pd

from core.state import KeywordResult

EXPORT_COLUMNS = ['keyword', 'synonyms', 'orbit_query', 'google_query']

def results_to_dataframe(results: List[KeywordResult]) -> pd.DataFrame:
    """抽出結果をCSV出力用のDataFrameに変換する（同義語はカンマ区切りの文字列）"""
    df = pd.DataFrame([r.model_dump() for r in results], columns=EXPORT_COLUMNS)
    df["synonyms"] = df["synonyms"].apply(", ".join)
    return df

def results_to_json(results: List[KeywordResult]) -> str:
    return json.dumps({"keywords": [r.model_dump() for r in results]}, indent=2, ensure_ascii=False)
