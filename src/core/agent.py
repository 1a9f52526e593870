from functools import lru_cache
from typing import List, Literal, Optional
import os

from langgraph.graph import StateGraph, START, END
from langchain_openai import ChatOpenAI
from langchain_core.prompts import ChatPromptTemplate
from loguru import logger

from core.state import AppState, KeywordEntry, KeywordExtraction, KeywordResult
from core.query_builder import compact_query
from utils.config import load_settings, get_truncation_marker

# --- モデル定義 ---
@lru_cache(maxsize=1)
def get_model() -> ChatOpenAI:
    """設定に従ってChatOpenAIを生成する（プロセス内で1度だけ）"""
    settings = load_settings()
    return ChatOpenAI(
        temperature=settings["model"]["temperature"],
        model=settings["model"]["name"],
        api_key=os.environ.get("OPENAI_API_KEY"),
    )

# --- プロンプトテンプレート ---
# キーワード抽出用プロンプト
KEYWORD_EXTRACTION_PROMPT = ChatPromptTemplate.from_messages([
    ("system", "You are an expert patent analyst specializing in prior art searches."),
    ("human", """Analyze the following patent text. Identify the most critical technical keywords and concepts. For each keyword, provide a list of relevant synonyms and related terms that would be useful for searching for prior art in databases like USPTO, Espacenet, and Google Patents. Focus on the specific domain of the patent.

Patent Text:
{patent_text}""")
])

EMPTY_INPUT_MESSAGE = "Please provide patent text before analyzing."
INVALID_RESPONSE_MESSAGE = "Invalid response structure from the API."

# --- 検索式の生成 ---
def build_keyword_results(entries: List[KeywordEntry], settings: Optional[dict] = None) -> List[KeywordResult]:
    """抽出されたキーワードごとに、Orbit用とGoogle Patents用の検索式を生成する"""
    settings = settings or load_settings()
    orbit_marker = get_truncation_marker(settings, "orbit")
    google_marker = get_truncation_marker(settings, "google")

    results = []
    for entry in entries:
        terms = entry.terms()
        result = KeywordResult(
            keyword=entry.keyword,
            synonyms=entry.synonyms,
            orbit_query=compact_query(terms, orbit_marker),
            google_query=compact_query(terms, google_marker),
        )
        logger.debug(f"{entry.keyword}: {result.orbit_query}")
        results.append(result)
    return results

# --- LangGraph ノード定義 ---
def route_input(state: AppState) -> Literal["reject_empty_input", "extract_keywords"]:
    if not state.patent_text.strip():
        return "reject_empty_input"
    return "extract_keywords"

def reject_empty_input(state: AppState) -> dict:
    logger.info("--- Node: reject_empty_input ---")
    return {"current_agent_node": "reject_empty_input", "error": EMPTY_INPUT_MESSAGE}

def extract_keywords(state: AppState) -> dict:
    """特許テキストからキーワードと同義語を抽出する"""
    logger.info("--- Node: extract_keywords ---")
    update = {"current_agent_node": "extract_keywords"}

    try:
        messages = KEYWORD_EXTRACTION_PROMPT.format_messages(patent_text=state.patent_text)
        extraction = get_model().with_structured_output(KeywordExtraction).invoke(messages)
        if not isinstance(extraction, KeywordExtraction):
            raise ValueError(INVALID_RESPONSE_MESSAGE)
    except Exception as e:
        logger.exception("Keyword extraction failed")
        update["error"] = f"An error occurred: {e}"
        return update

    logger.info(f"{len(extraction.keywords)}件のキーワードを抽出しました。")
    update["results"] = [KeywordResult(keyword=entry.keyword, synonyms=entry.synonyms) for entry in extraction.keywords]
    return update

def build_search_queries(state: AppState) -> dict:
    """抽出結果の各キーワードについて検索式を生成する"""
    logger.info("--- Node: build_search_queries ---")
    return {"current_agent_node": "build_search_queries", "results": build_keyword_results(state.results)}

def route_after_extraction(state: AppState) -> Literal["build_search_queries", "__end__"]:
    return END if state.error else "build_search_queries"

# --- ワークフローの構築 ---
analysis_workflow = StateGraph(AppState)
analysis_workflow.add_node("reject_empty_input", reject_empty_input)
analysis_workflow.add_node("extract_keywords", extract_keywords)
analysis_workflow.add_node("build_search_queries", build_search_queries)
analysis_workflow.add_conditional_edges(START, route_input, {"reject_empty_input": "reject_empty_input", "extract_keywords": "extract_keywords"})
analysis_workflow.add_conditional_edges("extract_keywords", route_after_extraction, {"build_search_queries": "build_search_queries", END: END})
analysis_workflow.add_edge("reject_empty_input", END)
analysis_workflow.add_edge("build_search_queries", END)
analysis_app = analysis_workflow.compile()

# --- 外部から呼び出す関数 ---
def run_keyword_analysis(state: AppState) -> AppState:
    """前回の結果とエラーをクリアしてから、キーワード抽出ワークフローを実行する"""
    state = state.model_copy(update={"results": [], "error": None, "current_agent_node": None})
    state.agent_node_graph = analysis_app.get_graph().draw_mermaid()
    result_dict = analysis_app.invoke(state)
    return AppState(**result_dict)
