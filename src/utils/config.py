import os
import sys
import copy
from pathlib import Path
from typing import Optional

import yaml
import streamlit as st
from dotenv import load_dotenv
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_SETTINGS_PATH = PROJECT_ROOT / "config" / "settings.yaml"

DEFAULT_SETTINGS = {
    "model": {
        "name": "gpt-4o",
        "temperature": 0,
    },
    "platforms": {
        "orbit": {"label": "Orbit", "truncation_marker": "+"},
        "google": {"label": "Google Patents", "truncation_marker": "*"},
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


class ConfigError(Exception):
    """設定ファイルの読み込みに失敗した"""


def load_env():
    """環境変数を.envファイルから読み込む"""
    load_dotenv()

def get_openai_api_key() -> str:
    """環境変数からOpenAI APIキーを取得する"""
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        st.error("OpenAI APIキーが設定されていません。.envファイルまたは環境変数で設定してください。")
        st.stop()
    return api_key

def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged

def load_settings(path: Optional[Path] = None) -> dict:
    """
    settings.yaml を読み込み、既定値にマージして返す。

    パスの優先順位: 引数 > 環境変数 KEYWORD_FINDER_SETTINGS > config/settings.yaml
    ファイルが存在しない場合は既定値をそのまま返す。
    """
    if path is None:
        path = Path(os.environ.get("KEYWORD_FINDER_SETTINGS", DEFAULT_SETTINGS_PATH))
    path = Path(path)

    if not path.exists():
        logger.debug(f"Settings file not found, using defaults: {path}")
        return copy.deepcopy(DEFAULT_SETTINGS)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"設定ファイルのYAML形式が正しくありません: {path}") from e

    if not isinstance(loaded, dict):
        raise ConfigError(f"設定ファイルの最上位はマッピングである必要があります: {path}")

    return _merge(DEFAULT_SETTINGS, loaded)

def get_truncation_marker(settings: dict, platform: str) -> str:
    """プラットフォーム名から前方一致記号を取得する"""
    return settings["platforms"][platform]["truncation_marker"]

def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """Loguruのシンクを設定する（標準エラー出力 + 任意のローテーション付きファイル）"""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        logger.add(
            log_file,
            format="{time} {level} {message}",
            rotation="10 MB",
            compression="zip",
            level=level
        )
