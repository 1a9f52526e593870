import streamlit as st
from utils.config import load_env, load_settings, setup_logging, get_openai_api_key
from utils.pdf_reader import sync_pdf_upload
from core.state import AppState
from core.agent import run_keyword_analysis
from core.export import results_to_dataframe

# 環境変数の読み込み
load_env()
settings = load_settings()
setup_logging(settings["logging"]["level"], settings["logging"]["file"])

# --- ページ設定 ---
st.set_page_config(
    page_title="Patent Keyword Finder",
    page_icon="🔎",
    layout="wide",
)

# --- 表示テキスト ---
LABELS = {
    "ja": {
        "title": "特許キーワード抽出・検索式作成",
        "input_header": "1. 特許テキストの入力",
        "text_area": "特許テキスト（貼り付け、またはPDFをアップロード）",
        "uploader": "特許PDFをアップロード",
        "invalid_pdf": "有効なPDFファイルをアップロードしてください。",
        "pdf_error": "Failed to parse PDF: {error}",
        "pdf_loaded": "{name} からテキストを読み込みました。",
        "analyze": "解析開始",
        "clear": "クリア",
        "spinner": "キーワードを抽出中...",
        "results_header": "2. 抽出結果",
        "view_mode": "表示形式",
        "views": {"cards": "キーワードカード", "orbit": "Orbit検索式", "google": "Google Patents検索式"},
        "synonyms": "同義語",
        "download": "結果をCSVでダウンロード",
        "workflow": "エージェントワークフロー",
        "no_results": "まだ解析は実行されていません。",
    },
    "en": {
        "title": "Patent Keyword Finder",
        "input_header": "1. Patent text",
        "text_area": "Patent text (paste it, or upload a PDF)",
        "uploader": "Upload a patent PDF",
        "invalid_pdf": "Please upload a valid PDF file.",
        "pdf_error": "Failed to parse PDF: {error}",
        "pdf_loaded": "Loaded text from {name}.",
        "analyze": "Analyze",
        "clear": "Clear",
        "spinner": "Extracting keywords...",
        "results_header": "2. Results",
        "view_mode": "View",
        "views": {"cards": "Keyword cards", "orbit": "Orbit queries", "google": "Google Patents queries"},
        "synonyms": "Synonyms",
        "download": "Download results as CSV",
        "workflow": "Agent workflow",
        "no_results": "No analysis has been run yet.",
    },
}

# --- 状態管理 ---
if 'app_state' not in st.session_state:
    st.session_state.app_state = AppState()
app_state: AppState = st.session_state.app_state

# --- サイドバー ---
with st.sidebar:
    st.title("表示設定")
    app_state.display_language = st.radio(
        "表示言語を選択",
        ("ja", "en"),
        index=0 if app_state.display_language == "ja" else 1,
        format_func=lambda x: "日本語" if x == "ja" else "English"
    )
labels = LABELS[app_state.display_language]

# --- メイン画面 ---
st.title(labels["title"])

get_openai_api_key()

st.header(labels["input_header"])

# クリア時にキーを変えてアップローダーをリセットする
uploader_key = f"pdf_uploader_{st.session_state.get('uploader_generation', 0)}"
uploaded_file = st.file_uploader(labels["uploader"], type=["pdf"], key=uploader_key)
sync_pdf_upload(app_state, uploaded_file, labels)

if app_state.file_name:
    st.success(labels["pdf_loaded"].format(name=app_state.file_name))

app_state.patent_text = st.text_area(
    labels["text_area"],
    value=app_state.patent_text,
    height=300
)

col_analyze, col_clear = st.columns([1, 1])
with col_analyze:
    if st.button(labels["analyze"], type="primary"):
        with st.spinner(labels["spinner"]):
            st.session_state.app_state = run_keyword_analysis(app_state)
        st.rerun()
with col_clear:
    if st.button(labels["clear"]):
        st.session_state.app_state = AppState(display_language=app_state.display_language)
        st.session_state.uploader_generation = st.session_state.get('uploader_generation', 0) + 1
        st.rerun()

if app_state.error:
    st.error(app_state.error)

# --- 結果表示エリア ---
st.header(labels["results_header"])

if app_state.results:
    app_state.view_mode = st.radio(
        labels["view_mode"],
        ("cards", "orbit", "google"),
        index=("cards", "orbit", "google").index(app_state.view_mode),
        format_func=lambda x: labels["views"][x],
        horizontal=True
    )

    for result in app_state.results:
        if app_state.view_mode == "cards":
            with st.container(border=True):
                st.subheader(result.keyword)
                st.markdown(f"**{labels['synonyms']}:**")
                # st.code にはコピーボタンが付く
                st.code(result.synonyms_text(), language=None)
        elif app_state.view_mode == "orbit":
            st.markdown(f"**{result.keyword}**")
            st.code(result.orbit_query, language=None)
        else:
            st.markdown(f"**{result.keyword}**")
            st.code(result.google_query, language=None)

    results_df = results_to_dataframe(app_state.results)
    st.download_button(
        labels["download"],
        data=results_df.to_csv(index=False).encode("utf-8"),
        file_name="patent_keywords.csv",
        mime="text/csv",
    )
else:
    st.info(labels["no_results"])

# ワークフローの可視化
with st.expander(labels["workflow"], expanded=False):
    if app_state.agent_node_graph:
        st.code(app_state.agent_node_graph, language="mermaid")
    else:
        st.info(labels["no_results"])
