import io
from typing import Optional

from loguru import logger
from PyPDF2 import PdfReader

from core.state import AppState


class PdfExtractionError(Exception):
    """PDFからテキストを抽出できなかった"""


def is_pdf_upload(file_name: Optional[str], mime_type: Optional[str]) -> bool:
    """アップロードされたファイルがPDFかどうかを判定する"""
    if mime_type == "application/pdf":
        return True
    return bool(file_name) and file_name.lower().endswith(".pdf")

def extract_text_from_pdf(data: bytes) -> str:
    """
    PDFの全ページからテキストを抽出する。
    ページ間は空行で区切り、前後の空白を除去して返す。
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        logger.exception("Error parsing PDF")
        raise PdfExtractionError(str(e)) from e

    logger.info(f"{len(pages)}ページのテキストを抽出しました。")
    return "\n\n".join(pages).strip()

def sync_pdf_upload(state: AppState, uploaded_file, messages: dict):
    """
    アップローダーの内容を状態に反映する。

    同じアップロードは成功・失敗にかかわらず1度だけ解析する。
    アップロードが取り除かれた場合はファイル名をクリアする（入力済みのテキストは残す）。
    """
    if uploaded_file is None:
        state.file_name = None
        state.last_upload_name = None
        return

    if uploaded_file.name == state.last_upload_name:
        return
    state.last_upload_name = uploaded_file.name

    if not is_pdf_upload(uploaded_file.name, uploaded_file.type):
        state.error = messages["invalid_pdf"]
        return

    try:
        state.patent_text = extract_text_from_pdf(uploaded_file.getvalue())
    except PdfExtractionError as e:
        state.error = messages["pdf_error"].format(error=e)
        state.file_name = None
        return

    state.file_name = uploaded_file.name
    state.results = []
    state.error = None
