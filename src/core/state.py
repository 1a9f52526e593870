from typing import List, Optional, Literal
from pydantic import BaseModel, Field

class KeywordEntry(BaseModel):
    """LLMが抽出した技術キーワードと同義語"""
    keyword: str = Field(description="A primary technical keyword or concept from the patent.")
    synonyms: List[str] = Field(default_factory=list, description="A list of synonyms or related terms for the keyword, relevant for a prior art search in the patent's domain.")

    def terms(self) -> List[str]:
        """検索式の元になる用語リスト（キーワード + 同義語）"""
        return [self.keyword, *self.synonyms]

class KeywordExtraction(BaseModel):
    """構造化出力のスキーマ"""
    keywords: List[KeywordEntry] = Field(default_factory=list, description="An array of key technical terms and their synonyms.")

class KeywordResult(KeywordEntry):
    """キーワードごとの抽出結果と検索式"""
    orbit_query: str = Field("", description="Orbit向けの検索式 (前方一致: +)")
    google_query: str = Field("", description="Google Patents向けの検索式 (前方一致: *)")

    def synonyms_text(self) -> str:
        """カードのコピー用テキスト"""
        return ", ".join(self.synonyms)

class AppState(BaseModel):
    """
    Streamlitアプリケーション全体のセッション状態を管理する。
    """
    patent_text: str = Field("", description="解析対象の特許テキスト（入力またはPDFから抽出）")
    file_name: Optional[str] = Field(None, description="アップロードされたPDFのファイル名")
    last_upload_name: Optional[str] = Field(None, description="読み込みを試みた最後のアップロードファイル名（失敗時も記録し、再解析を防ぐ）")
    results: List[KeywordResult] = Field(default_factory=list, description="キーワード抽出と検索式生成の結果")
    error: Optional[str] = None

    # 表示関連
    view_mode: Literal["cards", "orbit", "google"] = Field("cards", description="結果の表示形式")
    display_language: Literal["ja", "en"] = Field("ja", description="表示言語 (ja: 日本語, en: 英語)")

    # LangGraphの可視化用
    current_agent_node: Optional[str] = Field(None, description="現在実行中のエージェントノード")
    agent_node_graph: Optional[str] = Field(None, description="Mermaid形式のエージェントワークフローグラフ")
