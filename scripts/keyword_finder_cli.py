import argparse
import sys
from pathlib import Path
from loguru import logger

# src ディレクトリをシステムパスに追加
project_root = Path(__file__).resolve().parents[1]
sys.path.append(str(project_root / "src"))

from core.agent import run_keyword_analysis
from core.export import results_to_dataframe, results_to_json
from core.query_builder import compact_query, TRUNCATION_MARKERS
from core.state import AppState
from utils.config import load_env, load_settings, setup_logging
from utils.pdf_reader import extract_text_from_pdf, PdfExtractionError

def read_patent_text(path: Path) -> str:
    """PDFならテキストを抽出し、それ以外はテキストファイルとして読み込む"""
    if path.suffix.lower() == ".pdf":
        return extract_text_from_pdf(path.read_bytes())
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()

def run_query(args) -> int:
    print(compact_query(args.terms, args.marker))
    return 0

def run_analyze(args) -> int:
    """特許テキストからキーワードを抽出し、検索式と一緒に出力する"""
    input_path = Path(args.input)
    logger.info(f"Loading patent text from: {input_path}")
    try:
        patent_text = read_patent_text(input_path)
    except (OSError, PdfExtractionError) as e:
        logger.error(f"Failed to read input: {e}")
        return 1

    result_state = run_keyword_analysis(AppState(patent_text=patent_text, file_name=input_path.name))
    if result_state.error:
        logger.error(f"Error from workflow: {result_state.error}")
        return 1

    if args.format == "csv":
        output = results_to_dataframe(result_state.results).to_csv(index=False)
    else:
        output = results_to_json(result_state.results)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(output)
        logger.info(f"Results saved to: {output_path}")
    else:
        print(output)
    return 0

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract patent keywords and build compact search queries.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    query_parser = subparsers.add_parser("query", help="Build a search query from the given terms.")
    query_parser.add_argument("terms", nargs="+", help="Keyword followed by its synonyms.")
    query_parser.add_argument("--marker", choices=TRUNCATION_MARKERS, default="+", help="Truncation marker (+ for Orbit, * for Google Patents).")
    query_parser.set_defaults(func=run_query)

    analyze_parser = subparsers.add_parser("analyze", help="Extract keywords from a patent text or PDF file.")
    analyze_parser.add_argument("input", type=str, help="Path to a .pdf or text file.")
    analyze_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Output format.")
    analyze_parser.add_argument("--output", type=str, default=None, help="Path to save the results (stdout if omitted).")
    analyze_parser.set_defaults(func=run_analyze)
    return parser

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    load_env()
    settings = load_settings()
    setup_logging(settings["logging"]["level"], settings["logging"]["file"])
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
