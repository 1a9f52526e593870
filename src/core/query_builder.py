from typing import Dict, Iterable, List, Set, Tuple

# --- 定数 ---
MIN_WORD_LENGTH = 5     # 語幹候補を生成する用語の最小文字数
MIN_STEM_LENGTH = 4     # 語幹の最小文字数
MAX_TRUNCATION = 3      # 末尾から削る最大文字数
QUERY_SEPARATOR = " OR "

# Orbit は "+", Google Patents は "*" を前方一致記号として使う
TRUNCATION_MARKERS = ("+", "*")


def normalize_terms(terms: Iterable[str]) -> List[str]:
    """小文字化・前後空白の除去を行い、空文字を除いて重複を初出順にまとめる"""
    normalized = (term.lower().strip() for term in terms)
    return list(dict.fromkeys(term for term in normalized if term))


def generate_stem_candidates(term_set: List[str]) -> Dict[str, List[str]]:
    """
    用語集合から語幹候補と、その語幹で始まる用語の対応表を作る。

    語幹候補は MIN_WORD_LENGTH 文字以上の用語からのみ生成するが、
    メンバーには長さに関係なくすべての用語が入りうる（短い用語も長い用語の語幹グループに参加できる）。
    キーの順序は候補の生成順で、同じ長さの語幹の処理順を決める。
    """
    candidates: Dict[str, List[str]] = {}

    for term in term_set:
        if len(term) < MIN_WORD_LENGTH:
            continue
        for i in range(1, MAX_TRUNCATION + 1):
            if len(term) - i < MIN_STEM_LENGTH:
                break
            candidates.setdefault(term[:len(term) - i], [])

    for term in term_set:
        for stem, members in candidates.items():
            if term.startswith(stem):
                members.append(term)

    return candidates


def group_by_stem(candidates: Dict[str, List[str]]) -> Tuple[List[str], Set[str]]:
    """
    長い語幹から順に、未使用のメンバーが2つ以上ある語幹をグループとして採用する。

    Returns:
        (採用した語幹のリスト, グループに取り込まれた用語の集合)
    """
    # sorted は安定ソートなので、同じ長さの語幹は生成順のまま処理される
    sorted_stems = sorted(candidates, key=len, reverse=True)

    stems: List[str] = []
    used_terms: Set[str] = set()
    for stem in sorted_stems:
        unused = [term for term in candidates[stem] if term not in used_terms]
        if len(unused) > 1:
            stems.append(stem)
            used_terms.update(unused)

    return stems, used_terms


def assemble_query(stems: List[str], term_set: List[str], used_terms: Set[str], truncation_marker: str) -> str:
    """語幹グループ、残りの用語の順にトークンを並べ、ORで連結する"""
    tokens = [f"{stem}{truncation_marker}" for stem in stems]
    tokens.extend(term for term in term_set if term not in used_terms)
    return QUERY_SEPARATOR.join(dict.fromkeys(tokens))


def compact_query(terms: Iterable[str], truncation_marker: str = "+") -> str:
    """
    キーワードと同義語のリストから、前方一致記号を使ったOR検索式を組み立てる。

    例:
        compact_query(["heaters", "heating", "thermal"], "+") -> "heat+ OR thermal"
        compact_query(["heaters", "heating", "thermal"], "*") -> "heat* OR thermal"
    """
    term_set = normalize_terms(terms)
    if not term_set:
        return ""

    candidates = generate_stem_candidates(term_set)
    stems, used_terms = group_by_stem(candidates)
    return assemble_query(stems, term_set, used_terms, truncation_marker)
