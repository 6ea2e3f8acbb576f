"""Relevance scoring of one catalog entry against a query."""

from __future__ import annotations

from collections.abc import Sequence

from catmatch.config import MatchConfig
from catmatch.index import CatalogIndex, IndexedEntry
from catmatch.trigram import similarity
from catmatch.types import MatchDetails, ScoredCandidate


def fuzzy_bonus(
    query_tokens: Sequence[str], name_tokens: Sequence[str], config: MatchConfig
) -> tuple[float, list[str]]:
    """All-pairs trigram bonus between query tokens and name tokens.

    A query token may earn a bonus against several name tokens. Pairs at or
    above the upper bound (exact hits) are left to BM25.
    """
    sc = config.scoring
    bonus = 0.0
    pairs: list[str] = []
    for qt in query_tokens:
        for nt in name_tokens:
            sim = similarity(qt, nt)
            if sc.fuzzy_min_similarity < sim < sc.fuzzy_max_similarity:
                bonus += sim * sc.fuzzy_weight
                pairs.append(f"{qt}≈{nt}")
    return bonus, pairs


def score_candidate(
    query_tokens: Sequence[str],
    expanded_tokens: Sequence[str],
    indexed: IndexedEntry,
    index: CatalogIndex,
    config: MatchConfig,
    position: int = 0,
) -> ScoredCandidate:
    """Combine exact BM25, synonym BM25, fuzzy bonus, name boost and category boost."""
    sc = config.scoring
    doc_length = len(indexed.doc_tokens)

    exact_bm25 = index.bm25(query_tokens, indexed.doc_tf, doc_length)
    synonym_bm25 = index.bm25(expanded_tokens, indexed.doc_tf, doc_length)
    bonus, fuzzy_terms = fuzzy_bonus(query_tokens, indexed.name_tokens, config)
    name_boost = (
        index.bm25(query_tokens, indexed.name_tf, len(indexed.name_tokens))
        * sc.name_boost
    )

    score = (
        exact_bm25
        + (synonym_bm25 - exact_bm25) * sc.synonym_weight
        + bonus
        + name_boost
    )

    category_boost = any(
        qt in indexed.category or qt in indexed.category_path for qt in query_tokens
    )
    if category_boost:
        score *= sc.category_boost

    query_set = set(query_tokens)
    details = MatchDetails(
        exact_terms=[qt for qt in query_tokens if qt in indexed.doc_tf],
        fuzzy_terms=fuzzy_terms,
        synonym_terms=[
            et for et in expanded_tokens if et not in query_set and et in indexed.doc_tf
        ],
        category_boost=category_boost,
    )
    return ScoredCandidate(position=position, score=score, details=details)
