"""Main orchestration: index build, query scoring, ranking, batch matching."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from catmatch.config import MatchConfig
from catmatch.errors import InvalidRequestError
from catmatch.index import CatalogIndex
from catmatch.schemas import CatalogEntry, RequestedItem
from catmatch.scoring import score_candidate
from catmatch.synonyms import SynonymExpander, load_synonyms
from catmatch.tokenize import tokenize
from catmatch.types import (
    ItemError,
    ItemMatch,
    ItemOutcome,
    MatchDetails,
    MatchResult,
    ScoredCandidate,
)

log = structlog.get_logger()


@dataclass
class MatcherStats:
    """Statistics collected during matching."""

    catalog_size: int = 0
    terms: int = 0
    queries: int = 0
    comparisons: int = 0
    items: int = 0
    matched: int = 0
    no_match: int = 0
    invalid: int = 0


class ProductMatcher:
    """Ranks catalog entries against free-text procurement requests.

    The active CatalogIndex is replaced wholesale by `build_index`; match
    calls read the reference once, so a concurrent rebuild never exposes a
    half-built index. Counter updates on `stats` are serialized by a lock.
    """

    def __init__(
        self,
        catalog: Iterable[CatalogEntry] | None = None,
        config: MatchConfig | None = None,
        synonyms: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self.config = config or MatchConfig()
        if synonyms is None:
            synonyms = load_synonyms(self.config.synonyms_path)
        self.expander = SynonymExpander(synonyms)
        self.stats = MatcherStats()
        self._stats_lock = threading.Lock()
        self._index = CatalogIndex.build([], self.config.bm25)
        if catalog is not None:
            self.build_index(catalog)

    @property
    def index(self) -> CatalogIndex:
        return self._index

    def initialize(self, catalog: Iterable[CatalogEntry]) -> None:
        self.build_index(catalog)

    def build_index(self, catalog: Iterable[CatalogEntry]) -> CatalogIndex:
        """Build a fresh index from the full catalog and make it active."""
        catalog = list(catalog)
        log.info("build_index_start", count=len(catalog))
        index = CatalogIndex.build(catalog, self.config.bm25)
        self._index = index
        with self._stats_lock:
            self.stats.catalog_size = len(index)
            self.stats.terms = len(index.term_stats)
        log.info(
            "build_index_done",
            count=len(index),
            terms=len(index.term_stats),
            avg_doc_length=round(index.avg_doc_length, 3),
        )
        return index

    def match(self, search_text: str, top_k: int | None = None) -> list[MatchResult]:
        """Rank catalog entries for a query, best first, at most `top_k`."""
        if not isinstance(search_text, str):
            raise TypeError(
                f"search_text must be str, got {type(search_text).__name__}"
            )
        if top_k is None:
            top_k = self.config.default_top_k
        if top_k < 0:
            raise ValueError(f"top_k must be >= 0, got {top_k}")

        index = self._index
        self._count(queries=1)
        if len(index) == 0 or top_k == 0:
            return []

        query_tokens = tokenize(search_text)
        if not query_tokens:
            return []
        expanded_tokens = self.expander.expand_ordered(query_tokens)

        floor = self.config.scoring.relevance_floor
        scored: list[ScoredCandidate] = []
        for position, indexed in enumerate(index.entries):
            sc = score_candidate(
                query_tokens, expanded_tokens, indexed, index, self.config, position
            )
            if sc.score > floor:
                scored.append(sc)
        self._count(comparisons=len(index))

        # Stable sort: ties keep catalog order
        scored.sort(key=lambda x: x.score, reverse=True)
        scored = scored[:top_k]

        results = [
            MatchResult(
                product=index.entries[sc.position].entry,
                score=sc.score,
                confidence=self._confidence(sc.score, len(query_tokens)),
                match_details=sc.details,
            )
            for sc in scored
        ]
        log.debug(
            "match_done",
            query=search_text,
            tokens=query_tokens,
            retained=len(results),
            best_id=results[0].product.id if results else None,
            best_score=round(results[0].score, 4) if results else None,
        )
        return results

    def match_items(
        self, items: Sequence[RequestedItem | Mapping[str, Any]]
    ) -> list[ItemOutcome]:
        """Match each requested item to its single best product, preserving order."""
        outcomes: list[ItemOutcome] = []
        for position, raw in enumerate(items):
            self._count(items=1)
            try:
                item = RequestedItem.parse(dict(raw) if isinstance(raw, Mapping) else raw)
            except InvalidRequestError as e:
                log.warning("invalid_requested_item", position=position, error=str(e))
                self._count(invalid=1)
                outcomes.append(ItemError(position=position, error=str(e), raw=raw))
                continue
            outcomes.append(self.match_item(item))

        log.info(
            "match_items_done",
            items=len(outcomes),
            matched=sum(1 for o in outcomes if o.ok and o.matched_product is not None),
        )
        return outcomes

    def match_item(self, item: RequestedItem) -> ItemMatch:
        matches = self.match(item.search_text(), top_k=1)
        if matches:
            best = matches[0]
            self._count(matched=1)
            return ItemMatch(
                requested_item=item,
                matched_product=best.product,
                confidence=f"{best.confidence:.2f}",
                quantity=item.quantity,
                match_details=best.match_details,
            )

        self._count(no_match=1)
        log.debug("no_match", name=item.name)
        return ItemMatch(
            requested_item=item,
            matched_product=None,
            confidence="0.00",
            quantity=item.quantity,
            match_details=MatchDetails(),
        )

    def _count(self, **deltas: int) -> None:
        with self._stats_lock:
            for name, delta in deltas.items():
                setattr(self.stats, name, getattr(self.stats, name) + delta)

    def _confidence(self, score: float, n_query_tokens: int) -> float:
        """Heuristic normalization of raw score into [base, cap]; not a probability."""
        c = self.config.confidence
        max_possible = n_query_tokens * c.per_term_ceiling
        return min(c.cap, c.base + (score / max_possible) * c.scale)
