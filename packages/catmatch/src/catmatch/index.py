"""BM25 term statistics over a catalog snapshot."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from catmatch.config import BM25Config
from catmatch.schemas import CatalogEntry
from catmatch.tokenize import category_text, document_text, tokenize
from catmatch.types import TermStatistics

log = structlog.get_logger()


@dataclass(frozen=True)
class IndexedEntry:
    """Token views of one catalog entry, computed once at build time."""

    entry: CatalogEntry
    doc_tokens: tuple[str, ...]
    doc_tf: Counter[str]
    name_tokens: tuple[str, ...]
    name_tf: Counter[str]
    category: str
    category_path: str

    @classmethod
    def from_entry(cls, entry: CatalogEntry) -> IndexedEntry:
        doc_tokens = tokenize(document_text(entry))
        name_tokens = tokenize(entry.name or "")
        category, category_path = category_text(entry)
        return cls(
            entry=entry,
            doc_tokens=tuple(doc_tokens),
            doc_tf=Counter(doc_tokens),
            name_tokens=tuple(name_tokens),
            name_tf=Counter(name_tokens),
            category=category,
            category_path=category_path,
        )


class CatalogIndex:
    """Immutable catalog snapshot with document frequencies and IDF.

    Never updated in place; a changed catalog needs a new index.
    """

    def __init__(
        self,
        entries: Sequence[IndexedEntry],
        term_stats: dict[str, TermStatistics],
        avg_doc_length: float,
        config: BM25Config | None = None,
    ) -> None:
        self.entries: tuple[IndexedEntry, ...] = tuple(entries)
        self.term_stats = term_stats
        self.avg_doc_length = avg_doc_length
        self.config = config or BM25Config()

    @classmethod
    def build(
        cls, catalog: Iterable[CatalogEntry], config: BM25Config | None = None
    ) -> CatalogIndex:
        """Tokenize every entry and compute df/idf and average document length."""
        entries = [IndexedEntry.from_entry(e) for e in catalog]
        n_docs = len(entries)

        df: Counter[str] = Counter()
        total_length = 0
        for ie in entries:
            total_length += len(ie.doc_tokens)
            df.update(ie.doc_tf.keys())

        avg_doc_length = total_length / max(1, n_docs)
        term_stats = {
            term: TermStatistics(
                document_frequency=count,
                inverse_document_frequency=math.log(
                    (n_docs - count + 0.5) / (count + 0.5) + 1
                ),
            )
            for term, count in df.items()
        }
        log.debug(
            "catalog_index_built",
            documents=n_docs,
            terms=len(term_stats),
            avg_doc_length=round(avg_doc_length, 3),
        )
        return cls(entries, term_stats, avg_doc_length, config)

    def __len__(self) -> int:
        return len(self.entries)

    def idf(self, term: str) -> float:
        stats = self.term_stats.get(term)
        return stats.inverse_document_frequency if stats else 0.0

    def bm25(
        self, query_tokens: Iterable[str], tf: Counter[str], doc_length: int
    ) -> float:
        """BM25 of the query terms against one document's term frequencies.

        Each query token contributes once per occurrence in `query_tokens`;
        terms never seen in the catalog contribute nothing.
        """
        k1 = self.config.k1
        b = self.config.b
        score = 0.0
        for qt in query_tokens:
            stats = self.term_stats.get(qt)
            if stats is None:
                continue
            freq = tf.get(qt, 0)
            if freq == 0:
                continue
            numerator = stats.inverse_document_frequency * freq * (k1 + 1)
            denominator = freq + k1 * (1 - b + b * (doc_length / self.avg_doc_length))
            score += numerator / denominator
        return score
