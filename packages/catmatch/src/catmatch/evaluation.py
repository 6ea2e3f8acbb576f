"""Evaluation of ranking quality against labeled queries."""

from __future__ import annotations

import csv
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from catmatch.config import MatchConfig
from catmatch.matcher import ProductMatcher
from catmatch.schemas import CatalogEntry


@dataclass
class EvalMetrics:
    total: int = 0
    top1_correct: int = 0
    hits_at_k: int = 0
    no_match: int = 0
    accuracy: float = 0.0
    recall_at_k: float = 0.0
    mrr: float = 0.0
    misses: list[str] = field(default_factory=list)


@dataclass
class LabeledQuery:
    query: str
    expected_id: str


def load_labeled_queries(path: str | Path) -> list[LabeledQuery]:
    """Load labeled queries from CSV (query, expected_id)."""
    path = Path(path)
    queries: list[LabeledQuery] = []
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            queries.append(LabeledQuery(
                query=row["query"].strip(),
                expected_id=row["expected_id"].strip(),
            ))
    return queries


def evaluate(
    catalog: Sequence[CatalogEntry],
    queries: Sequence[LabeledQuery],
    config: MatchConfig | None = None,
    k: int = 5,
    matcher: ProductMatcher | None = None,
) -> EvalMetrics:
    """Run every labeled query through the matcher and score the rankings."""
    if matcher is None:
        matcher = ProductMatcher(catalog, config)
    metrics = EvalMetrics(total=len(queries))
    reciprocal_sum = 0.0

    for lq in queries:
        results = matcher.match(lq.query, top_k=k)
        if not results:
            metrics.no_match += 1
            metrics.misses.append(lq.query)
            continue

        ranked_ids = [r.product.id for r in results]
        if ranked_ids[0] == lq.expected_id:
            metrics.top1_correct += 1
        else:
            metrics.misses.append(lq.query)

        if lq.expected_id in ranked_ids:
            metrics.hits_at_k += 1
            reciprocal_sum += 1.0 / (ranked_ids.index(lq.expected_id) + 1)

    if metrics.total > 0:
        metrics.accuracy = metrics.top1_correct / metrics.total
        metrics.recall_at_k = metrics.hits_at_k / metrics.total
        metrics.mrr = reciprocal_sum / metrics.total

    return metrics
