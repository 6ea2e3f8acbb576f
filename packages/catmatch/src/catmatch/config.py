"""Configuration for the catmatch catalog matching engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DATA_DIR = Path(os.environ.get("CATMATCH_DATA") or Path(__file__).parent / "data")


@dataclass
class BM25Config:
    k1: float = 1.5  # term-frequency saturation
    b: float = 0.75  # document-length normalization


@dataclass
class ScoringConfig:
    synonym_weight: float = 0.5
    name_boost: float = 2.0
    fuzzy_weight: float = 2.0
    fuzzy_min_similarity: float = 0.4  # exclusive
    fuzzy_max_similarity: float = 1.0  # exclusive, exact hits are scored by BM25
    category_boost: float = 1.1
    relevance_floor: float = 0.1


@dataclass
class ConfidenceConfig:
    per_term_ceiling: float = 8.0
    base: float = 0.5
    scale: float = 0.5
    cap: float = 0.99


@dataclass
class MatchConfig:
    bm25: BM25Config = field(default_factory=BM25Config)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    default_top_k: int = 5
    synonyms_path: str | None = None  # defaults to DATA_DIR / "synonyms.json"
