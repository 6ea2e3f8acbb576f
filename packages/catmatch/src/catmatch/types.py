"""Core types for the catmatch catalog matching engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from catmatch.schemas import CatalogEntry, RequestedItem


@dataclass(frozen=True)
class TermStatistics:
    document_frequency: int
    inverse_document_frequency: float


@dataclass
class MatchDetails:
    exact_terms: list[str] = field(default_factory=list)
    fuzzy_terms: list[str] = field(default_factory=list)
    synonym_terms: list[str] = field(default_factory=list)
    category_boost: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "exactTerms": list(self.exact_terms),
            "fuzzyTerms": list(self.fuzzy_terms),
            "synonymTerms": list(self.synonym_terms),
            "categoryBoost": self.category_boost,
        }


@dataclass
class ScoredCandidate:
    position: int  # index into the catalog snapshot
    score: float
    details: MatchDetails = field(default_factory=MatchDetails)


@dataclass(frozen=True)
class MatchResult:
    product: CatalogEntry
    score: float
    confidence: float
    match_details: MatchDetails


@dataclass(frozen=True)
class ItemMatch:
    """Outcome for a well-formed requested item. `matched_product` is None on no match."""

    requested_item: RequestedItem
    matched_product: CatalogEntry | None
    confidence: str
    quantity: int
    match_details: MatchDetails
    ok: Literal[True] = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "requestedItem": self.requested_item.to_dict(),
            "matchedProduct": (
                self.matched_product.to_dict() if self.matched_product else None
            ),
            "confidence": self.confidence,
            "quantity": self.quantity,
            "matchDetails": self.match_details.to_dict(),
        }


@dataclass(frozen=True)
class ItemError:
    """Outcome for a requested-item record that failed validation."""

    position: int
    error: str
    raw: Any = None
    ok: Literal[False] = False

    def to_dict(self) -> dict[str, Any]:
        return {"position": self.position, "error": self.error}


ItemOutcome = Union[ItemMatch, ItemError]
