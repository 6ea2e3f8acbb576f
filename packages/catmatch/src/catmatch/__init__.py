"""catmatch - Procurement catalog matching engine."""

from catmatch.config import MatchConfig
from catmatch.index import CatalogIndex
from catmatch.matcher import MatcherStats, ProductMatcher
from catmatch.schemas import CatalogEntry, RequestedItem
from catmatch.types import ItemError, ItemMatch, MatchDetails, MatchResult

__all__ = [
    "CatalogEntry",
    "CatalogIndex",
    "ItemError",
    "ItemMatch",
    "MatchConfig",
    "MatchDetails",
    "MatchResult",
    "MatcherStats",
    "ProductMatcher",
    "RequestedItem",
]
