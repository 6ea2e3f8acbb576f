"""Free-text tokenization for catalog indexing and queries."""

from __future__ import annotations

import re

from catmatch.config import DATA_DIR
from catmatch.schemas import CatalogEntry

_NON_TOKEN_CHARS = re.compile(r"[^a-z0-9\s\-]")
_SEPARATORS = re.compile(r"[\s\-]+")


def _load_word_list(filename: str) -> frozenset[str]:
    path = DATA_DIR / filename
    if not path.exists():
        return frozenset()
    return frozenset(
        line.strip().lower() for line in path.read_text().splitlines() if line.strip()
    )


STOPWORDS: frozenset[str] = _load_word_list("stopwords.txt")


def tokenize(text: str) -> list[str]:
    """Lower-case, strip punctuation, split on whitespace and hyphens.

    Tokens of length <= 1 and stopwords are dropped. Order and duplicates are
    preserved since term frequency depends on them.
    """
    s = _NON_TOKEN_CHARS.sub(" ", text.lower())
    return [t for t in _SEPARATORS.split(s) if len(t) > 1 and t not in STOPWORDS]


def document_text(entry: CatalogEntry) -> str:
    """Indexed text of a catalog entry: name, description, brand, category, path."""
    parts = [
        entry.name or "",
        entry.description or "",
        entry.brand or "",
        entry.category or "",
        entry.category_path or "",
    ]
    return " ".join(parts)


def category_text(entry: CatalogEntry) -> tuple[str, str]:
    """Lower-cased category and category path, for substring boosts."""
    return (entry.category or "").lower(), (entry.category_path or "").lower()
