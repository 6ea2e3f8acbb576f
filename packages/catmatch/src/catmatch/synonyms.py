"""Domain thesaurus and one-level query expansion."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path

import structlog

from catmatch.config import DATA_DIR
from catmatch.errors import CatalogLoadError

log = structlog.get_logger()

DEFAULT_SYNONYMS_PATH = DATA_DIR / "synonyms.json"


def load_synonyms(path: str | Path | None = None) -> dict[str, list[str]]:
    """Load a synonym mapping (term -> list of phrases) from JSON.

    A missing bundled table yields an empty mapping; a missing file the
    caller named raises CatalogLoadError.
    """
    if not path:
        path = DEFAULT_SYNONYMS_PATH
        if not path.exists():
            log.warning("synonyms_file_not_found", path=str(path))
            return {}
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"synonym file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise CatalogLoadError(f"synonym file must hold a JSON object: {path}")
    mapping = {str(k).lower(): [str(p) for p in v] for k, v in data.items()}
    log.debug("synonyms_loaded", path=str(path), terms=len(mapping))
    return mapping


class SynonymExpander:
    """Expands a token set with every word of every synonym phrase.

    Expansion is one level deep: a synonym that is itself a key is not
    expanded further. The mapping is not assumed to be symmetric.
    """

    def __init__(self, synonyms: Mapping[str, Iterable[str]] | None = None) -> None:
        if synonyms is None:
            synonyms = load_synonyms()
        self._words: dict[str, tuple[str, ...]] = {}
        for term, phrases in synonyms.items():
            words: list[str] = []
            for phrase in phrases:
                words.extend(phrase.split())
            self._words[term] = tuple(words)

    def __len__(self) -> int:
        return len(self._words)

    def __contains__(self, term: object) -> bool:
        return term in self._words

    def expand(self, tokens: Iterable[str]) -> set[str]:
        return set(self.expand_ordered(tokens))

    def expand_ordered(self, tokens: Iterable[str]) -> list[str]:
        """Unique expansion in first-seen order: originals first, then synonyms."""
        tokens = list(tokens)
        expanded = dict.fromkeys(tokens)
        for token in tokens:
            expanded.update(dict.fromkeys(self._words.get(token, ())))
        return list(expanded)

    @classmethod
    def from_file(cls, path: str | Path | None = None) -> SynonymExpander:
        return cls(load_synonyms(path))
