"""Character trigram similarity for typo-tolerant token matching."""

from __future__ import annotations


def trigrams(s: str) -> set[str]:
    padded = f"  {s} "
    return {padded[i : i + 3] for i in range(len(padded) - 2)}


def similarity(a: str, b: str) -> float:
    """Jaccard overlap of padded trigram sets, 1.0 for identical strings."""
    if a == b:
        return 1.0
    tri_a = trigrams(a)
    tri_b = trigrams(b)
    union = len(tri_a | tri_b)
    if union == 0:
        return 0.0
    return len(tri_a & tri_b) / union
