"""Tests for trigram similarity."""

import pytest

from catmatch.trigram import similarity, trigrams


def test_identical_is_one():
    for s in ("a", "gloves", "55gal", "x"):
        assert similarity(s, s) == 1.0


def test_trigrams_include_padding():
    assert trigrams("ab") == {"  a", " ab", "ab "}


@pytest.mark.parametrize(
    "a,b",
    [("glovs", "gloves"), ("cleaner", "cleaning"), ("mop", "mops"), ("a", "bb"), ("", "x")],
)
def test_symmetric(a, b):
    assert similarity(a, b) == similarity(b, a)


def test_known_value():
    # 4 shared trigrams out of 9 distinct
    assert similarity("glovs", "gloves") == pytest.approx(4 / 9)


def test_disjoint_is_zero():
    assert similarity("zzzz", "paper") == 0.0


def test_range():
    for a, b in [("liner", "liners"), ("floor", "flour"), ("bin", "binder")]:
        assert 0.0 <= similarity(a, b) <= 1.0
