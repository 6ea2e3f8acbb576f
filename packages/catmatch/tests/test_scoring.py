"""Tests for candidate relevance scoring."""

import pytest

from catmatch.config import MatchConfig
from catmatch.index import CatalogIndex
from catmatch.scoring import fuzzy_bonus, score_candidate
from catmatch.synonyms import SynonymExpander
from catmatch.tokenize import tokenize


def _score(catalog, query, position=0, synonyms=None, config=None):
    config = config or MatchConfig()
    index = CatalogIndex.build(catalog, config.bm25)
    expander = SynonymExpander(synonyms if synonyms is not None else {})
    q = tokenize(query)
    return (
        score_candidate(q, expander.expand_ordered(q), index.entries[position], index, config),
        index,
    )


def test_exact_plus_name_boost(entry):
    result, index = _score([entry("a", "Floor Cleaner")], "floor")
    idf = index.idf("floor")
    # exact BM25 (idf) + name boost (idf * 2); no synonym gain, no fuzzy pairs
    assert result.score == pytest.approx(3 * idf)
    assert result.details.exact_terms == ["floor"]
    assert result.details.fuzzy_terms == []
    assert result.details.category_boost is False


def test_synonym_gain_counts_half(entry):
    catalog = [entry("a", "Trash Can Liners"), entry("b", "Paper Towels")]
    result, index = _score(catalog, "garbage", synonyms={"garbage": ["trash"]})
    ie = index.entries[0]
    synonym_bm25 = index.bm25(["trash"], ie.doc_tf, len(ie.doc_tokens))
    assert result.score == pytest.approx(0.5 * synonym_bm25)
    assert result.details.exact_terms == []
    assert result.details.synonym_terms == ["trash"]


def test_category_boost_multiplier(catalog):
    boosted, _ = _score(catalog, "safety gloves", position=4)
    config = MatchConfig()
    config.scoring.category_boost = 1.0
    plain, _ = _score(catalog, "safety gloves", position=4, config=config)
    assert boosted.details.category_boost is True
    assert boosted.score == pytest.approx(plain.score * 1.1)


def test_category_path_substring(catalog):
    result, _ = _score(catalog, "hand", position=4)
    assert result.details.category_boost is True


def test_category_boost_is_substring_not_token(entry):
    result, _ = _score([entry("a", "Mop", category="Janitorial")], "jan")
    assert result.details.category_boost is True


def test_no_category_boost_without_overlap(catalog):
    result, _ = _score(catalog, "gloves", position=0)
    assert result.details.category_boost is False


def test_fuzzy_bonus_all_pairs():
    bonus, pairs = fuzzy_bonus(["liner"], ["liners", "liners"], MatchConfig())
    assert pairs == ["liner≈liners", "liner≈liners"]
    assert bonus == pytest.approx(2 * 0.625 * 2)


def test_fuzzy_excludes_exact_and_weak():
    bonus, pairs = fuzzy_bonus(["gloves", "zzzz"], ["gloves"], MatchConfig())
    assert bonus == 0.0
    assert pairs == []


def test_fuzzy_band_is_configurable():
    config = MatchConfig()
    config.scoring.fuzzy_min_similarity = 0.7
    _, pairs = fuzzy_bonus(["liner"], ["liners"], config)
    assert pairs == []


def test_exact_terms_keep_query_order_and_duplicates(entry):
    result, _ = _score([entry("a", "Floor Cleaner")], "cleaner floor cleaner")
    assert result.details.exact_terms == ["cleaner", "floor", "cleaner"]


def test_unrelated_entry_scores_zero(entry):
    result, _ = _score([entry("a", "Copy Paper"), entry("b", "Mop")], "zzzz")
    assert result.score == 0.0
