"""Tests for the BM25 catalog index."""

import math
from collections import Counter

import pytest

from catmatch.config import BM25Config
from catmatch.index import CatalogIndex


def test_document_frequency_counts_entries_not_occurrences(entry):
    index = CatalogIndex.build([
        entry("a", "Floor Cleaner", description="floor floor"),
        entry("b", "Floor Mop"),
        entry("c", "Paper Towels"),
    ])
    assert index.term_stats["floor"].document_frequency == 2
    assert index.term_stats["paper"].document_frequency == 1


def test_idf_formula(entry):
    index = CatalogIndex.build([entry("a", "Floor Cleaner"), entry("b", "Floor Mop")])
    n, df = 2, 2
    expected = math.log((n - df + 0.5) / (df + 0.5) + 1)
    assert index.idf("floor") == pytest.approx(expected)
    assert index.idf("floor") > 0


def test_idf_higher_for_rarer_terms(entry):
    index = CatalogIndex.build([
        entry("a", "Floor Cleaner"), entry("b", "Floor Mop"), entry("c", "Floor Wax"),
    ])
    assert index.idf("mop") > index.idf("floor")


def test_average_document_length(entry):
    index = CatalogIndex.build([
        entry("a", "Floor Cleaner", category="Janitorial"),
        entry("b", "Mop"),
    ])
    assert index.avg_doc_length == pytest.approx(2.0)


def test_empty_catalog():
    index = CatalogIndex.build([])
    assert len(index) == 0
    assert index.term_stats == {}
    assert index.avg_doc_length == 0.0


def test_unknown_term_scores_zero(entry):
    index = CatalogIndex.build([entry("a", "Floor Cleaner")])
    ie = index.entries[0]
    assert index.bm25(["unseen"], ie.doc_tf, len(ie.doc_tokens)) == 0.0
    assert index.idf("unseen") == 0.0


def test_bm25_single_term_average_length(entry):
    index = CatalogIndex.build([entry("a", "Floor Cleaner")])
    ie = index.entries[0]
    # tf=1 and |doc| == avg, so the saturation term cancels to idf
    score = index.bm25(["floor"], ie.doc_tf, len(ie.doc_tokens))
    assert score == pytest.approx(math.log(0.5 / 1.5 + 1))


def test_bm25_respects_config(entry):
    catalog = [entry("a", "Floor Cleaner Floor"), entry("b", "Mop")]
    default = CatalogIndex.build(catalog)
    no_length_norm = CatalogIndex.build(catalog, BM25Config(k1=1.5, b=0.0))
    tf = Counter(["floor", "floor", "cleaner"])
    assert default.bm25(["floor"], tf, 3) != no_length_norm.bm25(["floor"], tf, 3)


def test_entries_keep_catalog_order_and_duplicates(entry):
    catalog = [entry("a", "Mop"), entry("a", "Mop"), entry("b", "Broom")]
    index = CatalogIndex.build(catalog)
    assert [ie.entry.id for ie in index.entries] == ["a", "a", "b"]
