"""Tests for logging configuration."""

import json

import pytest
import structlog

from catmatch.logging import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_format(caplog):
    caplog.set_level("INFO")
    configure_logging("INFO", "json")

    structlog.get_logger("catmatch.test").info("catalog_loaded", count=3)

    record = json.loads(caplog.records[-1].getMessage())
    assert record["event"] == "catalog_loaded"
    assert record["count"] == 3
    assert record["level"] == "info"
    assert "timestamp" in record


def test_format_from_env(monkeypatch, caplog):
    caplog.set_level("INFO")
    monkeypatch.setenv("LOG_FORMAT", "JSON")
    configure_logging()

    structlog.get_logger("catmatch.test").info("match_items_done", items=2)

    assert json.loads(caplog.records[-1].getMessage())["items"] == 2


def test_unknown_format():
    with pytest.raises(ValueError, match="unknown log format"):
        configure_logging("INFO", "xml")
