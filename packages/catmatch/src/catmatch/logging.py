"""Logging configuration for catmatch."""

import logging
import os

import structlog

LOG_FORMATS = ("console", "json")


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). If None, reads from
               LOG_LEVEL env var, defaulting to INFO.
        fmt: "console" for the colored dev renderer, "json" for one JSON
             object per line. If None, reads from LOG_FORMAT, defaulting
             to console.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)
    log_format = (fmt or os.environ.get("LOG_FORMAT", "console")).lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"unknown log format {log_format!r}, expected one of {LOG_FORMATS}")

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
