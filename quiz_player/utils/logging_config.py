"""Logging configuration helpers for the quiz player."""

from __future__ import annotations

import logging
from logging import Logger


def configure_logging(level: int = logging.INFO) -> Logger:
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    # httpx logs every request at INFO; the submit log line already covers it.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logging.getLogger("quiz_player")
