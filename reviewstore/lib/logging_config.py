"""Logging configuration for the review store loader and query tools.

Text output is the default; JSON output emits one object per line so that
ingest runs can be shipped to a log collector and filtered by line number.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

ROOT_LOGGER_NAME = "reviewstore"


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted string with standard fields.
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "component": ROOT_LOGGER_NAME,
        }

        if hasattr(record, "line_number"):
            log_entry["line_number"] = record.line_number
        if hasattr(record, "run_id"):
            log_entry["run_id"] = record.run_id
        if hasattr(record, "extra_data"):
            log_entry["data"] = record.extra_data

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(log_entry, default=str)


def setup_logging(
    *,
    level: int | str = logging.INFO,
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return the package logger.

    Writes to stderr so that stdout stays reserved for query output and
    ingest summaries.

    Args:
        level: Logging level, as an int or a name such as "DEBUG".
        json_format: Emit JSON lines instead of plain text.

    Returns:
        Configured logger instance.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the reviewstore namespace.

    Args:
        name: The module name for the child logger.

    Returns:
        A child logger that inherits the package configuration.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
