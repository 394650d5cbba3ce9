"""Error taxonomy for session setup, record parsing, store access and ingest."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewstore.ingestion.models import IngestResult


class ReviewStoreError(Exception):
    """Base class for all reviewstore errors."""


class ConfigError(ReviewStoreError, ValueError):
    """Invalid session parameters or configuration values."""


class ParseError(ReviewStoreError, ValueError):
    """A single input line could not be turned into a record.

    Attributes:
        line_number: 1-based line number in the input file.
        cause: Human-readable reason the line was rejected.
    """

    def __init__(self, line_number: int, cause: str) -> None:
        super().__init__(f"line {line_number}: {cause}")
        self.line_number = line_number
        self.cause = cause


class StoreError(ReviewStoreError):
    """Driver or session failure while talking to the store.

    Attributes:
        line_number: Input line the failed write belonged to, if any.
    """

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class IngestTimeout(ReviewStoreError, TimeoutError):
    """The ingest did not drain within its cumulative timeout.

    Attributes:
        result: Partial counts at the moment the ingest gave up.
    """

    def __init__(self, message: str, result: IngestResult) -> None:
        super().__init__(message)
        self.result = result
