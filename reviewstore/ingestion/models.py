"""Ingest run tracking: status, per-record failures and aggregate counts."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass, field

# Failures beyond this many are counted but not kept
MAX_KEPT_FAILURES: int = 100


class RunStatus(enum.Enum):
    """Status of an ingest run."""

    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class FailureKind(enum.Enum):
    """Why a record was not written."""

    PARSE = "parse"
    STORE = "store"
    INTERNAL = "internal"


@dataclass(frozen=True)
class RecordFailure:
    """A single record that could not be written.

    Attributes:
        line_number: 1-based input line number.
        kind: Parse, store or internal failure.
        message: Description of the failure.
    """

    line_number: int
    kind: FailureKind
    message: str


@dataclass
class IngestResult:
    """Aggregate result of one ``load_items`` / ``load_reviews`` run.

    Worker threads report through ``record_success`` and ``record_failure``;
    the line counters are only touched by the single reader thread.

    Attributes:
        run_id: Unique identifier for this run.
        kind: ``items`` or ``reviews``.
        source: Path of the input file.
        status: Final status of the run.
        lines_read: Non-blank lines handed to the worker pool.
        blank_lines: Blank lines skipped by the reader.
        records_loaded: Records whose every write completed.
        records_failed: Records rejected by the parser or the store.
        elapsed_seconds: Wall-clock duration of the run.
        failures: The first ``MAX_KEPT_FAILURES`` failures.
    """

    run_id: str
    kind: str
    source: str
    status: RunStatus = RunStatus.RUNNING
    lines_read: int = 0
    blank_lines: int = 0
    records_loaded: int = 0
    records_failed: int = 0
    elapsed_seconds: float = 0.0
    failures: list[RecordFailure] = field(default_factory=list)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False,
    )

    def record_success(self) -> None:
        with self._lock:
            self.records_loaded += 1

    def record_failure(self, failure: RecordFailure) -> None:
        with self._lock:
            self.records_failed += 1
            if len(self.failures) < MAX_KEPT_FAILURES:
                self.failures.append(failure)

    @property
    def records_unfinished(self) -> int:
        """Lines that were read but never reached a success or failure."""
        return self.lines_read - self.records_loaded - self.records_failed

    def summary(self) -> str:
        """Generate a human-readable run summary.

        Returns:
            Formatted summary string.
        """
        return (
            f"Ingest Run Summary ({self.run_id}):\n"
            f"  Kind:            {self.kind}\n"
            f"  Source:          {self.source}\n"
            f"  Status:          {self.status.value}\n"
            f"  Lines read:      {self.lines_read}\n"
            f"  Records loaded:  {self.records_loaded}\n"
            f"  Records failed:  {self.records_failed}\n"
            f"  Blank lines:     {self.blank_lines}\n"
            f"  Elapsed time:    {self.elapsed_seconds:.2f}s"
        )
