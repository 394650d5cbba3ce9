"""Bulk ingest of the items and reviews files.

A single reader streams the input line by line and hands each non-blank
line to a bounded worker pool. A worker parses its line, binds the insert
statement(s), issues the writes asynchronously and waits for them before
it returns:

- an item is one write into ``items``;
- a review is two writes, one into ``user_reviews`` and one into
  ``item_reviews``, with identical values. The record succeeds only if
  both writes complete.

A bad record is logged with its line number and counted; it never stops
the run. Only failing to open or read the input, or exceeding the
cumulative timeout, ends an ingest early.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Callable
from functools import partial
from pathlib import Path

from reviewstore.errors import IngestTimeout, ParseError, StoreError
from reviewstore.ingestion.models import (
    FailureKind,
    IngestResult,
    RecordFailure,
    RunStatus,
)
from reviewstore.ingestion.parser import parse_item, parse_review
from reviewstore.ingestion.pool import BoundedWorkerPool
from reviewstore.lib.config_loader import IngestSettings
from reviewstore.lib.logging_config import get_logger
from reviewstore.session import PreparedStatements, Session
from reviewstore.store import Completion, Store

logger = get_logger("ingestion.pipeline")

# (line, line_number, result) -> None
LineTask = Callable[[str, int, IngestResult], None]


def load_items(
    session: Session,
    path: str | Path,
    *,
    settings: IngestSettings | None = None,
) -> IngestResult:
    """Insert every valid record of an items file into ``items``.

    Args:
        session: A connected, initialized session.
        path: Newline-delimited JSON items file.
        settings: Pool size and timeouts. Defaults to ``IngestSettings()``.

    Returns:
        IngestResult with success and failure counts.

    Raises:
        StoreError: If the session is not connected or not initialized.
        OSError: If the input cannot be opened or read.
        IngestTimeout: If the run did not drain within the timeout.
    """
    task = partial(_write_item, session.store, session.statements)
    return _run_ingest(path, kind="items", task=task, settings=settings)


def load_reviews(
    session: Session,
    path: str | Path,
    *,
    settings: IngestSettings | None = None,
) -> IngestResult:
    """Insert every valid record of a reviews file into both review tables.

    Args:
        session: A connected, initialized session.
        path: Newline-delimited JSON reviews file.
        settings: Pool size and timeouts. Defaults to ``IngestSettings()``.

    Returns:
        IngestResult with success and failure counts.

    Raises:
        StoreError: If the session is not connected or not initialized.
        OSError: If the input cannot be opened or read.
        IngestTimeout: If the run did not drain within the timeout.
    """
    task = partial(_write_review, session.store, session.statements)
    return _run_ingest(path, kind="reviews", task=task, settings=settings)


def _write_item(
    store: Store,
    statements: PreparedStatements,
    line: str,
    line_number: int,
    result: IngestResult,
) -> None:
    try:
        item = parse_item(line, line_number)
    except ParseError as exc:
        _record_parse_failure(result, exc)
        return

    try:
        bound = store.bind(statements.insert_item, item.to_row())
        store.execute_async(bound).result()
    except Exception as exc:
        _record_store_failure(result, line_number, exc)
        return
    result.record_success()


def _write_review(
    store: Store,
    statements: PreparedStatements,
    line: str,
    line_number: int,
    result: IngestResult,
) -> None:
    try:
        review = parse_review(line, line_number)
    except ParseError as exc:
        _record_parse_failure(result, exc)
        return

    row = review.to_row()
    completions: list[Completion] = []
    errors: list[Exception] = []
    for statement in (statements.insert_user_review, statements.insert_item_review):
        try:
            completions.append(store.execute_async(store.bind(statement, row)))
        except Exception as exc:
            errors.append(exc)

    # Wait for every issued write even when another one failed
    for completion in completions:
        try:
            completion.result()
        except Exception as exc:
            errors.append(exc)
    if errors:
        _record_store_failure(result, line_number, *errors)
        return
    result.record_success()


def _run_line(task: LineTask, line: str, line_number: int, result: IngestResult) -> None:
    """Run one line task; anything it lets escape still counts as a failure."""
    try:
        task(line, line_number, result)
    except Exception as exc:
        logger.exception(
            "Unexpected failure on line %d", line_number,
            extra={"line_number": line_number, "run_id": result.run_id},
        )
        result.record_failure(
            RecordFailure(line_number, FailureKind.INTERNAL, f"{type(exc).__name__}: {exc}")
        )


def _record_parse_failure(result: IngestResult, exc: ParseError) -> None:
    logger.warning(
        "Skipping line %d: %s", exc.line_number, exc.cause,
        extra={"line_number": exc.line_number, "run_id": result.run_id},
    )
    result.record_failure(RecordFailure(exc.line_number, FailureKind.PARSE, exc.cause))


def _record_store_failure(result: IngestResult, line_number: int, *causes: Exception) -> None:
    error = StoreError("; ".join(f"{type(c).__name__}: {c}" for c in causes), line_number=line_number)
    logger.warning(
        "Write failed: %s", error,
        extra={"line_number": line_number, "run_id": result.run_id},
    )
    result.record_failure(RecordFailure(line_number, FailureKind.STORE, str(error)))


def _run_ingest(
    path: str | Path,
    *,
    kind: str,
    task: LineTask,
    settings: IngestSettings | None,
) -> IngestResult:
    """Stream ``path`` through a bounded pool running ``task`` per line."""
    settings = settings or IngestSettings()
    path = Path(path)
    result = IngestResult(run_id=uuid.uuid4().hex, kind=kind, source=str(path))
    start_time = time.monotonic()
    deadline = start_time + settings.timeout_seconds

    logger.info(
        "Starting %s ingest from %s (run %s, %d workers)",
        kind, path, result.run_id, settings.workers,
    )

    pool = BoundedWorkerPool(
        workers=settings.workers,
        queue_size=settings.queue_size,
        name=f"ingest-{kind}",
    )
    try:
        with open(path, encoding="utf-8") as source:
            submitted_all = _submit_lines(source, pool, task, result, deadline)
    except BaseException:
        # Input failure: drop queued work and let in-flight writes settle
        pool.shutdown(deadline=time.monotonic(), grace=settings.grace_seconds)
        raise

    drained = pool.shutdown(
        deadline=deadline if submitted_all else time.monotonic(),
        grace=settings.grace_seconds,
    )
    result.elapsed_seconds = time.monotonic() - start_time

    if not (submitted_all and drained):
        result.status = RunStatus.TIMED_OUT
        msg = (
            f"{kind} ingest exceeded {settings.timeout_seconds:.0f}s: "
            f"{result.records_loaded} loaded, {result.records_failed} failed, "
            f"{result.records_unfinished} unfinished"
        )
        logger.error(msg)
        raise IngestTimeout(msg, result)

    result.status = RunStatus.COMPLETED
    logger.info(
        "Inserted %d %s (%d failed) in %.2fs",
        result.records_loaded, kind, result.records_failed, result.elapsed_seconds,
    )
    return result


def _submit_lines(
    source,
    pool: BoundedWorkerPool,
    task: LineTask,
    result: IngestResult,
    deadline: float,
) -> bool:
    """Feed lines to the pool; return False if the deadline stopped the reader."""
    for line_number, line in enumerate(source, start=1):
        if not line.strip():
            result.blank_lines += 1
            continue
        result.lines_read += 1
        if not pool.submit(_run_line, task, line, line_number, result, deadline=deadline):
            logger.error("Ingest deadline reached while reading line %d", line_number)
            return False
    return True
