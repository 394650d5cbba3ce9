"""Shared test fixtures for the review store loader and queries."""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from pathlib import Path
from typing import Any

import pytest

from reviewstore.api import ReviewStore
from reviewstore.lib.config_loader import IngestSettings
from reviewstore.lib.logging_config import ROOT_LOGGER_NAME
from reviewstore.schema import Statement, StatementKind, Table
from reviewstore.session import Session
from reviewstore.store.duckdb_store import open_store as open_duckdb

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Undo setup_logging() so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Input files
# ---------------------------------------------------------------------------


@pytest.fixture
def write_jsonl(tmp_path: Path) -> Callable[..., Path]:
    """Write records (dicts or raw strings) as a newline-delimited JSON file.

    Returns:
        Factory ``(name, records) -> Path``.
    """

    def _write(name: str, records: Iterable[dict[str, Any] | str]) -> Path:
        path = tmp_path / name
        lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def small_ingest() -> IngestSettings:
    """A small pool so tests stay fast and deterministic."""
    return IngestSettings(workers=4, queue_size=8, timeout_seconds=60.0, grace_seconds=5.0)


# ---------------------------------------------------------------------------
# In-memory store double
# ---------------------------------------------------------------------------


class RecordingStore:
    """Store double that records writes and serves canned select rows.

    Attributes:
        tables: Names of tables created, in order.
        prepared: Names of statements prepared, in order.
        writes: ``(table name, values)`` for every completed insert.
        rows: Canned rows per statement name, returned by ``execute``.
        executed: ``(statement name, values)`` for every synchronous execute.
        fail_tables: Inserts into these tables complete with an error.
        closed: Whether ``close`` was called.
    """

    def __init__(self) -> None:
        self.tables: list[str] = []
        self.prepared: list[str] = []
        self.writes: list[tuple[str, dict[str, Any]]] = []
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.fail_tables: set[str] = set()
        self.closed = False
        self._lock = threading.Lock()

    def create_table(self, table: Table) -> None:
        self.tables.append(table.name)

    def prepare(self, statement: Statement) -> Statement:
        self.prepared.append(statement.name)
        return statement

    def bind(self, prepared: Statement, values: dict[str, Any]) -> tuple[Statement, dict[str, Any]]:
        return prepared, dict(values)

    def execute(self, bound: tuple[Statement, dict[str, Any]]) -> list[dict[str, Any]]:
        statement, values = bound
        self.executed.append((statement.name, values))
        return list(self.rows.get(statement.name, []))

    def execute_async(self, bound: tuple[Statement, dict[str, Any]]) -> Future:
        statement, values = bound
        future: Future = Future()
        if statement.kind is StatementKind.INSERT and statement.table.name in self.fail_tables:
            future.set_exception(RuntimeError(f"write timeout on {statement.table.name}"))
            return future
        with self._lock:
            self.writes.append((statement.table.name, values))
        future.set_result(None)
        return future

    def close(self) -> None:
        self.closed = True

    def writes_to(self, table: str) -> list[dict[str, Any]]:
        return [values for name, values in self.writes if name == table]


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def connector_calls() -> list[tuple[Any, ...]]:
    return []


@pytest.fixture
def session(recording_store: RecordingStore, connector_calls: list) -> Session:
    """A connected, initialized session over the recording store."""

    def _connector(*args: Any) -> RecordingStore:
        connector_calls.append(args)
        return recording_store

    session = Session(_connector)
    session.connect("bundle.zip", "client", "secret", "reviews")
    session.initialize()
    return session


# ---------------------------------------------------------------------------
# Embedded DuckDB store
# ---------------------------------------------------------------------------


@pytest.fixture
def duck_store(small_ingest: IngestSettings) -> ReviewStore:
    """A ReviewStore on an in-memory DuckDB database with tables ready.

    Yields:
        A connected, initialized ReviewStore.
    """
    store = ReviewStore(open_duckdb, ingest=small_ingest)
    store.connect(":memory:", None, None, "reviews")
    store.create_tables()
    store.initialize()
    yield store
    store.close()
