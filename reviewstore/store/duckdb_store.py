"""Embedded DuckDB backend with the same three tables.

Used for local runs and the test suite. It reproduces the store semantics
the loader and queries rely on:

- inserts are upserts on the primary key, so re-running an ingest is
  idempotent at the row level;
- columns without a bound value are left untouched instead of being
  overwritten with NULL;
- a partition select returns rows in clustering order.

DuckDB connections are not safe for concurrent use, so statements are
serialised on the single connection. Asynchronous execution runs on a
small thread pool and returns ``concurrent.futures.Future`` handles.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import duckdb

from reviewstore.errors import ConfigError, StoreError
from reviewstore.lib.logging_config import get_logger
from reviewstore.schema import Statement, StatementKind, Table
from reviewstore.store.base import missing_key_columns

logger = get_logger("store.duckdb")

DEFAULT_EXECUTOR_WORKERS = 4


@dataclass(frozen=True)
class DuckDBPrepared:
    """A statement definition qualified with the target schema."""

    statement: Statement
    qualified_table: str


@dataclass(frozen=True)
class DuckDBBound:
    """SQL text and positional parameters ready to execute."""

    sql: str
    params: tuple[Any, ...]


class DuckDBStore:
    """Store backed by one DuckDB connection."""

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        schema: str,
        *,
        executor_workers: int = DEFAULT_EXECUTOR_WORKERS,
    ) -> None:
        self._conn = conn
        self._schema = schema
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=executor_workers,
            thread_name_prefix="duckdb-store",
        )

    def _qualify(self, table: Table) -> str:
        return f"{self._schema}.{table.name}"

    def create_table(self, table: Table) -> None:
        column_defs = ", ".join(f"{c.name} {c.sql_type}" for c in table.columns)
        ddl = (
            f"CREATE TABLE IF NOT EXISTS {self._qualify(table)} "
            f"({column_defs}, PRIMARY KEY ({', '.join(table.primary_key)}))"
        )
        with self._lock:
            self._conn.execute(ddl)

    def prepare(self, statement: Statement) -> DuckDBPrepared:
        return DuckDBPrepared(statement, self._qualify(statement.table))

    def bind(self, prepared: DuckDBPrepared, values: Mapping[str, Any]) -> DuckDBBound:
        table = prepared.statement.table
        if prepared.statement.kind is StatementKind.SELECT:
            return DuckDBBound(
                _select_sql(table, prepared.qualified_table),
                (values[table.partition_key.lower()],),
            )

        missing = missing_key_columns(table, values)
        if missing:
            msg = f"Cannot insert into {table.name} without key column(s) {missing}"
            raise StoreError(msg)

        columns = [c for c in table.columns if values.get(c.key) is not None]
        params = tuple(_encode(values[c.key]) for c in columns)
        return DuckDBBound(
            _upsert_sql(table, prepared.qualified_table, [c.name for c in columns]),
            params,
        )

    def execute(self, bound: DuckDBBound) -> list[dict[str, Any]]:
        with self._lock:
            cursor = self._conn.execute(bound.sql, list(bound.params))
            if cursor.description is None:
                return []
            names = [d[0].lower() for d in cursor.description]
            return [dict(zip(names, row)) for row in cursor.fetchall()]

    def execute_async(self, bound: DuckDBBound) -> Future:
        return self._executor.submit(self.execute, bound)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self._conn.close()


def _select_sql(table: Table, qualified: str) -> str:
    sql = f"SELECT * FROM {qualified} WHERE {table.partition_key} = ?"
    if table.clustering:
        order = ", ".join(f"{c} {direction}" for c, direction in table.clustering)
        sql += f" ORDER BY {order}"
    return sql


def _upsert_sql(table: Table, qualified: str, column_names: list[str]) -> str:
    markers = ", ".join("?" for _ in column_names)
    sql = (
        f"INSERT INTO {qualified} ({', '.join(column_names)}) VALUES ({markers}) "
        f"ON CONFLICT ({', '.join(table.primary_key)}) "
    )
    updates = [
        f"{name} = excluded.{name}"
        for name in column_names
        if name.lower() not in table.key_columns
    ]
    if updates:
        return sql + "DO UPDATE SET " + ", ".join(updates)
    return sql + "DO NOTHING"


def _encode(value: Any) -> Any:
    # set<text> is stored as a sorted VARCHAR[]
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


def open_store(
    database: str,
    user: str | None,
    password: str | None,
    keyspace: str,
) -> DuckDBStore:
    """Open (or create) a DuckDB database and its keyspace schema.

    Credentials are accepted for signature compatibility with the
    Cassandra connector and ignored.

    Args:
        database: Database file path, or ``:memory:``.
        user: Ignored.
        password: Ignored.
        keyspace: Schema that holds the tables; created if missing.

    Returns:
        A connected DuckDBStore.

    Raises:
        ConfigError: If the keyspace is not a plain identifier.
    """
    if not keyspace or not keyspace.isidentifier():
        msg = f"Keyspace must be a plain identifier, got {keyspace!r}"
        raise ConfigError(msg)

    if database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)

    logger.info("Opening DuckDB at %s", database)
    conn = duckdb.connect(database)
    conn.execute(f"CREATE SCHEMA IF NOT EXISTS {keyspace}")
    return DuckDBStore(conn, keyspace)
