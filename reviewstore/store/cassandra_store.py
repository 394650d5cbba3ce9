"""Cassandra / DataStax Astra backend built on the DataStax Python driver."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cassandra import InvalidRequest
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster, NoHostAvailable, ResponseFuture, ResultSet, Session
from cassandra.query import UNSET_VALUE, BoundStatement, PreparedStatement, dict_factory

from reviewstore.errors import ConfigError, StoreError
from reviewstore.lib.logging_config import get_logger
from reviewstore.schema import Statement, StatementKind, Table
from reviewstore.store.base import missing_key_columns

logger = get_logger("store.cassandra")


@dataclass(frozen=True)
class CassandraPrepared:
    """A server-side prepared statement together with its definition."""

    statement: Statement
    prepared: PreparedStatement


class CassandraStore:
    """Store backed by a live driver session.

    Rows are produced by ``dict_factory``, so every row is a dict keyed by
    the server's (lower-cased) column names.
    """

    def __init__(self, cluster: Cluster, session: Session) -> None:
        self._cluster = cluster
        self._session = session
        self._session.row_factory = dict_factory

    def create_table(self, table: Table) -> None:
        self._session.execute(table.cql_ddl())

    def prepare(self, statement: Statement) -> CassandraPrepared:
        return CassandraPrepared(statement, self._session.prepare(statement.cql()))

    def bind(self, prepared: CassandraPrepared, values: Mapping[str, Any]) -> BoundStatement:
        """Bind values in declared column order.

        Insert columns without a value are bound as ``UNSET_VALUE`` so the
        row is written without that cell instead of with a null tombstone.
        """
        table = prepared.statement.table
        if prepared.statement.kind is StatementKind.SELECT:
            return prepared.prepared.bind([values[table.partition_key.lower()]])

        missing = missing_key_columns(table, values)
        if missing:
            msg = f"Cannot insert into {table.name} without key column(s) {missing}"
            raise StoreError(msg)
        return prepared.prepared.bind(
            [_encode(values.get(c.key, UNSET_VALUE)) for c in table.columns]
        )

    def execute(self, bound: BoundStatement) -> ResultSet:
        return self._session.execute(bound)

    def execute_async(self, bound: BoundStatement) -> ResponseFuture:
        return self._session.execute_async(bound)

    def close(self) -> None:
        self._cluster.shutdown()


def _encode(value: Any) -> Any:
    if value is None:
        return UNSET_VALUE
    if isinstance(value, frozenset):
        return set(value)
    return value


def open_store(
    bundle_path: str,
    user: str | None,
    password: str | None,
    keyspace: str,
) -> CassandraStore:
    """Connect to an Astra database through its secure connect bundle.

    Args:
        bundle_path: Path to the secure connect bundle zip.
        user: Client id.
        password: Client secret.
        keyspace: Keyspace holding the tables.

    Returns:
        A connected CassandraStore.

    Raises:
        ConfigError: If the bundle is missing or the keyspace is unknown.
        StoreError: If no host could be reached.
    """
    if not bundle_path or not Path(bundle_path).is_file():
        msg = f"Secure connect bundle not found: {bundle_path!r}"
        raise ConfigError(msg)

    auth_provider = None
    if user is not None:
        auth_provider = PlainTextAuthProvider(username=user, password=password or "")

    cluster = Cluster(
        cloud={"secure_connect_bundle": str(bundle_path)},
        auth_provider=auth_provider,
    )
    try:
        session = cluster.connect(keyspace)
    except InvalidRequest as exc:
        cluster.shutdown()
        msg = f"Unknown keyspace {keyspace!r}: {exc}"
        raise ConfigError(msg) from exc
    except NoHostAvailable as exc:
        cluster.shutdown()
        msg = f"Could not reach the database: {exc}"
        raise StoreError(msg) from exc

    logger.info("Connected to keyspace %s", keyspace)
    return CassandraStore(cluster, session)
