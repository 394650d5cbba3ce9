"""Session lifecycle and the compiled statement set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from reviewstore import schema
from reviewstore.errors import ConfigError, StoreError
from reviewstore.lib.logging_config import get_logger
from reviewstore.store import Connector, Store, connector_for

logger = get_logger("session")


@dataclass(frozen=True)
class PreparedStatements:
    """Handles for the six compiled statements.

    Built once by ``Session.initialize`` and only read afterwards, so it can
    be shared by every ingest worker without locking.
    """

    select_item: Any
    insert_item: Any
    insert_user_review: Any
    insert_item_review: Any
    select_user_reviews: Any
    select_item_reviews: Any


class Session:
    """Owns one store connection and its prepared statements.

    Args:
        connector: Callable that opens the store. Defaults to the
            Cassandra connector.
    """

    def __init__(self, connector: Connector | None = None) -> None:
        self._connector = connector
        self._store: Store | None = None
        self._statements: PreparedStatements | None = None

    @property
    def connected(self) -> bool:
        return self._store is not None

    @property
    def store(self) -> Store:
        """The connected store.

        Raises:
            StoreError: If the session is not connected.
        """
        if self._store is None:
            msg = "Session is not connected"
            raise StoreError(msg)
        return self._store

    @property
    def statements(self) -> PreparedStatements:
        """The compiled statement set.

        Raises:
            StoreError: If ``initialize`` has not run on this connection.
        """
        if self._statements is None:
            msg = "Session is not initialized; call initialize() first"
            raise StoreError(msg)
        return self._statements

    def connect(
        self,
        bundle_path: str,
        user: str | None,
        password: str | None,
        keyspace: str,
    ) -> None:
        """Open the store. A second call while connected only logs a warning.

        Raises:
            ConfigError: If the parameters are invalid or the keyspace is unknown.
        """
        if self._store is not None:
            logger.warning("Store is already connected; ignoring connect()")
            return
        if not keyspace:
            msg = "Keyspace must not be empty"
            raise ConfigError(msg)

        connector = self._connector or connector_for("cassandra")
        logger.info("Connecting to store (keyspace=%s)...", keyspace)
        self._store = connector(bundle_path, user, password, keyspace)
        logger.info("Connecting to store... Done")

    def close(self) -> None:
        """Release the store. A second call only logs a warning."""
        if self._store is None:
            logger.warning("Store connection is already closed")
            return
        logger.info("Closing store connection...")
        store, self._store, self._statements = self._store, None, None
        store.close()
        logger.info("Closing store connection... Done")

    def create_tables(self) -> None:
        """Create the three tables if they do not exist yet."""
        store = self.store
        for table in schema.TABLES:
            store.create_table(table)
            logger.info("created table: %s", table.name)

    def initialize(self) -> None:
        """Compile the six statements and keep their handles."""
        store = self.store
        self._statements = PreparedStatements(
            **{s.name: store.prepare(s) for s in schema.STATEMENTS}
        )
        logger.info("Prepared %d statements", len(schema.STATEMENTS))
