"""Store backends and the contract they implement."""

from __future__ import annotations

from reviewstore.errors import ConfigError
from reviewstore.store.base import Completion, Connector, Row, Store

__all__ = ["Completion", "Connector", "Row", "Store", "connector_for"]


def connector_for(backend: str) -> Connector:
    """Return the connector for a backend name.

    Backend modules are imported on demand so that the embedded backend
    works without loading the Cassandra driver.

    Raises:
        ConfigError: If the backend name is unknown.
    """
    if backend == "cassandra":
        from reviewstore.store import cassandra_store

        return cassandra_store.open_store
    if backend == "duckdb":
        from reviewstore.store import duckdb_store

        return duckdb_store.open_store
    msg = f"Unknown store backend: {backend!r}"
    raise ConfigError(msg)
