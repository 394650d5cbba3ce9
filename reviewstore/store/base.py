"""The capability set the session, loader and queries need from a store."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol

from reviewstore.schema import Statement, Table

Row = Mapping[str, Any]


class Completion(Protocol):
    """Handle for an asynchronously executed statement."""

    def result(self) -> Any:
        """Block until the statement finished; raise the driver error if it failed."""
        ...


class Store(Protocol):
    """A connected store able to run the compiled statement set.

    Compiled statements and bound statements are opaque to callers. Result
    rows are mappings keyed by lower-cased column name and are yielded in the
    order the store returns them.
    """

    def create_table(self, table: Table) -> None: ...

    def prepare(self, statement: Statement) -> Any: ...

    def bind(self, prepared: Any, values: Mapping[str, Any]) -> Any:
        """Bind values by lower-cased column name; missing columns stay unset."""
        ...

    def execute(self, bound: Any) -> Iterable[Row]: ...

    def execute_async(self, bound: Any) -> Completion: ...

    def close(self) -> None: ...


# (location, user, password, keyspace) -> connected store
Connector = Callable[[str, "str | None", "str | None", str], Store]


def missing_key_columns(table: Table, values: Mapping[str, Any]) -> list[str]:
    """Return the primary key columns that have no bound value."""
    return sorted(
        key for key in table.key_columns if values.get(key) is None
    )
