"""Table layout for the three query patterns and the statements run against them.

Every table is keyed so that its query is a single-partition read:

- ``items``: one row per product, keyed by ``asin``.
- ``user_reviews``: partitioned by reviewer, newest review first.
- ``item_reviews``: partitioned by product, newest review first.

Column names are written the way the dataset spells them. The store folds
unquoted identifiers to lower case, so rows come back keyed by ``Column.key``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class Column:
    """A table column.

    Attributes:
        name: Column name as written in DDL.
        cql_type: Cassandra type.
        sql_type: Equivalent type for the embedded backend.
    """

    name: str
    cql_type: str
    sql_type: str

    @property
    def key(self) -> str:
        """Case-folded name used for bind values and result rows."""
        return self.name.lower()


@dataclass(frozen=True)
class Table:
    """A table with a single-column partition key and ordered clustering keys.

    Attributes:
        name: Table name.
        columns: All columns in insert order.
        partition_key: Column selecting the partition.
        clustering: ``(column, "ASC" | "DESC")`` pairs, outermost first.
    """

    name: str
    columns: tuple[Column, ...]
    partition_key: str
    clustering: tuple[tuple[str, str], ...] = ()

    @property
    def primary_key(self) -> tuple[str, ...]:
        return (self.partition_key, *(col for col, _ in self.clustering))

    @property
    def key_columns(self) -> frozenset[str]:
        """Case-folded names of every primary key column."""
        return frozenset(name.lower() for name in self.primary_key)

    def cql_ddl(self) -> str:
        """Render the ``CREATE TABLE IF NOT EXISTS`` statement for Cassandra."""
        column_defs = ", ".join(f"{c.name} {c.cql_type}" for c in self.columns)
        if self.clustering:
            key = f"{self.partition_key}, {', '.join(c for c, _ in self.clustering)}"
        else:
            key = self.partition_key
        ddl = f"CREATE TABLE IF NOT EXISTS {self.name} ({column_defs}, PRIMARY KEY ({key}))"
        if self.clustering:
            order = ", ".join(f"{c} {direction}" for c, direction in self.clustering)
            ddl += f" WITH CLUSTERING ORDER BY ({order})"
        return ddl


class StatementKind(enum.Enum):
    """What a compiled statement does."""

    INSERT = "insert"
    SELECT = "select"


@dataclass(frozen=True)
class Statement:
    """A parameterized statement against one table.

    Inserts bind every column of the table (absent values stay unset);
    selects bind the partition key and return the whole partition.
    """

    name: str
    kind: StatementKind
    table: Table

    def cql(self) -> str:
        """Render the statement as CQL with positional markers."""
        if self.kind is StatementKind.INSERT:
            names = ", ".join(c.name for c in self.table.columns)
            markers = ", ".join("?" for _ in self.table.columns)
            return f"INSERT INTO {self.table.name} ({names}) VALUES ({markers})"
        return f"SELECT * FROM {self.table.name} WHERE {self.table.partition_key} = ?"


_TEXT = ("text", "VARCHAR")

_REVIEW_VALUE_COLUMNS: tuple[Column, ...] = (
    Column("reviewerName", *_TEXT),
    Column("overall", "float", "FLOAT"),
    Column("description", *_TEXT),
    Column("summary", *_TEXT),
)

ITEMS = Table(
    name="items",
    columns=(
        Column("asin", *_TEXT),
        Column("title", *_TEXT),
        Column("image", *_TEXT),
        Column("categories", "set<text>", "VARCHAR[]"),
        Column("description", *_TEXT),
    ),
    partition_key="asin",
)

USER_REVIEWS = Table(
    name="user_reviews",
    columns=(
        Column("reviewerID", *_TEXT),
        Column("unixReviewTime", "bigint", "BIGINT"),
        Column("asin", *_TEXT),
        *_REVIEW_VALUE_COLUMNS,
    ),
    partition_key="reviewerID",
    clustering=(("unixReviewTime", "DESC"), ("asin", "ASC")),
)

ITEM_REVIEWS = Table(
    name="item_reviews",
    columns=(
        Column("asin", *_TEXT),
        Column("unixReviewTime", "bigint", "BIGINT"),
        Column("reviewerID", *_TEXT),
        *_REVIEW_VALUE_COLUMNS,
    ),
    partition_key="asin",
    clustering=(("unixReviewTime", "DESC"), ("reviewerID", "ASC")),
)

TABLES: tuple[Table, ...] = (ITEMS, USER_REVIEWS, ITEM_REVIEWS)

SELECT_ITEM = Statement("select_item", StatementKind.SELECT, ITEMS)
INSERT_ITEM = Statement("insert_item", StatementKind.INSERT, ITEMS)
INSERT_USER_REVIEW = Statement("insert_user_review", StatementKind.INSERT, USER_REVIEWS)
INSERT_ITEM_REVIEW = Statement("insert_item_review", StatementKind.INSERT, ITEM_REVIEWS)
SELECT_USER_REVIEWS = Statement("select_user_reviews", StatementKind.SELECT, USER_REVIEWS)
SELECT_ITEM_REVIEWS = Statement("select_item_reviews", StatementKind.SELECT, ITEM_REVIEWS)

STATEMENTS: tuple[Statement, ...] = (
    SELECT_ITEM,
    INSERT_ITEM,
    INSERT_USER_REVIEW,
    INSERT_ITEM_REVIEW,
    SELECT_USER_REVIEWS,
    SELECT_ITEM_REVIEWS,
)
