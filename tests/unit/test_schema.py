"""Unit tests for table definitions and statement rendering."""

from __future__ import annotations

from reviewstore import schema


class TestTables:
    """Tests for the three table layouts."""

    def test_items_ddl(self) -> None:
        assert schema.ITEMS.cql_ddl() == (
            "CREATE TABLE IF NOT EXISTS items (asin text, title text, image text, "
            "categories set<text>, description text, PRIMARY KEY (asin))"
        )

    def test_user_reviews_clustering(self) -> None:
        ddl = schema.USER_REVIEWS.cql_ddl()
        assert "PRIMARY KEY (reviewerID, unixReviewTime, asin)" in ddl
        assert ddl.endswith("WITH CLUSTERING ORDER BY (unixReviewTime DESC, asin ASC)")

    def test_item_reviews_clustering(self) -> None:
        ddl = schema.ITEM_REVIEWS.cql_ddl()
        assert "PRIMARY KEY (asin, unixReviewTime, reviewerID)" in ddl
        assert ddl.endswith("WITH CLUSTERING ORDER BY (unixReviewTime DESC, reviewerID ASC)")

    def test_review_tables_share_non_key_columns(self) -> None:
        def _values(table):
            return [c.name for c in table.columns if c.key not in table.key_columns]

        assert _values(schema.USER_REVIEWS) == _values(schema.ITEM_REVIEWS) == [
            "reviewerName", "overall", "description", "summary",
        ]

    def test_key_columns_are_case_folded(self) -> None:
        assert schema.USER_REVIEWS.key_columns == {"reviewerid", "unixreviewtime", "asin"}


class TestStatements:
    """Tests for the six compiled statements."""

    def test_six_statements(self) -> None:
        assert len(schema.STATEMENTS) == 6
        assert len({s.name for s in schema.STATEMENTS}) == 6

    def test_insert_cql(self) -> None:
        assert schema.INSERT_ITEM.cql() == (
            "INSERT INTO items (asin, title, image, categories, description) "
            "VALUES (?, ?, ?, ?, ?)"
        )

    def test_select_cql(self) -> None:
        assert schema.SELECT_USER_REVIEWS.cql() == (
            "SELECT * FROM user_reviews WHERE reviewerID = ?"
        )
        assert schema.SELECT_ITEM.cql() == "SELECT * FROM items WHERE asin = ?"
