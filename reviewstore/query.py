"""Read operations: one item, a reviewer's reviews, an item's reviews.

Each query is a single-partition read through a prepared statement. Rows
are rendered in the order the store returns them; the clustering keys
already put the newest review first.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta

from reviewstore.formatter import format_item, format_review
from reviewstore.lib.logging_config import get_logger
from reviewstore.session import Session
from reviewstore.store import Row

logger = get_logger("query")

NOT_EXISTS = "not exists"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def item(session: Session, asin: str) -> str:
    """Return the formatted item, or ``"not exists"`` if there is no such row."""
    store = session.store
    rows = store.execute(store.bind(session.statements.select_item, {"asin": asin}))
    row = next(iter(rows), None)
    if row is None:
        logger.info("item %s: not found", asin)
        return NOT_EXISTS
    return format_item(
        row["asin"],
        row.get("title"),
        row.get("image"),
        row.get("categories"),
        row.get("description"),
    )


def user_reviews(session: Session, reviewer_id: str) -> Iterator[str]:
    """Return the reviews written by ``reviewer_id``, newest first.

    The query runs immediately, so driver errors surface here; rows are
    rendered lazily as the returned iterator is consumed.
    """
    store = session.store
    rows = store.execute(
        store.bind(session.statements.select_user_reviews, {"reviewerid": reviewer_id})
    )
    return _render_reviews(rows)


def item_reviews(session: Session, asin: str) -> Iterator[str]:
    """Return the reviews written for ``asin``, newest first."""
    store = session.store
    rows = store.execute(store.bind(session.statements.select_item_reviews, {"asin": asin}))
    return _render_reviews(rows)


def _render_reviews(rows: Iterable[Row]) -> Iterator[str]:
    count = 0
    for row in rows:
        count += 1
        yield render_review(row)
    logger.info("total reviews: %d", count)


def render_review(row: Row) -> str:
    """Format one row of either review table."""
    overall = row.get("overall")
    return format_review(
        _EPOCH + timedelta(seconds=row["unixreviewtime"]),
        row["asin"],
        row["reviewerid"],
        row.get("reviewername"),
        # truncation toward zero
        int(overall) if overall is not None else None,
        row.get("summary"),
        row.get("description"),
    )
