"""Fixed text renderings of items and reviews."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

NULL = "null"


def _text(value: object) -> str:
    return NULL if value is None else str(value)


def format_categories(categories: Iterable[str] | None) -> str:
    """Render a category set as ``[a, b]``, sorted, ``[]`` when empty or unset."""
    return "[" + ", ".join(sorted(categories or ())) + "]"


def format_instant(time: datetime) -> str:
    """Render a UTC datetime as an ISO-8601 instant, e.g. ``2014-02-17T00:00:00Z``."""
    return time.replace(tzinfo=None, microsecond=0).isoformat() + "Z"


def format_item(
    asin: str,
    title: str | None,
    image: str | None,
    categories: Iterable[str] | None,
    description: str | None,
) -> str:
    return (
        f"asin: {asin}\n"
        f"title: {_text(title)}\n"
        f"image: {_text(image)}\n"
        f"categories: {format_categories(categories)}\n"
        f"description: {_text(description)}\n"
    )


def format_review(
    time: datetime,
    asin: str,
    reviewer_id: str,
    reviewer_name: str | None,
    rating: int | None,
    summary: str | None,
    review_text: str | None,
) -> str:
    return (
        f"time: {format_instant(time)}"
        f", asin: {asin}"
        f", reviewerID: {reviewer_id}"
        f", reviewerName: {_text(reviewer_name)}"
        f", rating: {_text(rating)}"
        f", summary: {_text(summary)}"
        f", reviewText: {_text(review_text)}\n"
    )
