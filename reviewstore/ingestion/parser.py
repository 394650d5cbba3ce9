"""Parsers for one line of the items or reviews newline-delimited JSON files.

Optional text fields that are absent, ``null`` or empty come back as
``None`` so the writer can leave the cell unset.
"""

from __future__ import annotations

import json
import re
from typing import Any

from reviewstore.errors import ParseError
from reviewstore.models import Item, Review

_INTEGER_TEXT = re.compile(r"\s*-?[0-9]{1,19}\s*")

# Instants renderable as YYYY-MM-DDTHH:MM:SSZ: 0001-01-01T00:00:00Z to 9999-12-31T23:59:59Z
MIN_REVIEW_TIME = -62135596800
MAX_REVIEW_TIME = 253402300799


def parse_item(line: str, line_number: int) -> Item:
    """Parse one items-file line.

    Args:
        line: Raw line containing one JSON object.
        line_number: 1-based line number, carried into errors.

    Returns:
        The parsed Item.

    Raises:
        ParseError: On malformed JSON, a missing ``asin`` or ``categories``,
            or a field of the wrong type.
    """
    data = _load_object(line, line_number)
    return Item(
        asin=_required_text(data, "asin", line_number),
        title=_optional_text(data, "title", line_number),
        image=_optional_text(data, "imUrl", line_number),
        categories=_categories(data, line_number),
        description=_optional_text(data, "description", line_number),
    )


def parse_review(line: str, line_number: int) -> Review:
    """Parse one reviews-file line.

    Args:
        line: Raw line containing one JSON object.
        line_number: 1-based line number, carried into errors.

    Returns:
        The parsed Review.

    Raises:
        ParseError: On malformed JSON, a missing ``reviewerID``, ``asin`` or
            ``unixReviewTime``, or a field of the wrong type.
    """
    data = _load_object(line, line_number)
    return Review(
        reviewer_id=_required_text(data, "reviewerID", line_number),
        asin=_required_text(data, "asin", line_number),
        unix_review_time=_review_time(data, line_number),
        reviewer_name=_optional_text(data, "reviewerName", line_number),
        overall=_rating(data, line_number),
        review_text=_optional_text(data, "reviewText", line_number),
        summary=_optional_text(data, "summary", line_number),
    )


def _load_object(line: str, line_number: int) -> dict[str, Any]:
    try:
        data = json.loads(line)
    except json.JSONDecodeError as exc:
        raise ParseError(line_number, f"malformed JSON: {exc.msg}") from exc
    except (ValueError, RecursionError) as exc:
        # over-long number literals and excessive nesting
        raise ParseError(line_number, f"unreadable JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(line_number, f"expected a JSON object, got {type(data).__name__}")
    return data


def _required_text(data: dict[str, Any], key: str, line_number: int) -> str:
    value = data.get(key)
    if value is None or value == "":
        raise ParseError(line_number, f"missing required field '{key}'")
    if not isinstance(value, str):
        raise ParseError(line_number, f"field '{key}' must be a string")
    return value


def _optional_text(data: dict[str, Any], key: str, line_number: int) -> str | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ParseError(line_number, f"field '{key}' must be a string")
    return value


def _categories(data: dict[str, Any], line_number: int) -> frozenset[str]:
    """Flatten ``[["a", "b"], ["a"]]`` into ``{"a", "b"}``."""
    if "categories" not in data:
        raise ParseError(line_number, "missing required field 'categories'")
    groups = data["categories"]
    if not isinstance(groups, list):
        raise ParseError(line_number, "field 'categories' must be an array of arrays")

    flattened: set[str] = set()
    for group in groups:
        if not isinstance(group, list):
            raise ParseError(line_number, "field 'categories' must be an array of arrays")
        for name in group:
            if not isinstance(name, str):
                raise ParseError(line_number, "category names must be strings")
            flattened.add(name)
    return frozenset(flattened)


def _review_time(data: dict[str, Any], line_number: int) -> int:
    value = data.get("unixReviewTime")
    if value is None:
        raise ParseError(line_number, "missing required field 'unixReviewTime'")
    # bool is an int subclass
    if isinstance(value, bool):
        raise ParseError(line_number, "field 'unixReviewTime' must be an integer")
    if isinstance(value, int):
        seconds = value
    elif isinstance(value, float) and value.is_integer():
        seconds = int(value)
    elif isinstance(value, str) and _INTEGER_TEXT.fullmatch(value):
        seconds = int(value)
    else:
        raise ParseError(line_number, f"field 'unixReviewTime' must be an integer, got {value!r}")

    if not MIN_REVIEW_TIME <= seconds <= MAX_REVIEW_TIME:
        raise ParseError(line_number, f"field 'unixReviewTime' out of range: {seconds}")
    return seconds


def _rating(data: dict[str, Any], line_number: int) -> float | None:
    value = data.get("overall")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(line_number, f"field 'overall' must be a number, got {value!r}")
    return float(value)
