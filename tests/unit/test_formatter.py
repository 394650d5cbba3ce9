"""Unit tests for the fixed item and review text renderings."""

from __future__ import annotations

from datetime import UTC, datetime

from reviewstore.formatter import (
    format_categories,
    format_instant,
    format_item,
    format_review,
)


class TestFormatItem:
    """Tests for format_item()."""

    def test_full_item(self) -> None:
        text = format_item("A1", "T", "U", {"C2", "C1"}, "D")
        assert text == (
            "asin: A1\n"
            "title: T\n"
            "image: U\n"
            "categories: [C1, C2]\n"
            "description: D\n"
        )

    def test_missing_optionals_render_null(self) -> None:
        text = format_item("A1", None, None, None, None)
        assert text == (
            "asin: A1\n"
            "title: null\n"
            "image: null\n"
            "categories: []\n"
            "description: null\n"
        )


class TestFormatCategories:
    """Tests for the pinned set rendering."""

    def test_sorted_comma_space_separated(self) -> None:
        assert format_categories(["b", "a", "c"]) == "[a, b, c]"

    def test_empty(self) -> None:
        assert format_categories(set()) == "[]"

    def test_unset(self) -> None:
        assert format_categories(None) == "[]"


class TestFormatReview:
    """Tests for format_review()."""

    def test_full_review(self) -> None:
        text = format_review(
            datetime(2014, 2, 17, tzinfo=UTC), "X", "R1", "Ann", 4, "Good", "Great",
        )
        assert text == (
            "time: 2014-02-17T00:00:00Z, asin: X, reviewerID: R1, reviewerName: Ann, "
            "rating: 4, summary: Good, reviewText: Great\n"
        )

    def test_missing_optionals_render_null(self) -> None:
        text = format_review(
            datetime.fromtimestamp(0, UTC), "X", "R1", None, None, None, None,
        )
        assert text == (
            "time: 1970-01-01T00:00:00Z, asin: X, reviewerID: R1, reviewerName: null, "
            "rating: null, summary: null, reviewText: null\n"
        )

    def test_instant_has_no_fraction(self) -> None:
        assert format_instant(datetime.fromtimestamp(1392595200, UTC)) == "2014-02-17T00:00:00Z"
