"""Unit tests for the items and reviews line parsers."""

from __future__ import annotations

import json

import pytest

from reviewstore.errors import ParseError
from reviewstore.ingestion.parser import (
    MAX_REVIEW_TIME,
    MIN_REVIEW_TIME,
    parse_item,
    parse_review,
)
from reviewstore.models import Item, Review


def _line(**fields) -> str:
    return json.dumps(fields)


class TestParseItem:
    """Tests for parse_item()."""

    def test_full_record(self) -> None:
        item = parse_item(
            _line(
                asin="A1",
                title="T",
                imUrl="U",
                description="D",
                categories=[["C1"], ["C2", "C1"]],
            ),
            1,
        )

        assert item == Item(
            asin="A1",
            title="T",
            image="U",
            categories=frozenset({"C1", "C2"}),
            description="D",
        )

    def test_categories_are_flattened_and_deduplicated(self) -> None:
        item = parse_item(_line(asin="A1", categories=[["x", "y"], ["y", "z"], []]), 1)
        assert item.categories == frozenset({"x", "y", "z"})

    def test_empty_categories(self) -> None:
        item = parse_item(_line(asin="A1", categories=[]), 1)
        assert item.categories == frozenset()

    def test_absent_optional_fields_are_none(self) -> None:
        item = parse_item(_line(asin="A1", categories=[]), 1)
        assert item.title is None
        assert item.image is None
        assert item.description is None

    def test_empty_and_null_optional_fields_are_none(self) -> None:
        item = parse_item(
            _line(asin="A1", title="", imUrl=None, description="", categories=[]), 1,
        )
        assert (item.title, item.image, item.description) == (None, None, None)

    def test_missing_asin_raises(self) -> None:
        with pytest.raises(ParseError, match="asin") as excinfo:
            parse_item(_line(title="T", categories=[]), 7)
        assert excinfo.value.line_number == 7

    def test_empty_asin_raises(self) -> None:
        with pytest.raises(ParseError, match="asin"):
            parse_item(_line(asin="", categories=[]), 1)

    def test_missing_categories_raises(self) -> None:
        with pytest.raises(ParseError, match="categories"):
            parse_item(_line(asin="A1"), 1)

    @pytest.mark.parametrize(
        "categories",
        [
            "Books",
            ["Books", "Fiction"],
            [["Books"], "Fiction"],
            [["Books", 3]],
            {"a": ["b"]},
        ],
    )
    def test_wrong_categories_shape_raises(self, categories) -> None:
        with pytest.raises(ParseError):
            parse_item(_line(asin="A1", categories=categories), 1)

    def test_malformed_json_raises_with_line_number(self) -> None:
        with pytest.raises(ParseError, match="malformed JSON") as excinfo:
            parse_item('{"asin": "A1", ', 42)
        assert excinfo.value.line_number == 42
        assert "line 42" in str(excinfo.value)

    def test_non_object_raises(self) -> None:
        with pytest.raises(ParseError, match="JSON object"):
            parse_item('["A1"]', 1)

    def test_non_string_title_raises(self) -> None:
        with pytest.raises(ParseError, match="title"):
            parse_item(_line(asin="A1", title=12, categories=[]), 1)


class TestParseReview:
    """Tests for parse_review()."""

    def test_full_record(self) -> None:
        review = parse_review(
            _line(
                reviewerID="R1",
                asin="X",
                unixReviewTime=1392595200,
                reviewerName="Ann",
                overall=4.0,
                reviewText="Great",
                summary="Good",
            ),
            1,
        )

        assert review == Review(
            reviewer_id="R1",
            asin="X",
            unix_review_time=1392595200,
            reviewer_name="Ann",
            overall=4.0,
            review_text="Great",
            summary="Good",
        )

    def test_optional_fields_absent(self) -> None:
        review = parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=5), 1)
        assert review.reviewer_name is None
        assert review.overall is None
        assert review.review_text is None
        assert review.summary is None

    def test_integer_rating_becomes_float(self) -> None:
        review = parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=5, overall=3), 1)
        assert review.overall == 3.0
        assert isinstance(review.overall, float)

    def test_zero_rating_is_kept(self) -> None:
        review = parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=5, overall=0), 1)
        assert review.overall == 0.0

    def test_review_time_as_digit_string(self) -> None:
        review = parse_review(_line(reviewerID="R1", asin="X", unixReviewTime="1000"), 1)
        assert review.unix_review_time == 1000

    @pytest.mark.parametrize("missing", ["reviewerID", "asin", "unixReviewTime"])
    def test_missing_required_field_raises(self, missing: str) -> None:
        fields = {"reviewerID": "R1", "asin": "X", "unixReviewTime": 5}
        del fields[missing]
        with pytest.raises(ParseError, match=missing):
            parse_review(json.dumps(fields), 3)

    @pytest.mark.parametrize("value", ["yesterday", True, 1.5, [1]])
    def test_invalid_review_time_raises(self, value) -> None:
        with pytest.raises(ParseError, match="unixReviewTime"):
            parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=value), 1)

    def test_review_time_range_bounds_are_accepted(self) -> None:
        for seconds in (MIN_REVIEW_TIME, MAX_REVIEW_TIME):
            review = parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=seconds), 1)
            assert review.unix_review_time == seconds

    @pytest.mark.parametrize(
        "value",
        [10**12, MAX_REVIEW_TIME + 1, MIN_REVIEW_TIME - 1, 1e300, "1" * 20, "9" * 5000],
    )
    def test_review_time_out_of_range_raises(self, value) -> None:
        with pytest.raises(ParseError, match="unixReviewTime"):
            parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=value), 1)

    def test_overlong_number_literal_raises(self) -> None:
        line = '{"reviewerID": "R1", "asin": "X", "unixReviewTime": 5, "overall": ' + "9" * 5000 + "}"
        with pytest.raises(ParseError, match="unreadable JSON") as excinfo:
            parse_review(line, 7)
        assert excinfo.value.line_number == 7

    def test_deep_nesting_raises(self) -> None:
        line = '{"reviewerID": "R1", "asin": "X", "unixReviewTime": 5, "summary": '
        line += "[" * 100_000 + "]" * 100_000 + "}"
        with pytest.raises(ParseError, match="unreadable JSON") as excinfo:
            parse_review(line, 8)
        assert excinfo.value.line_number == 8

    @pytest.mark.parametrize("value", ["five", True, [5]])
    def test_invalid_rating_raises(self, value) -> None:
        with pytest.raises(ParseError, match="overall"):
            parse_review(_line(reviewerID="R1", asin="X", unixReviewTime=5, overall=value), 1)


class TestToRow:
    """Tests for the bind values produced by the records."""

    def test_item_row_omits_unset_cells(self) -> None:
        row = Item(asin="A1").to_row()
        assert row == {"asin": "A1"}

    def test_item_row_includes_categories_as_set(self) -> None:
        row = Item(asin="A1", categories=frozenset({"a"})).to_row()
        assert row["categories"] == {"a"}

    def test_review_row_keys_are_lower_case_columns(self) -> None:
        row = Review("R1", "X", 5, "Ann", 4.0, "text", "sum").to_row()
        assert row == {
            "reviewerid": "R1",
            "unixreviewtime": 5,
            "asin": "X",
            "reviewername": "Ann",
            "overall": 4.0,
            "description": "text",
            "summary": "sum",
        }

    def test_review_row_omits_absent_optionals(self) -> None:
        row = Review("R1", "X", 5).to_row()
        assert set(row) == {"reviewerid", "unixreviewtime", "asin"}
