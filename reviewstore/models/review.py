"""Review record as parsed from one line of the reviews file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Review:
    """A single review of one item by one reviewer.

    Attributes:
        reviewer_id: Reviewer identifier (``reviewerID``).
        asin: Reviewed product identifier.
        unix_review_time: Review time in whole seconds since the epoch.
        reviewer_name: Display name of the reviewer.
        overall: Star rating as given in the input.
        review_text: Body of the review (stored as ``description``).
        summary: Review headline.
    """

    reviewer_id: str
    asin: str
    unix_review_time: int
    reviewer_name: str | None = None
    overall: float | None = None
    review_text: str | None = None
    summary: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Return the column values shared by both review tables.

        Keys are the lower-cased column names. Absent optional values are
        omitted so the writer leaves those cells unset.
        """
        row: dict[str, Any] = {
            "reviewerid": self.reviewer_id,
            "unixreviewtime": self.unix_review_time,
            "asin": self.asin,
        }
        if self.reviewer_name is not None:
            row["reviewername"] = self.reviewer_name
        if self.overall is not None:
            row["overall"] = self.overall
        if self.review_text is not None:
            row["description"] = self.review_text
        if self.summary is not None:
            row["summary"] = self.summary
        return row
