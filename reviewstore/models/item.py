"""Item record as parsed from one line of the items file."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Item:
    """A product from the items corpus.

    Optional text fields are ``None`` when the input omitted them or gave an
    empty string; the writer leaves those cells unset.

    Attributes:
        asin: Product identifier, the table's primary key.
        title: Product title.
        image: Image URL, read from the input field ``imUrl``.
        categories: Flattened, de-duplicated category names.
        description: Free-text product description.
    """

    asin: str
    title: str | None = None
    image: str | None = None
    categories: frozenset[str] = field(default_factory=frozenset)
    description: str | None = None

    def to_row(self) -> dict[str, Any]:
        """Return the column values to bind, omitting unset cells."""
        row: dict[str, Any] = {"asin": self.asin}
        if self.title is not None:
            row["title"] = self.title
        if self.image is not None:
            row["image"] = self.image
        if self.categories:
            row["categories"] = set(self.categories)
        if self.description is not None:
            row["description"] = self.description
        return row
