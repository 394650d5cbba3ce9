"""Typed records parsed from the items and reviews corpora."""

from reviewstore.models.item import Item
from reviewstore.models.review import Review

__all__ = ["Item", "Review"]
