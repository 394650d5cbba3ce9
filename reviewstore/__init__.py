"""Denormalized product/review tables with a bounded concurrent bulk loader."""

__version__ = "0.1.0"
