"""Parsing and concurrent bulk loading of the items and reviews files."""

from reviewstore.ingestion.models import IngestResult, RunStatus
from reviewstore.ingestion.pipeline import load_items, load_reviews

__all__ = ["IngestResult", "RunStatus", "load_items", "load_reviews"]
