"""The public library surface: one object exposing every operation."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from reviewstore import query
from reviewstore.ingestion import IngestResult, load_items, load_reviews
from reviewstore.lib.config_loader import IngestSettings, StoreSettings
from reviewstore.session import Session
from reviewstore.store import Connector, connector_for


class ReviewStore:
    """Denormalized item/review tables and the operations over them.

    Typical use::

        store = ReviewStore()
        store.connect("secure-connect.zip", client_id, secret, "reviews")
        store.create_tables()
        store.initialize()
        store.load_items("meta.json")
        store.load_reviews("reviews.json")
        print(store.item("B000000001"))
        store.close()

    Args:
        connector: Opens the store on ``connect``. Defaults to Cassandra.
        ingest: Worker pool size and timeouts for the loaders.
    """

    def __init__(
        self,
        connector: Connector | None = None,
        *,
        ingest: IngestSettings | None = None,
    ) -> None:
        self.session = Session(connector)
        self.ingest = ingest or IngestSettings()

    @classmethod
    def open(
        cls,
        settings: StoreSettings,
        *,
        ingest: IngestSettings | None = None,
    ) -> ReviewStore:
        """Create and connect a store from configuration."""
        store = cls(connector_for(settings.backend), ingest=ingest)
        store.connect(settings.location, settings.username, settings.password, settings.keyspace)
        return store

    def __enter__(self) -> ReviewStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self.session.connected:
            self.close()

    def connect(self, bundle_path: str, user: str | None, password: str | None, keyspace: str) -> None:
        self.session.connect(bundle_path, user, password, keyspace)

    def close(self) -> None:
        self.session.close()

    def create_tables(self) -> None:
        self.session.create_tables()

    def initialize(self) -> None:
        self.session.initialize()

    def load_items(self, path: str | Path) -> IngestResult:
        return load_items(self.session, path, settings=self.ingest)

    def load_reviews(self, path: str | Path) -> IngestResult:
        return load_reviews(self.session, path, settings=self.ingest)

    def item(self, asin: str) -> str:
        return query.item(self.session, asin)

    def user_reviews(self, reviewer_id: str) -> Iterator[str]:
        return query.user_reviews(self.session, reviewer_id)

    def item_reviews(self, asin: str) -> Iterator[str]:
        return query.item_reviews(self.session, asin)
