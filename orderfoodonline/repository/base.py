"""Repository interfaces and the MongoDB connection they share."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from orderfoodonline import metrics
from orderfoodonline.models import Migration, Order, Product


class ProductRepository(ABC):
    """Access to products and the migration records that seed them."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Return every product."""

    @abstractmethod
    def find_product_by_id(self, product_id: str) -> Product | None:
        """Return the product with this ID, or None if there is none."""

    @abstractmethod
    def bulk_insert_products(self, products: list[Product]) -> None:
        """Insert several products in one operation."""

    @abstractmethod
    def get_applied_migrations(self) -> list[Migration]:
        """Return every recorded migration."""

    @abstractmethod
    def insert_migration(self, migration: Migration) -> None:
        """Record a new migration."""

    @abstractmethod
    def update_migration(self, migration: Migration) -> None:
        """Update the status of a recorded migration."""


class OrderRepository(ABC):
    """Storage for placed orders."""

    @abstractmethod
    def place_order(self, order: Order) -> Order:
        """Store the order and return it with its new ID."""


class CouponRepository(ABC):
    """Lookup of coupon codes."""

    @abstractmethod
    def validate_coupon_code(self, coupon_code: str) -> bool:
        """Return whether the coupon code may be applied."""


def _elapsed(start: float) -> float:
    return time.perf_counter() - start


class Repository:
    """A MongoDB client and the database the service works in."""

    def __init__(self, client, database):
        self.client = client
        self.database = database

    @classmethod
    def connect(cls, db_type: str, host: str, port: int, database_name: str) -> "Repository":
        """Connect to MongoDB and check that the server answers."""
        start = time.perf_counter()
        uri = f"{db_type}://{host}:{port}"
        try:
            client = MongoClient(uri)
        except PyMongoError as exc:
            metrics.record_database_query("connect", "database", "error", _elapsed(start))
            raise ConnectionError(f"error connecting to mongodb: {exc}") from exc

        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            metrics.record_database_query("ping", "database", "error", _elapsed(start))
            client.close()
            raise ConnectionError(f"error pinging mongodb: {exc}") from exc

        metrics.record_database_query("connect", "database", "success", _elapsed(start))
        metrics.set_active_connections(1)
        return cls(client, client[database_name])

    def collection(self, name: str):
        """Return the named collection of the database."""
        return self.database[name]

    def close(self) -> None:
        """Disconnect from MongoDB."""
        start = time.perf_counter()
        try:
            self.client.close()
        except PyMongoError:
            metrics.record_database_query("disconnect", "database", "error", _elapsed(start))
            raise
        metrics.record_database_query("disconnect", "database", "success", _elapsed(start))
        metrics.set_active_connections(0)

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()