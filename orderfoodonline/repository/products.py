"""MongoDB storage for products and migration records."""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from pymongo.errors import PyMongoError

from orderfoodonline import metrics
from orderfoodonline.models import Migration, Product
from orderfoodonline.repository.base import ProductRepository, Repository


@dataclass
class _QueryOutcome:
    status: str = "success"


@contextmanager
def _timed_query(operation: str, collection: str) -> Iterator[_QueryOutcome]:
    """Record a database query's outcome and duration.

    Failures (driver errors and documents that cannot be decoded) are
    recorded as ``error`` and re-raised; otherwise the outcome's status is
    recorded.
    """
    outcome = _QueryOutcome()
    start = time.perf_counter()
    try:
        yield outcome
    except (PyMongoError, ValueError):
        metrics.record_database_query(
            operation, collection, "error", time.perf_counter() - start
        )
        raise
    metrics.record_database_query(
        operation, collection, outcome.status, time.perf_counter() - start
    )


class MongoProductRepository(ProductRepository):
    """Products in ``products`` and migration records in ``migrations``."""

    def __init__(self, repository: Repository):
        self._collection = repository.collection("products")
        self._migrations = repository.collection("migrations")

    def list_products(self) -> list[Product]:
        """Return every product in the catalog."""
        with _timed_query("find", "products"):
            return [Product.from_dict(doc) for doc in self._collection.find({})]

    def find_product_by_id(self, product_id: str) -> Product | None:
        """Return the product with this ID, or None if there is none."""
        with _timed_query("find_one", "products") as outcome:
            doc = self._collection.find_one({"id": product_id})
            if doc is None:
                outcome.status = "not_found"
                return None
            return Product.from_dict(doc)

    def bulk_insert_products(self, products: list[Product]) -> None:
        """Insert the products in one operation; nothing happens for an empty list."""
        if not products:
            return
        with _timed_query("insert_many", "products"):
            self._collection.insert_many([product.to_dict() for product in products])

    def get_applied_migrations(self) -> list[Migration]:
        """Return every recorded migration."""
        with _timed_query("find", "migrations"):
            return [Migration.from_dict(doc) for doc in self._migrations.find({})]

    def insert_migration(self, migration: Migration) -> None:
        """Record a new migration."""
        with _timed_query("insert_one", "migrations"):
            self._migrations.insert_one(migration.to_dict())

    def update_migration(self, migration: Migration) -> None:
        """Set the stored status of the migration with the same ID."""
        with _timed_query("update_one", "migrations"):
            self._migrations.update_one(
                {"id": migration.id}, {"$set": {"status": migration.status}}
            )