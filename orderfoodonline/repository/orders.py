"""MongoDB storage for orders."""

from __future__ import annotations

import time
import uuid

from pymongo.errors import PyMongoError

from orderfoodonline import metrics
from orderfoodonline.models import Order
from orderfoodonline.repository.base import OrderRepository, Repository


class MongoOrderRepository(OrderRepository):
    """Stores orders in the ``orders`` collection."""

    def __init__(self, repository: Repository):
        self._collection = repository.collection("orders")

    def place_order(self, order: Order) -> Order:
        """Assign a new ID to the order, store it and return it."""
        start = time.perf_counter()
        order.id = str(uuid.uuid4())
        try:
            self._collection.insert_one(order.to_dict())
        except PyMongoError:
            metrics.record_database_query(
                "insert_one", "orders", "error", time.perf_counter() - start
            )
            raise
        metrics.record_database_query(
            "insert_one", "orders", "success", time.perf_counter() - start
        )
        return order