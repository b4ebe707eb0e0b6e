import uuid

import pytest
from pymongo.errors import PyMongoError

from orderfoodonline import metrics
from orderfoodonline.models import Order, OrderItem, Product
from orderfoodonline.repository.base import Repository
from orderfoodonline.repository.orders import MongoOrderRepository


class FakeCollection:
    def __init__(self, error=None):
        self.documents = []
        self.error = error

    def insert_one(self, document):
        if self.error is not None:
            raise self.error
        self.documents.append(document)


def _make(collection):
    return MongoOrderRepository(Repository(client=None, database={"orders": collection}))


def _order():
    return Order(
        items=[OrderItem("1", 2)],
        products=[Product("1", "Chicken Waffle", 12.99, "Waffle")],
    )


def test_place_order_assigns_uuid_and_stores_document():
    collection = FakeCollection()
    order = _order()

    placed = _make(collection).place_order(order)

    assert placed is order
    assert str(uuid.UUID(placed.id)) == placed.id
    assert collection.documents == [placed.to_dict()]


def test_place_order_gives_distinct_ids():
    repo = _make(FakeCollection())
    first = repo.place_order(_order())
    second = repo.place_order(_order())
    assert first.id != second.id
    assert len({first.id, second.id}) == 2


def test_place_order_records_success_metric():
    before = metrics.DATABASE_QUERY_TOTAL.value("insert_one", "orders", "success")
    _make(FakeCollection()).place_order(_order())
    assert metrics.DATABASE_QUERY_TOTAL.value("insert_one", "orders", "success") == before + 1


def test_place_order_propagates_database_error():
    before = metrics.DATABASE_QUERY_TOTAL.value("insert_one", "orders", "error")
    repo = _make(FakeCollection(error=PyMongoError("failed to save order")))

    with pytest.raises(PyMongoError, match="failed to save order"):
        repo.place_order(_order())

    assert metrics.DATABASE_QUERY_TOTAL.value("insert_one", "orders", "error") == before + 1