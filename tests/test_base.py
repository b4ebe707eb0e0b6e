from unittest.mock import MagicMock, patch

import pytest
from pymongo.errors import ConfigurationError, ServerSelectionTimeoutError

from orderfoodonline import metrics
from orderfoodonline.models import Order
from orderfoodonline.repository.base import (
    CouponRepository,
    OrderRepository,
    ProductRepository,
    Repository,
)


def test_interfaces_cannot_be_instantiated():
    for interface in (ProductRepository, OrderRepository, CouponRepository):
        with pytest.raises(TypeError):
            interface()


def test_concrete_order_repository_works():
    class InMemoryOrders(OrderRepository):
        def place_order(self, order):
            order.id = "order-1"
            return order

    placed = InMemoryOrders().place_order(Order())
    assert placed.id == "order-1"


def test_collection_returns_named_collection():
    orders = object()
    repo = Repository(client=MagicMock(), database={"orders": orders})
    assert repo.collection("orders") is orders


@patch("orderfoodonline.repository.base.MongoClient")
def test_connect_builds_uri_and_selects_database(mock_client_class):
    client = mock_client_class.return_value
    before = metrics.DATABASE_QUERY_TOTAL.value("connect", "database", "success")

    repo = Repository.connect("mongodb", "localhost", 27017, "orderfood")

    mock_client_class.assert_called_once_with("mongodb://localhost:27017")
    client.admin.command.assert_called_once_with("ping")
    client.__getitem__.assert_called_once_with("orderfood")
    assert repo.client is client
    assert repo.database is client.__getitem__.return_value
    assert metrics.ACTIVE_CONNECTIONS.value == 1
    assert metrics.DATABASE_QUERY_TOTAL.value("connect", "database", "success") == before + 1


@patch("orderfoodonline.repository.base.MongoClient")
def test_connect_reports_ping_failure(mock_client_class):
    mock_client_class.return_value.admin.command.side_effect = ServerSelectionTimeoutError("down")
    before = metrics.DATABASE_QUERY_TOTAL.value("ping", "database", "error")

    with pytest.raises(ConnectionError, match="error pinging mongodb"):
        Repository.connect("mongodb", "localhost", 27017, "orderfood")

    assert metrics.DATABASE_QUERY_TOTAL.value("ping", "database", "error") == before + 1


@patch("orderfoodonline.repository.base.MongoClient")
def test_connect_reports_client_failure(mock_client_class):
    mock_client_class.side_effect = ConfigurationError("bad uri")
    before = metrics.DATABASE_QUERY_TOTAL.value("connect", "database", "error")

    with pytest.raises(ConnectionError, match="error connecting to mongodb"):
        Repository.connect("mongodb", "localhost", 27017, "orderfood")

    assert metrics.DATABASE_QUERY_TOTAL.value("connect", "database", "error") == before + 1


def test_close_disconnects_and_resets_gauge():
    client = MagicMock()
    metrics.set_active_connections(1)
    before = metrics.DATABASE_QUERY_TOTAL.value("disconnect", "database", "success")

    with Repository(client, {}):
        pass

    client.close.assert_called_once_with()
    assert metrics.ACTIVE_CONNECTIONS.value == 0
    assert metrics.DATABASE_QUERY_TOTAL.value("disconnect", "database", "success") == before + 1