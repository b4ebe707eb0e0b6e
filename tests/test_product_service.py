from unittest.mock import Mock

import pytest

from orderfoodonline.errors import ProductListingError
from orderfoodonline.models import Product
from orderfoodonline.service.product_service import ProductResponse, ProductService


def make_service():
    repo = Mock()
    logger = Mock()
    return ProductService(repo, logger), repo, logger


def test_list_products_success():
    service, repo, logger = make_service()
    expected = [
        Product(id="1", name="Chicken Waffle", price=12.99, category="Waffle"),
        Product(id="2", name="Beef Burger", price=15.50, category="Burger"),
    ]
    repo.list_products.return_value = expected
    products = service.list_products()
    assert len(products) == 2
    assert products[0].id == expected[0].id
    assert products[0].name == expected[0].name
    assert products[0].price == expected[0].price
    assert products[0].category == expected[0].category
    logger.error.assert_not_called()


def test_list_products_repository_error():
    service, repo, logger = make_service()
    repo.list_products.side_effect = RuntimeError("database connection failed")
    with pytest.raises(ProductListingError) as info:
        service.list_products()
    assert str(info.value) == "error listing products"
    assert logger.error.call_count == 1


def test_list_products_empty_result():
    service, repo, _ = make_service()
    repo.list_products.return_value = []
    assert service.list_products() == []


def test_find_product_by_id_success():
    service, repo, _ = make_service()
    expected = Product(id="1", name="Chicken Waffle", price=12.99, category="Waffle")
    repo.find_product_by_id.return_value = expected
    product = service.find_product_by_id("1")
    assert product == expected
    repo.find_product_by_id.assert_called_once_with("1")


def test_find_product_by_id_not_found_error_passes_through():
    service, repo, _ = make_service()
    repo.find_product_by_id.side_effect = RuntimeError("product not found")
    with pytest.raises(RuntimeError) as info:
        service.find_product_by_id("999")
    assert str(info.value) == "product not found"


def test_find_product_by_id_repository_error():
    service, repo, _ = make_service()
    repo.find_product_by_id.side_effect = RuntimeError("database connection failed")
    with pytest.raises(RuntimeError) as info:
        service.find_product_by_id("1")
    assert str(info.value) == "database connection failed"


def test_find_product_by_id_empty_id():
    service, repo, _ = make_service()
    repo.find_product_by_id.side_effect = ValueError("invalid product ID")
    with pytest.raises(ValueError, match="invalid product ID"):
        service.find_product_by_id("")


def test_find_product_by_id_missing_returns_none():
    service, repo, _ = make_service()
    repo.find_product_by_id.return_value = None
    assert service.find_product_by_id("999") is None


def test_product_response_fields():
    response = ProductResponse(id="10", name="Chicken Waffle", price=1, category="Waffle")
    assert (response.id, response.name, response.price, response.category) == (
        "10",
        "Chicken Waffle",
        1,
        "Waffle",
    )