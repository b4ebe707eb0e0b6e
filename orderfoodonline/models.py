"""Data models for products, orders and migrations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def _require_mapping(data: Any, what: str) -> Mapping:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object")
    return data


def _get_str(data: Mapping, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _get_int(data: Mapping, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _get_float(data: Mapping, key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number")
    return float(value)


def _get_list(data: Mapping, key: str, parse: Callable[[Any], T]) -> list[T]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return [parse(element) for element in value]


@dataclass
class Product:
    """A product in the catalog."""

    id: str = ""
    name: str = ""
    price: float = 0.0
    category: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> "Product":
        data = _require_mapping(data, "product")
        return cls(
            id=_get_str(data, "id"),
            name=_get_str(data, "name"),
            price=_get_float(data, "price"),
            category=_get_str(data, "category"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
        }


@dataclass
class OrderItem:
    """A product and quantity within an order."""

    product_id: str = ""
    quantity: int = 0

    @classmethod
    def from_dict(cls, data: Mapping) -> "OrderItem":
        data = _require_mapping(data, "order item")
        return cls(
            product_id=_get_str(data, "productId"),
            quantity=_get_int(data, "quantity"),
        )

    def to_dict(self) -> dict:
        return {"productId": self.product_id, "quantity": self.quantity}


@dataclass
class Order:
    """A placed order with its items and the matching products."""

    id: str = ""
    items: list[OrderItem] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping) -> "Order":
        data = _require_mapping(data, "order")
        return cls(
            id=_get_str(data, "id"),
            items=_get_list(data, "items", OrderItem.from_dict),
            products=_get_list(data, "products", Product.from_dict),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "items": [item.to_dict() for item in self.items],
            "products": [product.to_dict() for product in self.products],
        }


@dataclass
class OrderCreateRequest:
    """The request body for placing an order."""

    coupon_code: str = ""
    items: list[OrderItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping) -> "OrderCreateRequest":
        data = _require_mapping(data, "order request")
        return cls(
            coupon_code=_get_str(data, "couponCode"),
            items=_get_list(data, "items", OrderItem.from_dict),
        )

    def to_dict(self) -> dict:
        return {
            "couponCode": self.coupon_code,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class Migration:
    """A record of an applied database migration."""

    id: str = ""
    version: str = ""
    description: str = ""
    applied_at: int = 0
    status: str = ""

    @classmethod
    def from_dict(cls, data: Mapping) -> "Migration":
        data = _require_mapping(data, "migration")
        return cls(
            id=_get_str(data, "id"),
            version=_get_str(data, "version"),
            description=_get_str(data, "description"),
            applied_at=_get_int(data, "applied_at"),
            status=_get_str(data, "status"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "version": self.version,
            "description": self.description,
            "applied_at": self.applied_at,
            "status": self.status,
        }


@dataclass
class MigrationData:
    """The contents of a migration file."""

    version: str = ""
    description: str = ""
    products: list[Product] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping) -> "MigrationData":
        data = _require_mapping(data, "migration data")
        return cls(
            version=_get_str(data, "version"),
            description=_get_str(data, "description"),
            products=_get_list(data, "products", Product.from_dict),
        )