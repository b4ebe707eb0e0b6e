"""Errors raised by the service layer."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for service errors; the message is what clients see."""

    message = "service error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ProductListingError(ServiceError):
    """Listing products failed."""

    message = "error listing products"


class FindProductByIdError(ServiceError):
    """Fetching a product by its ID failed."""

    message = "error fetching product by ID"


class InvalidPromoCodeError(ServiceError):
    """The promo code supplied is not valid."""

    message = "invalid promo code"


class InvalidProductOrQuantityError(ServiceError):
    """An order item has no product ID or a non-positive quantity."""

    message = "invalid productId or quantity"


class ProductNotFoundError(ServiceError):
    """The product named in an order does not exist."""

    prefix = "product not found: "

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(self.prefix + product_id)