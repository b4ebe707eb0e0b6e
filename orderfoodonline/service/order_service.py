"""Business rules for placing orders."""

from __future__ import annotations

import logging
import time

from orderfoodonline import metrics
from orderfoodonline.errors import (
    FindProductByIdError,
    InvalidProductOrQuantityError,
    InvalidPromoCodeError,
    ProductNotFoundError,
)
from orderfoodonline.models import Order, OrderCreateRequest, Product
from orderfoodonline.repository.base import (
    CouponRepository,
    OrderRepository,
    ProductRepository,
)

_COUPON_MIN_LENGTH = 8
_COUPON_MAX_LENGTH = 10


class OrderService:
    """Validates order requests and stores the resulting orders."""

    def __init__(
        self,
        repo: OrderRepository,
        product_repo: ProductRepository,
        coupon_repo: CouponRepository,
        logger: logging.Logger | None = None,
    ):
        self.repo = repo
        self.product_repo = product_repo
        self.coupon_repo = coupon_repo
        self.logger = logger or logging.getLogger(__name__)

    def place_order(self, request: OrderCreateRequest) -> Order:
        """Validate the request, resolve its products and store the order."""
        start = time.perf_counter()

        def record(status: str) -> None:
            metrics.record_order_processing(status, time.perf_counter() - start)
            metrics.record_order(status)

        coupon = request.coupon_code.strip()
        if coupon:
            length = len(coupon.encode("utf-8"))
            if length < _COUPON_MIN_LENGTH or length > _COUPON_MAX_LENGTH:
                record("validation_error")
                raise InvalidPromoCodeError()
            try:
                is_valid = self.coupon_repo.validate_coupon_code(request.coupon_code)
            except Exception:
                record("coupon_validation_error")
                raise
            if not is_valid:
                record("invalid_coupon")
                raise InvalidPromoCodeError()

        products: list[Product] = []
        for item in request.items:
            if not item.product_id or item.quantity <= 0:
                record("invalid_product_or_quantity")
                raise InvalidProductOrQuantityError()
            try:
                product = self.product_repo.find_product_by_id(item.product_id)
            except Exception as exc:
                self.logger.error("%s: %s", FindProductByIdError.message, exc)
                record("product_lookup_error")
                raise FindProductByIdError() from exc
            if product is None:
                record("product_not_found")
                raise ProductNotFoundError(item.product_id)
            products.append(product)

        order = Order(items=request.items, products=products)
        try:
            result = self.repo.place_order(order)
        except Exception:
            record("database_error")
            raise

        record("success")
        return result