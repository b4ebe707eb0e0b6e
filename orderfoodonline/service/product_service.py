"""Business operations on the product catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from orderfoodonline.errors import ProductListingError
from orderfoodonline.models import Product
from orderfoodonline.repository.base import ProductRepository


@dataclass
class ProductResponse:
    """The product shape returned by the API."""

    id: str = ""
    name: str = ""
    price: float = 0.0
    category: str = ""


class ProductService:
    """Lists and looks up products."""

    def __init__(self, repo: ProductRepository, logger: logging.Logger | None = None):
        self.repo = repo
        self.logger = logger or logging.getLogger(__name__)

    def list_products(self) -> list[Product]:
        """Return every product; storage failures become ProductListingError."""
        try:
            return self.repo.list_products()
        except Exception as exc:
            self.logger.error("%s: %s", ProductListingError.message, exc)
            raise ProductListingError() from exc

    def find_product_by_id(self, product_id: str) -> Product | None:
        """Return the product with this ID, or None if there is none."""
        return self.repo.find_product_by_id(product_id)