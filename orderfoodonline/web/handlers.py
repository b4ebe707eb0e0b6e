"""HTTP handlers for products, orders and the API description."""

from __future__ import annotations

import logging

from flask import Response, jsonify, request

from orderfoodonline.errors import (
    InvalidProductOrQuantityError,
    InvalidPromoCodeError,
    ProductNotFoundError,
)
from orderfoodonline.models import OrderCreateRequest


def _error(message: str, status: int):
    return jsonify({"error": message}), status


class ProductHandler:
    """Serves the product listing and single-product lookups."""

    def __init__(self, service):
        self.service = service

    def list_products(self):
        """Respond with every product, or 500 if they cannot be fetched."""
        try:
            products = self.service.list_products()
        except Exception:
            return _error("Failed to fetch products", 500)
        return jsonify([product.to_dict() for product in products or []]), 200

    def get_product_by_id(self, product_id: str):
        """Respond with one product, 400 for a blank ID or 404 if unknown."""
        product_id = product_id.strip()
        if not product_id:
            return _error("Invalid ID supplied", 400)
        try:
            product = self.service.find_product_by_id(product_id)
        except Exception:
            return _error("Failed to fetch product", 500)
        if product is None:
            return _error("Product not found", 404)
        return jsonify(product.to_dict()), 200


class OrderHandler:
    """Accepts new orders."""

    def __init__(self, service):
        self.service = service

    def place_order(self):
        """Place the order in the JSON body and respond with the stored order."""
        body = request.get_json(force=True, silent=True)
        if body is None:
            return _error("Invalid input", 400)
        try:
            order_request = OrderCreateRequest.from_dict(body)
        except ValueError:
            return _error("Invalid input", 400)
        if not order_request.items:
            return _error("Invalid input", 400)

        try:
            order = self.service.place_order(order_request)
        except Exception as exc:
            message = str(exc)
            if message == InvalidProductOrQuantityError.message:
                return _error("Validation exception", 422)
            if ProductNotFoundError.prefix in message:
                return _error("Product not found", 404)
            if message == InvalidPromoCodeError.message:
                return _error("Validation exception", 422)
            return _error("Failed to place an order", 500)
        return jsonify(order.to_dict()), 200


class SwaggerHandler:
    """Serves a Swagger JSON document read once from disk."""

    def __init__(self, file_path: str, logger: logging.Logger | None = None):
        logger = logger or logging.getLogger(__name__)
        try:
            with open(file_path, "rb") as handle:
                self.json_data = handle.read()
        except OSError as exc:
            logger.error("error reading swagger.json: %s", exc)
            raise OSError(f"error reading swagger.json: {exc}") from exc

    def get_swagger_json(self):
        """Respond with the document, or 500 if it is empty."""
        if self.json_data:
            return Response(self.json_data, status=200, mimetype="application/json")
        return _error("Unable to serve Swagger Json", 500)