# backend/verger/services/products_service.py
"""
Product catalog

Stock is not a writable product field: an initial stock given at
registration is booked as an "entry" movement in the same unit of work, and
every later change goes through StockMutationService.
"""
from __future__ import annotations

import logging

from ..models import Product
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    enforce_rules_product,
    parse_id,
)

logger = logging.getLogger(__name__)

PRODUCT_MUTABLE_FIELDS = {"name", "category", "unit", "alert_threshold"}
DEFAULT_ALERT_THRESHOLD = 10.0
INITIAL_STOCK_SOURCE = "Initial stock"


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


class ProductCatalogService:
    def __init__(self, store, stock):
        self.store = store
        self.stock = stock

    def list_products(self) -> list[Product]:
        return self.store.list_products()

    def get_product(self, product_id) -> Product:
        product = self.store.get_product(parse_id(product_id, "product_id"))
        if product is None:
            raise NotFoundError("Product not found")
        return product

    def register_product(self, *, patch: dict) -> Product:
        """
        Create a product from a validated patch.

        patch keys: name, category, unit, alert_threshold, stock_level (initial stock).
        """
        for field in ("name", "category", "unit"):
            if not patch.get(field):
                raise ValidationError(f"{field} is required")
        enforce_rules_product(patch)

        initial_stock = patch.get("stock_level") or 0.0
        threshold = patch.get("alert_threshold")
        if threshold is None:
            threshold = DEFAULT_ALERT_THRESHOLD

        with self.store.atomic() as session:
            if self.store.find_product_by_name(patch["name"]) is not None:
                raise ConflictError("A product with this name already exists")

            p = Product(stock_level=0.0, alert_threshold=threshold)
            apply_product_patch(p, patch)
            session.add(p)
            session.flush()  # ensure p.id exists before the initial movement

            if initial_stock > 0:
                self.stock._apply_locked(
                    product_id=p.id,
                    direction="entry",
                    quantity=initial_stock,
                    source=INITIAL_STOCK_SOURCE,
                )

        logger.info("Product registered: product_id=%s name=%r", p.id, p.name)
        return p

    def update_product(self, product_id, *, patch: dict) -> Product:
        if "stock_level" in patch:
            raise ValidationError("stock_level can only change through stock movements")
        enforce_rules_product(patch)
        product_id = parse_id(product_id, "product_id")

        with self.store.atomic():
            p = self.store.get_product_for_update(product_id)
            if p is None:
                raise NotFoundError("Product not found")

            new_name = patch.get("name")
            if new_name and new_name != p.name:
                other = self.store.find_product_by_name(new_name)
                if other is not None and other.id != p.id:
                    raise ConflictError("A product with this name already exists")

            apply_product_patch(p, patch)

        logger.info("Product updated: product_id=%s fields=%s", product_id, sorted(patch))
        return p

    def delete_product(self, product_id) -> None:
        """Hard delete. Products with movements or sales are kept."""
        product_id = parse_id(product_id, "product_id")

        with self.store.atomic() as session:
            p = self.store.get_product_for_update(product_id)
            if p is None:
                raise NotFoundError("Product not found")
            if self.store.product_has_history(product_id):
                raise ConflictError("Product has stock movements or sales and cannot be deleted")
            session.delete(p)

        logger.info("Product deleted: product_id=%s", product_id)
