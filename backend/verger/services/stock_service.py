# Overview: Service-layer operations for stock movements; encapsulates business logic and database work.

# backend/verger/services/stock_service.py
"""
Stock ledger invariants (authoritative)

- products.stock_level is never driven negative.
- Every change to stock_level appends exactly one StockMovement row in the
  same transaction; movements are never updated or deleted.
- For exits, the availability check reads stock_level inside the unit of
  work, after the write lock is held (see LedgerStore.atomic).
- A failed unit leaves both the product and the movement table untouched.
"""
from __future__ import annotations

import logging

from ..models import Product, StockMovement
from ..validation import (
    MOVEMENT_DIRECTIONS,
    QUANTITY_DECIMALS,
    InsufficientStockError,
    NotFoundError,
    parse_id,
    parse_quantity,
    require_choice,
)

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "Not specified"

# Stock levels are stored rounded so repeated float arithmetic cannot leave
# 1e-17 residues that would block an exit of the full displayed stock.
STOCK_PRECISION = QUANTITY_DECIMALS


class StockMutationService:
    def __init__(self, store):
        self.store = store

    def apply_movement(
        self,
        *,
        product_id,
        direction: str,
        quantity,
        source: str | None = None,
    ) -> StockMovement:
        """
        Record one entry or exit and adjust the product's stock.

        Raises:
            ValidationError: bad product id, direction or quantity
            NotFoundError: product does not exist
            InsufficientStockError: exit larger than the current stock
        """
        product_id = parse_id(product_id, "product_id")
        require_choice(direction, MOVEMENT_DIRECTIONS, "direction")
        quantity = parse_quantity(quantity)

        with self.store.atomic():
            movement = self._apply_locked(
                product_id=product_id,
                direction=direction,
                quantity=quantity,
                source=source,
            )

        logger.info(
            "Stock %s recorded: product_id=%s quantity=%s movement_id=%s",
            direction, product_id, quantity, movement.id,
        )
        return movement

    def entry(self, *, product_id, quantity, source: str | None = None) -> StockMovement:
        return self.apply_movement(product_id=product_id, direction="entry", quantity=quantity, source=source)

    def exit(self, *, product_id, quantity, source: str | None = None) -> StockMovement:
        return self.apply_movement(product_id=product_id, direction="exit", quantity=quantity, source=source)

    def _apply_locked(
        self,
        *,
        product_id: int,
        direction: str,
        quantity: float,
        source: str | None,
    ) -> StockMovement:
        """Core movement logic without validation, unit boundaries, or commit.

        Must run inside store.atomic(); also composed by SaleRecordingService.
        """
        product = self.store.get_product_for_update(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        new_level = self._next_level(product, direction, quantity)

        movement = StockMovement(
            product_id=product.id,
            direction=direction,
            quantity=quantity,
            source=source or DEFAULT_SOURCE,
        )
        self.store.session.add(movement)
        product.stock_level = new_level
        self.store.session.flush()
        return movement

    @staticmethod
    def _next_level(product: Product, direction: str, quantity: float) -> float:
        current = product.stock_level or 0.0
        if direction == "entry":
            return round(current + quantity, STOCK_PRECISION)

        if quantity > current:
            raise InsufficientStockError(
                f"Insufficient stock for {product.name}. Available stock: {current:g}",
                details={
                    "product_id": product.id,
                    "requested": quantity,
                    "available": current,
                },
            )
        remaining = round(current - quantity, STOCK_PRECISION)
        return remaining if remaining > 0 else 0.0
