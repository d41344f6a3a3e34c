# Overview: Flask API routes for stock movements; parses input and returns JSON responses.

# backend/verger/routes/movements.py
"""
Stock movement routes.

- entry: harvest, supplier delivery, internal production
- exit: losses, donations, anything that is not a sale (sales go through /api/sales)
"""
from flask import Blueprint, current_app, request

from ..decorators import get_services, json_object, ledger_errors

movements_bp = Blueprint("movements", __name__, url_prefix="/api/movements")


def _apply(direction: str):
    payload = json_object()

    movement = get_services().stock.apply_movement(
        product_id=payload.get("product_id"),
        direction=direction,
        quantity=payload.get("quantity"),
        source=payload.get("source"),
    )
    product = get_services().products.get_product(movement.product_id)
    return {"movement": movement.to_dict(), "product": product.to_dict()}, 201


@movements_bp.get("")
@ledger_errors
def list_movements():
    """Most recent movements first, capped at LIST_LIMIT rows."""
    product_id = request.args.get("product_id", type=int)
    items = get_services().reporting.list_movements(
        product_id=product_id,
        limit=current_app.config["LIST_LIMIT"],
    )
    return {"items": items, "count": len(items)}


@movements_bp.post("/entry")
@ledger_errors
def record_entry():
    return _apply("entry")


@movements_bp.post("/exit")
@ledger_errors
def record_exit():
    return _apply("exit")
