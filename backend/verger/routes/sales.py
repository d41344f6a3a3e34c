# Overview: Flask API routes for sales; parses input and returns JSON responses.

from flask import Blueprint, current_app

from ..decorators import get_services, json_object, ledger_errors

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@ledger_errors
def list_sales():
    items = get_services().reporting.list_sales(limit=current_app.config["LIST_LIMIT"])
    return {"items": items, "count": len(items)}


@sales_bp.post("")
@ledger_errors
def record_sale_route():
    """
    Record a sale: sale row, exit movement and stock decrement in one unit.

    Body: product_id, quantity, channel ("kiosk" | "market"), optional client_id.
    """
    payload = json_object()

    sale = get_services().sales.record_sale(
        product_id=payload.get("product_id"),
        quantity=payload.get("quantity"),
        channel=payload.get("channel"),
        client_id=payload.get("client_id"),
    )
    return {"sale": sale.to_dict(), "message": "Sale recorded"}, 201


@sales_bp.get("/statistics")
@ledger_errors
def sales_statistics():
    return get_services().reporting.sales_statistics()
