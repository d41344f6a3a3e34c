# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/verger/routes/products.py
from flask import Blueprint

from ..decorators import get_services, json_object, ledger_errors
from ..models import Product
from ..validation import ModelValidationPolicy, validate_payload

PRODUCT_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "unit", "stock_level", "alert_threshold"},
    required_on_create={"name", "category", "unit"},
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "category", "unit", "alert_threshold"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@ledger_errors
def list_products():
    """All products ordered by name, with the low-stock flag."""
    products = get_services().products.list_products()
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/<int:product_id>")
@ledger_errors
def get_product(product_id: int):
    return get_services().products.get_product(product_id).to_dict()


@products_bp.post("")
@ledger_errors
def create_product_route():
    """
    Register a product.

    A positive stock_level is booked as an initial entry movement.
    """
    payload = json_object()
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_CREATE_POLICY, partial=False)

    created = get_services().products.register_product(patch=patch)
    return {"id": created.id, "product": created.to_dict(), "message": "Product created"}, 201


@products_bp.put("/<int:product_id>")
@ledger_errors
def update_product_route(product_id: int):
    payload = json_object()
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)

    updated = get_services().products.update_product(product_id, patch=patch)
    return {"product": updated.to_dict(), "message": "Product updated"}


@products_bp.delete("/<int:product_id>")
@ledger_errors
def delete_product_route(product_id: int):
    get_services().products.delete_product(product_id)
    return {"ok": True, "message": "Product deleted"}
