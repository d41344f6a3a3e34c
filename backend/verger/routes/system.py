# backend/verger/routes/system.py
"""
System health endpoint.

Reports database reachability and row counts for the four ledger tables.
"""

import time
from flask import Blueprint, current_app

from ..decorators import get_services
from ..models import Client, Product, Sale, StockMovement

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    store = get_services().store
    start_time = time.time()
    try:
        details = {
            "products": store.count(Product),
            "stock_movements": store.count(StockMovement),
            "sales": store.count(Sale),
            "active_clients": store.count(Client, active=True),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    status = "OK" if database["status"] == "healthy" else "DEGRADED"
    body = {
        "status": status,
        "message": "Le Verger du Coin - API online",
        "database": database,
    }
    return body, (200 if status == "OK" else 503)
