# Overview: Demo data for a fresh database (products with their stock, consenting clients).

from __future__ import annotations

import logging

from ..models import Client, Product

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    {"name": "Gala apples", "category": "fruit", "unit": "kg", "stock_level": 150.0, "alert_threshold": 20.0},
    {"name": "Golden apples", "category": "fruit", "unit": "kg", "stock_level": 120.0, "alert_threshold": 20.0},
    {"name": "Williams pears", "category": "fruit", "unit": "kg", "stock_level": 80.0, "alert_threshold": 15.0},
    {"name": "Carrots", "category": "vegetable", "unit": "kg", "stock_level": 95.0, "alert_threshold": 25.0},
    {"name": "Lettuces", "category": "vegetable", "unit": "piece", "stock_level": 45.0, "alert_threshold": 20.0},
    {"name": "Tomatoes", "category": "vegetable", "unit": "kg", "stock_level": 60.0, "alert_threshold": 15.0},
    {"name": "Apple juice", "category": "processed", "unit": "piece", "stock_level": 8.0, "alert_threshold": 10.0},
    {"name": "Apple compote", "category": "processed", "unit": "piece", "stock_level": 25.0, "alert_threshold": 10.0},
]

SAMPLE_CLIENTS = [
    {"name": "Marie Dubois", "email": "marie.dubois@example.com", "phone": "0612345678"},
    {"name": "Jean Martin", "email": "jean.martin@example.com", "phone": "0623456789"},
    {"name": "Sophie Bernard", "email": None, "phone": "0634567890"},
    {"name": "Pierre Durand", "email": "pierre.durand@example.com", "phone": None},
]


def seed_sample_data(services) -> dict:
    """
    Insert demo products and clients, each set only into an empty table.

    Returns counts of inserted rows.
    """
    inserted = {"products": 0, "clients": 0}

    if services.store.count(Product) == 0:
        for patch in SAMPLE_PRODUCTS:
            services.products.register_product(patch=dict(patch))
            inserted["products"] += 1

    if services.store.count(Client) == 0:
        for row in SAMPLE_CLIENTS:
            services.clients.create_client(consent=True, **row)
            inserted["clients"] += 1

    if inserted["products"] or inserted["clients"]:
        logger.info(
            "Sample data inserted: %s products, %s clients",
            inserted["products"], inserted["clients"],
        )
    return inserted
