# Overview: Read-only aggregates for the stock dashboard and the CRM.

from __future__ import annotations

from sqlalchemy import func

from ..models import Client, Product, Sale

TOP_N = 10


class ReportingService:
    def __init__(self, store):
        self.store = store

    def list_movements(self, *, product_id=None, limit: int = 100) -> list[dict]:
        return [m.to_dict() for m in self.store.list_movements(product_id=product_id, limit=limit)]

    def list_sales(self, *, limit: int = 100) -> list[dict]:
        return [s.to_dict() for s in self.store.list_sales(limit=limit)]

    def sales_statistics(self) -> dict:
        session = self.store.session

        total_sold = func.sum(Sale.quantity).label("total_sold")
        top_products = (
            session.query(Product.name, total_sold, Product.unit)
            .join(Sale, Sale.product_id == Product.id)
            .group_by(Product.id, Product.name, Product.unit)
            .order_by(total_sold.desc())
            .limit(TOP_N)
            .all()
        )

        by_channel = (
            session.query(
                Sale.channel,
                func.count(Sale.id).label("sale_count"),
                func.sum(Sale.quantity).label("total_quantity"),
            )
            .group_by(Sale.channel)
            .order_by(Sale.channel.asc())
            .all()
        )

        by_category = (
            session.query(
                Product.category,
                func.sum(Product.stock_level).label("total_stock"),
                func.count(Product.id).label("product_count"),
            )
            .group_by(Product.category)
            .order_by(Product.category.asc())
            .all()
        )

        return {
            "top_products": [
                {"name": row.name, "total_sold": float(row.total_sold or 0), "unit": row.unit}
                for row in top_products
            ],
            "sales_by_channel": [
                {
                    "channel": row.channel,
                    "sale_count": int(row.sale_count),
                    "total_quantity": float(row.total_quantity or 0),
                }
                for row in by_channel
            ],
            "stock_by_category": [
                {
                    "category": row.category,
                    "total_stock": float(row.total_stock or 0),
                    "product_count": int(row.product_count),
                }
                for row in by_category
            ],
        }

    def client_statistics(self) -> dict:
        session = self.store.session

        active_count = self.store.count(Client, active=True)
        consenting_count = self.store.count(Client, active=True, consent=True)

        purchase_count = func.count(Sale.id).label("purchase_count")
        most_active = (
            session.query(
                Client.id,
                Client.name,
                purchase_count,
                func.sum(Sale.quantity).label("total_quantity"),
            )
            .join(Sale, Sale.client_id == Client.id)
            .filter(Client.active.is_(True))
            .group_by(Client.id, Client.name)
            .order_by(purchase_count.desc(), Client.name.asc())
            .limit(TOP_N)
            .all()
        )

        return {
            "active_clients": active_count,
            "clients_with_consent": consenting_count,
            "most_active_clients": [
                {
                    "id": row.id,
                    "name": row.name,
                    "purchase_count": int(row.purchase_count),
                    "total_quantity": float(row.total_quantity or 0),
                }
                for row in most_active
            ],
        }
