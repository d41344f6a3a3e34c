from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Product(db.Model):
    """
    Product master data with its current stock level.

    stock_level is only ever changed by StockMutationService, in the same
    transaction that appends the matching StockMovement row.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("category IN ('fruit', 'vegetable', 'processed')", name="ck_products_category"),
        db.CheckConstraint("unit IN ('kg', 'piece')", name="ck_products_unit"),
        db.CheckConstraint("stock_level >= 0", name="ck_products_stock_non_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    category = db.Column(db.String(16), nullable=False)
    unit = db.Column(db.String(16), nullable=False)

    stock_level = db.Column(db.Float, nullable=False, default=0.0)
    alert_threshold = db.Column(db.Float, nullable=True, default=10.0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def stock_alert(self) -> bool:
        if self.alert_threshold is None:
            return False
        return (self.stock_level or 0) < self.alert_threshold

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock_level={self.stock_level}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "stock_level": self.stock_level,
            "alert_threshold": self.alert_threshold,
            "stock_alert": self.stock_alert,
            "created_at": to_utc_z(self.created_at),
        }


class StockMovement(db.Model):
    """
    Append-only audit record of one stock change.

    No service updates or deletes these rows.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.CheckConstraint("direction IN ('entry', 'exit')", name="ck_stock_movements_direction"),
        db.CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
        db.Index("ix_stock_movements_product_occurred", "product_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    direction = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Float, nullable=False)

    # Free-text origin ("Orchard harvest", "Sale market", ...)
    source = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("movements", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "direction": self.direction,
            "quantity": self.quantity,
            "source": self.source,
            "occurred_at": to_utc_z(self.occurred_at),
        }
