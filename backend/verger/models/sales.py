from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Sale(db.Model):
    """
    A sale through the kiosk or the market stall.

    Each row is created together with one exit StockMovement and one stock
    decrement. client_id is cleared when the client is deactivated; the
    sale itself is kept for reporting.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("channel IN ('kiosk', 'market')", name="ck_sales_channel"),
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.Index("ix_sales_channel_occurred", "channel", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False)
    channel = db.Column(db.String(16), nullable=False)

    client_id = db.Column(
        db.Integer,
        db.ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product", backref=db.backref("sales", lazy=True))
    client = db.relationship("Client", backref=db.backref("sales", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "channel": self.channel,
            "client_id": self.client_id,
            "occurred_at": to_utc_z(self.occurred_at),
        }
