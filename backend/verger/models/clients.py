from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Client(db.Model):
    """
    CRM client with recorded GDPR consent.

    Lifecycle is one-way: active -> inactive. An inactive client keeps its
    row but no sale may still point at it.
    """
    __tablename__ = "clients"
    __table_args__ = (
        # Names are unique among active clients only
        db.Index(
            "uq_clients_active_name",
            "name",
            unique=True,
            sqlite_where=db.text("active = 1"),
            postgresql_where=db.text("active"),
        ),
        db.Index("ix_clients_active_name", "active", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    consent = db.Column(
        db.Boolean(create_constraint=True, name="ck_clients_consent_bool"),
        nullable=False,
        default=False,
    )
    active = db.Column(
        db.Boolean(create_constraint=True, name="ck_clients_active_bool"),
        nullable=False,
        default=True,
    )

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Client id={self.id} name={self.name!r} active={self.active}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "consent": self.consent,
            "active": self.active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
