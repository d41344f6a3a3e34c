# Overview: Service-layer operations for CRM clients; encapsulates business logic and database work.

# backend/verger/services/client_service.py
"""
Client Registry

GDPR rules:
- A client can only be created with consent explicitly granted.
- Deleting a client is a soft delete (active -> inactive, one-way). In the
  same unit of work every sale pointing at the client has its client_id
  cleared: sales stay for reporting, the link to the person does not.
- Deactivating an inactive client succeeds and re-runs the sweep.
"""
from __future__ import annotations

import logging

from ..models import Client
from ..time_utils import utcnow
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    normalize_client_name,
    normalize_email,
    normalize_phone,
    parse_id,
    require_consent,
)

logger = logging.getLogger(__name__)

CLIENT_UPDATABLE_FIELDS = {"name", "email", "phone"}


class ClientRegistryService:
    def __init__(self, store):
        self.store = store

    def create_client(self, *, name, email=None, phone=None, consent=None) -> Client:
        name = normalize_client_name(name)
        require_consent(consent)
        email = normalize_email(email)
        phone = normalize_phone(phone)

        with self.store.atomic() as session:
            if self.store.find_active_client_by_name(name) is not None:
                raise ConflictError("A client with this name already exists")

            client = Client(name=name, email=email, phone=phone, consent=True, active=True)
            session.add(client)
            session.flush()

        logger.info("Client created: client_id=%s", client.id)
        return client

    def update_client(self, client_id, /, **fields) -> Client:
        """
        Update name, email and/or phone of an active client.

        Omitted fields are kept; email/phone given as null or "" are cleared.
        """
        client_id = parse_id(client_id, "client_id")
        unknown = set(fields) - CLIENT_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

        changes: dict = {}
        if "name" in fields and fields["name"] is not None:
            if not isinstance(fields["name"], str) or not fields["name"].strip():
                raise ValidationError("Name cannot be empty")
            changes["name"] = fields["name"].strip()
        if "email" in fields:
            changes["email"] = normalize_email(fields["email"])
        if "phone" in fields:
            changes["phone"] = normalize_phone(fields["phone"])

        with self.store.atomic():
            client = self.store.get_client_for_update(client_id)
            if client is None or not client.active:
                raise NotFoundError("Client not found")

            if "name" in changes and changes["name"] != client.name:
                if self.store.find_active_client_by_name(changes["name"], exclude_id=client.id):
                    raise ConflictError("A client with this name already exists")

            for key, value in changes.items():
                setattr(client, key, value)
            client.updated_at = utcnow()

        logger.info("Client updated: client_id=%s fields=%s", client_id, sorted(changes))
        return client

    def deactivate_client(self, client_id) -> dict:
        """Right to be forgotten: deactivate and anonymize the client's sales."""
        client_id = parse_id(client_id, "client_id")

        with self.store.atomic():
            client = self.store.get_client_for_update(client_id)
            if client is None:
                raise NotFoundError("Client not found")

            was_active = client.active
            client.active = False
            client.updated_at = utcnow()
            anonymized = self.store.clear_client_from_sales(client.id)

        logger.info(
            "Client deactivated: client_id=%s was_active=%s sales_anonymized=%s",
            client_id, was_active, anonymized,
        )
        return {
            "client_id": client_id,
            "anonymized_sales": True,
            "sales_anonymized_count": anonymized,
        }

    def get_client(self, client_id) -> Client:
        client = self.store.get_client(parse_id(client_id, "client_id"))
        if client is None:
            raise NotFoundError("Client not found")
        return client

    def list_active_clients(self) -> list[Client]:
        return self.store.list_active_clients()

    def client_history(self, client_id) -> dict:
        client = self.get_client(client_id)
        sales = self.store.sales_for_client(client.id)

        product_names = {s.product.name for s in sales if s.product is not None}
        channels = sorted({s.channel for s in sales})

        return {
            "client": {"id": client.id, "name": client.name, "active": client.active},
            "statistics": {
                "purchase_count": len(sales),
                "distinct_products": len(product_names),
                "channels_used": channels,
            },
            "history": [
                {
                    **s.to_dict(),
                    "category": s.product.category if s.product else None,
                    "unit": s.product.unit if s.product else None,
                }
                for s in sales
            ],
        }
