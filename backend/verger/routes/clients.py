# Overview: Flask API routes for the CRM client registry; parses input and returns JSON responses.

# backend/verger/routes/clients.py
"""
Client routes.

DELETE is the GDPR right-to-be-forgotten: the client is deactivated and
their sales are anonymized, nothing is physically removed.
"""
from flask import Blueprint

from ..decorators import get_services, json_object, ledger_errors

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
@ledger_errors
def list_clients():
    """Active clients ordered by name."""
    clients = get_services().clients.list_active_clients()
    return {"items": [c.to_dict() for c in clients], "count": len(clients)}


@clients_bp.get("/statistics")
@ledger_errors
def client_statistics():
    return get_services().reporting.client_statistics()


@clients_bp.get("/<int:client_id>")
@ledger_errors
def get_client(client_id: int):
    return get_services().clients.get_client(client_id).to_dict()


@clients_bp.get("/<int:client_id>/history")
@ledger_errors
def client_history(client_id: int):
    return get_services().clients.client_history(client_id)


@clients_bp.post("")
@ledger_errors
def create_client_route():
    payload = json_object()

    client = get_services().clients.create_client(
        name=payload.get("name"),
        email=payload.get("email"),
        phone=payload.get("phone"),
        consent=payload.get("consent"),
    )
    return {"client_id": client.id, "client": client.to_dict(), "message": "Client created"}, 201


@clients_bp.put("/<int:client_id>")
@ledger_errors
def update_client_route(client_id: int):
    payload = json_object()

    client = get_services().clients.update_client(client_id, **payload)
    return {"client": client.to_dict(), "message": "Client updated"}


@clients_bp.delete("/<int:client_id>")
@ledger_errors
def deactivate_client_route(client_id: int):
    result = get_services().clients.deactivate_client(client_id)
    return {**result, "message": "Client deactivated (right to be forgotten)"}
