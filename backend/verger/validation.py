from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Boolean, Float, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


PRODUCT_CATEGORIES = ("fruit", "vegetable", "processed")
PRODUCT_UNITS = ("kg", "piece")
MOVEMENT_DIRECTIONS = ("entry", "exit")
SALE_CHANNELS = ("kiosk", "market")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\d\s+\-()]+$")

# Quantities and stock levels are kept on a grid of this many decimals
QUANTITY_DECIMALS = 6


class LedgerError(Exception):
    """Base of every failure surfaced to callers as a structured (kind, message) pair."""

    kind = "storage_failure"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message, "kind": self.kind}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(LedgerError, ValueError):
    """400-level input problem."""

    kind = "validation_error"
    status_code = 400


class InvalidChannel(ValidationError):
    kind = "invalid_channel"


class NotFoundError(LedgerError, LookupError):
    kind = "not_found"
    status_code = 404


class ConflictError(LedgerError):
    """409-level uniqueness conflict (e.g., duplicate product or active client name)."""

    kind = "conflict"
    status_code = 409


class InsufficientStockError(LedgerError):
    kind = "insufficient_stock"
    status_code = 400


class StorageFailure(LedgerError):
    """Store unavailable or a constraint violation not otherwise classified."""

    kind = "storage_failure"
    status_code = 500


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_number(key: str, value: Any) -> float:
    # bool is a subclass of int; "true" is not a quantity
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be a number")
        try:
            number = float(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be a number")
    else:
        raise ValidationError(f"{key} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{key} must be a finite number")
    return number


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        if value in (0, 1):
            return bool(value)
        raise ValidationError(f"{col.key} must be a boolean")

    if isinstance(coltype, Integer):
        return parse_id(value, col.key)

    if isinstance(coltype, Float):
        return _coerce_number(col.key, value)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{col.key} must be a string")
        return value.strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def parse_id(value: Any, key: str = "id") -> int:
    """Accept a positive integer or a string of digits."""
    if value is None or value == "":
        raise ValidationError(f"{key} is required")
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
    else:
        raise ValidationError(f"{key} must be an integer")
    if parsed <= 0:
        raise ValidationError(f"{key} must be a positive integer")
    return parsed


def parse_quantity(value: Any, key: str = "quantity") -> float:
    if value is None or value == "":
        raise ValidationError(f"{key} is required")
    number = _coerce_number(key, value)
    if number <= 0:
        raise ValidationError(f"{key} must be > 0")
    check_precision(number, key)
    return number


def check_precision(number: float, key: str) -> None:
    """Reject values finer than QUANTITY_DECIMALS (1e-7 would round to nothing)."""
    if round(number, QUANTITY_DECIMALS) != number:
        raise ValidationError(f"{key} supports at most {QUANTITY_DECIMALS} decimal places")


def require_choice(value: Any, choices: tuple[str, ...], key: str) -> str:
    if value not in choices:
        raise ValidationError(f"{key} must be one of: {', '.join(choices)}")
    return value


def parse_channel(value: Any) -> str:
    if value is None or value == "":
        raise ValidationError("channel is required")
    if value not in SALE_CHANNELS:
        raise InvalidChannel(f"Invalid sales channel: {value!r} (expected kiosk or market)")
    return value


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "name" in patch and not patch["name"]:
        raise ValidationError("name cannot be blank")
    if "category" in patch:
        require_choice(patch["category"], PRODUCT_CATEGORIES, "category")
    if "unit" in patch:
        require_choice(patch["unit"], PRODUCT_UNITS, "unit")
    if patch.get("alert_threshold") is not None and patch["alert_threshold"] < 0:
        raise ValidationError("alert_threshold must be >= 0")
    if patch.get("stock_level") is not None and patch["stock_level"] < 0:
        raise ValidationError("stock_level must be >= 0")
    if patch.get("stock_level"):
        check_precision(patch["stock_level"], "stock_level")


def normalize_client_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Client name is required")
    return name.strip()


def normalize_email(email: Any) -> str | None:
    if email is None or email == "":
        return None
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValidationError("Invalid email format")
    return email.strip()


def normalize_phone(phone: Any) -> str | None:
    if phone is None or phone == "":
        return None
    if not isinstance(phone, str) or not PHONE_RE.match(phone):
        raise ValidationError("Invalid phone format")
    return phone.strip()


def require_consent(consent: Any) -> None:
    """Consent must be asserted explicitly: True or 1, nothing implied."""
    if consent is None:
        raise ValidationError("GDPR consent is required")
    if isinstance(consent, bool):
        granted = consent
    else:
        granted = isinstance(consent, int) and consent == 1
    if not granted:
        raise ValidationError("The client must consent to the processing of personal data (GDPR)")
