# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, jsonify, request

from .validation import LedgerError, StorageFailure, ValidationError


def get_services():
    """The ServiceRegistry built by create_app()."""
    return current_app.extensions["verger"]


def json_object() -> dict:
    """The request body as a JSON object; an absent or unparsable body reads as {}."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload: expected an object")
    return payload


def ledger_errors(f):
    """
    Map service failures to JSON error responses.

    LedgerError subclasses carry their own status code and kind. Anything
    else is logged and reported as a 500 storage failure.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except LedgerError as e:
            return jsonify(e.to_dict()), e.status_code
        except Exception:
            current_app.logger.exception("Unhandled error in %s", f.__name__)
            failure = StorageFailure("Internal storage error")
            return jsonify(failure.to_dict()), failure.status_code

    return decorated_function
