# backend/verger/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Both the stock and CRM blueprints share this database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:///verger.sqlite3",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Seconds a writer waits on a locked SQLite database before failing
    SQLITE_TIMEOUT = float(os.environ.get("VERGER_SQLITE_TIMEOUT", "15"))

    SEED_SAMPLE_DATA = _env_flag("VERGER_SEED_SAMPLE_DATA")
    LOG_LEVEL = os.environ.get("VERGER_LOG_LEVEL", "INFO")

    # Row cap for movement/sale history listings
    LIST_LIMIT = int(os.environ.get("VERGER_LIST_LIMIT", "100"))

    CORS_ALLOWED_ORIGINS = {
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3001",
    }
