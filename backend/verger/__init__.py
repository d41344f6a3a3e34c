# backend/verger/__init__.py
from __future__ import annotations

from flask import Flask, request

from .config import Config
from .extensions import db
from .store import LedgerStore


def _configure_engine(app: Flask) -> None:
    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if not uri.startswith("sqlite"):
        return
    options = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
    connect_args = dict(options.get("connect_args") or {})
    connect_args.setdefault("timeout", app.config["SQLITE_TIMEOUT"])
    options["connect_args"] = connect_args
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = options


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    _configure_engine(app)

    # Initialize extensions
    db.init_app(app)

    # Import models so create_all() sees every table
    from . import models  # noqa: F401
    from .services.registry import ServiceRegistry

    store = LedgerStore(db)
    services = ServiceRegistry.build(store)
    app.extensions["verger"] = services

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.movements import movements_bp
    from .routes.sales import sales_bp
    from .routes.clients import clients_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(movements_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(clients_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ALLOWED_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    @app.errorhandler(404)
    def route_not_found(error):
        return {"error": "Route not found"}, 404

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    with app.app_context():
        store.initialize()
        if app.config["SEED_SAMPLE_DATA"]:
            from .services.seed_service import seed_sample_data
            seed_sample_data(services)

    return app
