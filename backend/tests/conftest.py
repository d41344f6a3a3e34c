"""
Pytest fixtures for the Verger backend tests.

Provides an application bound to a throwaway SQLite file, a test client,
the wired service registry, and small data factories.
"""

import pytest

from verger import create_app
from verger.extensions import db


@pytest.fixture(scope='function')
def db_path(tmp_path):
    return tmp_path / "verger-test.sqlite3"


@pytest.fixture(scope='function')
def app(db_path):
    """Create application for testing on a file database (threads share it)."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
        'SEED_SAMPLE_DATA': False,
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def services(app):
    """The ServiceRegistry wired by create_app()."""
    return app.extensions["verger"]


@pytest.fixture(scope='function')
def make_product(services):
    """Register a product; initial stock is booked as an entry movement."""
    counter = {"n": 0}

    def _make(name=None, *, category="fruit", unit="kg", stock=0.0, threshold=10.0):
        counter["n"] += 1
        patch = {
            "name": name or f"Product {counter['n']}",
            "category": category,
            "unit": unit,
            "stock_level": stock,
            "alert_threshold": threshold,
        }
        return services.products.register_product(patch=patch)

    return _make


@pytest.fixture(scope='function')
def make_client(services):
    counter = {"n": 0}

    def _make(name=None, *, email=None, phone=None):
        counter["n"] += 1
        return services.clients.create_client(
            name=name or f"Client {counter['n']}",
            email=email,
            phone=phone,
            consent=True,
        )

    return _make


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "schema: Schema creation and in-place evolution")
    config.addinivalue_line("markers", "inventory: Stock movement tests")
    config.addinivalue_line("markers", "products: Product catalog tests")
    config.addinivalue_line("markers", "sales: Sale recording tests")
    config.addinivalue_line("markers", "clients: CRM client registry tests")
    config.addinivalue_line("markers", "concurrent: Concurrency tests")
    config.addinivalue_line("markers", "api: HTTP route tests")
