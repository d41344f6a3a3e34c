import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from verger import create_app
from verger.extensions import db
from verger.models import Product, Sale


def _columns(engine, table):
    return [c["name"] for c in inspect(engine).get_columns(table)]


@pytest.mark.schema
class TestInitialize:
    def test_fresh_database_has_all_tables(self, app):
        tables = set(inspect(db.engine).get_table_names())
        assert {"products", "stock_movements", "sales", "clients"} <= tables
        assert "client_id" in _columns(db.engine, "sales")

    def test_second_initialization_is_a_no_op(self, services, make_product, make_client):
        product = make_product("Gala apples", stock=10)
        client = make_client("Marie Dubois")
        services.sales.record_sale(product_id=product.id, quantity=1, channel="kiosk", client_id=client.id)
        columns_before = {t: _columns(db.engine, t) for t in ("products", "stock_movements", "sales", "clients")}

        added = services.store.initialize()

        assert added == []
        columns_after = {t: _columns(db.engine, t) for t in ("products", "stock_movements", "sales", "clients")}
        assert columns_after == columns_before
        assert services.store.count(Product) == 1
        assert services.store.count(Sale, client_id=client.id) == 1

    def test_foreign_keys_enforced(self, services):
        with pytest.raises(IntegrityError):
            db.session.execute(text(
                "INSERT INTO stock_movements (product_id, direction, quantity) VALUES (999, 'entry', 1)"
            ))
            db.session.flush()
        db.session.rollback()

    def test_check_constraints(self, services, make_product):
        product = make_product(stock=1)
        with pytest.raises(IntegrityError):
            db.session.execute(
                text("UPDATE products SET stock_level = -1 WHERE id = :id"), {"id": product.id}
            )
        db.session.rollback()
        with pytest.raises(IntegrityError):
            db.session.execute(text(
                "INSERT INTO sales (product_id, quantity, channel) VALUES (:id, 1, 'online')"
            ), {"id": product.id})
        db.session.rollback()


@pytest.mark.schema
def test_legacy_sales_table_gains_client_id_in_place(tmp_path):
    path = tmp_path / "legacy.sqlite3"
    legacy = create_engine(f"sqlite:///{path}")
    with legacy.begin() as conn:
        conn.execute(text(
            "CREATE TABLE products ("
            " id INTEGER PRIMARY KEY AUTOINCREMENT,"
            " name VARCHAR(255) NOT NULL UNIQUE,"
            " category VARCHAR(16) NOT NULL,"
            " unit VARCHAR(16) NOT NULL,"
            " stock_level FLOAT NOT NULL DEFAULT 0,"
            " alert_threshold FLOAT DEFAULT 10,"
            " created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP)"
        ))
        conn.execute(text(
            "CREATE TABLE sales ("
            " id INTEGER PRIMARY KEY AUTOINCREMENT,"
            " product_id INTEGER NOT NULL REFERENCES products(id),"
            " quantity FLOAT NOT NULL,"
            " channel VARCHAR(16) NOT NULL,"
            " occurred_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP)"
        ))
        conn.execute(text(
            "INSERT INTO products (name, category, unit, stock_level) VALUES ('Gala apples', 'fruit', 'kg', 100)"
        ))
        conn.execute(text("INSERT INTO sales (product_id, quantity, channel) VALUES (1, 5, 'market')"))
    legacy.dispose()

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{path}",
        'SEED_SAMPLE_DATA': False,
    })

    with app.app_context():
        store = app.extensions["verger"].store
        assert "client_id" in _columns(db.engine, "sales")

        sale = db.session.get(Sale, 1)
        assert sale.quantity == 5
        assert sale.channel == "market"
        assert sale.client_id is None

        assert store.initialize() == []
        assert _columns(db.engine, "sales").count("client_id") == 1
        assert store.count(Sale) == 1

        db.session.remove()
        db.engine.dispose()
