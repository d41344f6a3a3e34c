# Overview: LedgerStore owns the products, stock_movements, sales and clients tables.

# backend/verger/store.py
"""
Ledger Store

Every service receives a LedgerStore at construction and reaches the
database only through it:
- read queries (by id, filtered, joined) for products, movements, sales, clients
- atomic(): one unit of work, committed as a whole or rolled back as a whole
- initialize(): idempotent schema creation plus in-place column evolution

Locking:
- On SQLite, atomic() opens the transaction with BEGIN IMMEDIATE, so the
  stock value read inside a unit cannot change before the unit commits.
- On other engines, *_for_update() readers lock the row (SELECT ... FOR UPDATE).
"""
from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy import event, inspect, text
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from .models import Client, Product, Sale, StockMovement
from .services.concurrency import begin_write, lock_for_update
from .validation import ConflictError, LedgerError, StorageFailure

logger = logging.getLogger(__name__)

# Columns that older databases may lack: (table, column, DDL type clause).
# The sales table predates the CRM module, which introduced client_id.
SCHEMA_EVOLUTIONS = (
    ("sales", "client_id", "INTEGER REFERENCES clients(id) ON DELETE SET NULL"),
)


def _enable_sqlite_fk(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class LedgerStore:
    def __init__(self, db):
        self.db = db

    @property
    def session(self):
        return self.db.session

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def install_sqlite_pragmas(self) -> None:
        engine = self.db.engine
        if engine.dialect.name != "sqlite":
            return
        if not event.contains(engine, "connect", _enable_sqlite_fk):
            event.listen(engine, "connect", _enable_sqlite_fk)

    def initialize(self) -> list[str]:
        """
        Create missing tables, then add missing columns to existing ones.

        Safe to run on every startup: existing rows are never touched and a
        second run finds nothing to do. Returns the "table.column" names added.
        """
        self.install_sqlite_pragmas()
        engine = self.db.engine

        self.db.create_all()

        added: list[str] = []
        inspector = inspect(engine)
        for table, column, ddl in SCHEMA_EVOLUTIONS:
            existing = {c["name"] for c in inspector.get_columns(table)}
            if column in existing:
                continue
            with engine.begin() as conn:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
            added.append(f"{table}.{column}")
            logger.info("Schema evolved: added column %s.%s", table, column)

        return added

    # ------------------------------------------------------------------
    # Units of work
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self):
        """
        Run the enclosed writes as one unit.

        Domain errors raised inside propagate unchanged after rollback;
        driver errors are translated to ConflictError / StorageFailure.
        """
        # The request-scoped Session itself, not the scoped_session proxy
        session = self.session()
        # Close any read-only transaction left open by earlier queries so the
        # unit starts with a fresh view of the rows it locks.
        if session.in_transaction():
            session.rollback()

        try:
            begin_write(session)
            yield session
            session.commit()
        except LedgerError:
            session.rollback()
            raise
        except IntegrityError as exc:
            session.rollback()
            message = str(exc.orig) if exc.orig is not None else str(exc)
            if "UNIQUE" in message.upper():
                raise ConflictError("Uniqueness constraint violated") from exc
            raise StorageFailure(f"Constraint violation: {message}") from exc
        except OperationalError as exc:
            session.rollback()
            raise StorageFailure("Storage unavailable") from exc
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageFailure("Storage failure") from exc
        except Exception:
            session.rollback()
            raise

    # ------------------------------------------------------------------
    # Products / movements / sales
    # ------------------------------------------------------------------

    def get_product(self, product_id: int) -> Product | None:
        return self.session.get(Product, product_id)

    def get_product_for_update(self, product_id: int) -> Product | None:
        query = self.session.query(Product).filter_by(id=product_id).populate_existing()
        return lock_for_update(query).first()

    def find_product_by_name(self, name: str) -> Product | None:
        return self.session.query(Product).filter(Product.name == name).first()

    def list_products(self) -> list[Product]:
        return self.session.query(Product).order_by(Product.name.asc(), Product.id.asc()).all()

    def product_has_history(self, product_id: int) -> bool:
        movements = self.session.query(StockMovement.id).filter_by(product_id=product_id).first()
        if movements is not None:
            return True
        return self.session.query(Sale.id).filter_by(product_id=product_id).first() is not None

    def list_movements(self, *, product_id: int | None = None, limit: int = 100) -> list[StockMovement]:
        query = self.session.query(StockMovement).options(joinedload(StockMovement.product))
        if product_id is not None:
            query = query.filter(StockMovement.product_id == product_id)
        return (
            query.order_by(StockMovement.occurred_at.desc(), StockMovement.id.desc())
            .limit(limit)
            .all()
        )

    def list_sales(self, *, limit: int = 100) -> list[Sale]:
        return (
            self.session.query(Sale)
            .options(joinedload(Sale.product))
            .order_by(Sale.occurred_at.desc(), Sale.id.desc())
            .limit(limit)
            .all()
        )

    def sales_for_client(self, client_id: int) -> list[Sale]:
        return (
            self.session.query(Sale)
            .options(joinedload(Sale.product))
            .filter(Sale.client_id == client_id)
            .order_by(Sale.occurred_at.desc(), Sale.id.desc())
            .all()
        )

    def count(self, model, **filters) -> int:
        return self.session.query(model).filter_by(**filters).count()

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def get_client(self, client_id: int) -> Client | None:
        return self.session.get(Client, client_id)

    def get_client_for_update(self, client_id: int) -> Client | None:
        query = self.session.query(Client).filter_by(id=client_id).populate_existing()
        return lock_for_update(query).first()

    def find_active_client_by_name(self, name: str, *, exclude_id: int | None = None) -> Client | None:
        query = self.session.query(Client).filter(Client.name == name, Client.active.is_(True))
        if exclude_id is not None:
            query = query.filter(Client.id != exclude_id)
        return query.first()

    def list_active_clients(self) -> list[Client]:
        return (
            self.session.query(Client)
            .filter(Client.active.is_(True))
            .order_by(Client.name.asc(), Client.id.asc())
            .all()
        )

    def clear_client_from_sales(self, client_id: int) -> int:
        """Null the client reference on every sale pointing at client_id."""
        return (
            self.session.query(Sale)
            .filter(Sale.client_id == client_id)
            .update({Sale.client_id: None}, synchronize_session="fetch")
        )
