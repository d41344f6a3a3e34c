# Overview: Locking primitives used by LedgerStore.atomic() units of work.

from __future__ import annotations

from sqlalchemy import text


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write() covers it there.
    """
    return query.with_for_update()


def begin_write(session) -> None:
    """
    Take the database write lock before the first read of a unit of work.

    SQLite only serializes writers at the first write, so a plain BEGIN would
    let two units read the same stock value. BEGIN IMMEDIATE takes the
    reserved lock up front; other engines rely on lock_for_update().
    """
    if session.get_bind().dialect.name == "sqlite":
        session.execute(text("BEGIN IMMEDIATE"))
