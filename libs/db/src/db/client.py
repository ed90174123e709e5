"""SQLAlchemy engine/session helpers for the workspace.

Usage
-----
from db.client import create_db_engine, make_session_factory, session_scope

engine = create_db_engine("sqlite+pysqlite:///ledger.db")
sessions = make_session_factory(engine)
with session_scope(sessions) as s:
    s.execute(...)

Engines are created explicitly by their owner (no process-wide singleton), so
two stores pointed at different databases can coexist in one process.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import Session, sessionmaker


def _enable_sqlite_transactional_ddl(engine: Engine) -> None:
    """Let SQLAlchemy, not pysqlite, decide when a SQLite transaction begins.

    pysqlite only opens a transaction implicitly before DML statements, so a
    ``DROP TABLE`` or ``CREATE TABLE`` runs outside of it and cannot be rolled
    back. Disabling the driver's own handling and emitting ``BEGIN`` from the
    engine's ``begin`` event makes DDL part of the surrounding transaction.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _record):  # pragma: no cover - tiny bridge
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # pragma: no cover - tiny bridge
        conn.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str | URL, *, echo: bool = False) -> Engine:
    """Return a new SQLAlchemy engine for ``database_url``."""

    engine = create_engine(database_url, pool_pre_ping=True, echo=echo)
    if engine.dialect.name == "sqlite":
        _enable_sqlite_transactional_ddl(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""

    return sessionmaker(bind=engine, expire_on_commit=False, class_=Session)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "create_db_engine",
    "make_session_factory",
    "session_scope",
]
