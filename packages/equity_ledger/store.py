# ruff: noqa: I001
"""Persistence gateway for ledger transactions.

:class:`LedgerStore` is the only component that touches the database. It maps
between the immutable :class:`~equity_ledger.models.Transaction` value type and
the ``ledger_transactions`` ORM model owned by ``libs/db``.

Every operation opens a session through :func:`db.client.session_scope`,
commits on success and rolls back on any exception before returning. Driver
and SQLAlchemy errors surface as :class:`~equity_ledger.errors.StorageFailure`
with the original exception chained.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import delete, func, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.schema import Table

from db.client import create_db_engine, make_session_factory, session_scope
from db.models.ledger import LedgerTransaction

from .config import LedgerConfig
from .errors import FieldError, MissingSelection, StorageFailure
from .logging_setup import get_logger
from .models import TRADE_TYPES, Transaction, TxnType

logger = get_logger("equity_ledger.store")

_TRADE_TYPE_NAMES = tuple(t.value for t in TRADE_TYPES)


def _to_row(record: Transaction) -> dict[str, Any]:
    return {
        "txn_date": record.date,
        "txn_type": record.type.value,
        "symbol": record.symbol,
        "quantity": record.quantity,
        "price": record.price,
        "credit": record.credit,
        "debit": record.debit,
    }


def _to_record(row: LedgerTransaction) -> Transaction:
    try:
        return Transaction(
            id=row.id,
            date=row.txn_date,
            type=TxnType(row.txn_type),
            symbol=row.symbol or "",
            quantity=row.quantity,
            price=row.price,
            credit=row.credit,
            debit=row.debit,
        )
    except (FieldError, ValueError) as exc:
        raise StorageFailure(f"stored transaction {row.id} is invalid: {exc}") from exc


class LedgerStore:
    """CRUD and ordered queries over ``ledger_transactions``.

    Parameters
    ----------
    config:
        Connection settings. Ignored for engine creation when ``engine`` is
        given, but still describes the store.
    engine:
        Optional pre-built engine (tests share one across helpers).
    """

    def __init__(self, config: LedgerConfig, *, engine: Engine | None = None) -> None:
        self.config = config
        self._engine = engine if engine is not None else create_db_engine(
            config.url(), echo=config.echo
        )
        self._sessions = make_session_factory(self._engine)

    # ---- plumbing -----------------------------------------------------------

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def table(self) -> Table:
        return LedgerTransaction.__table__  # type: ignore[return-value]

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with session_scope(self._sessions) as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageFailure(f"{action} failed: {exc}") from exc

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Yield a connection inside one transaction (commit on success).

        Used by the bulk script import, which runs raw statements. Errors are
        not translated here; the caller decides how to report them.
        """

        with self._engine.begin() as conn:
            yield conn

    def ensure_schema(self) -> None:
        """Create ``ledger_transactions`` and its indexes when missing."""

        try:
            LedgerTransaction.metadata.create_all(self._engine, tables=[self.table])
        except SQLAlchemyError as exc:
            raise StorageFailure(f"schema creation failed: {exc}") from exc

    def dispose(self) -> None:
        self._engine.dispose()

    # ---- mutations ----------------------------------------------------------

    def insert(self, record: Transaction) -> int:
        """Persist ``record`` and return the id assigned by the database."""

        with self._session("insert") as session:
            row = LedgerTransaction(**_to_row(record))
            session.add(row)
            session.flush()
            new_id = row.id
        logger.info("Inserted %s transaction id=%s date=%s", record.type, new_id, record.date)
        return new_id

    def insert_many(self, records: Iterable[Transaction]) -> int:
        """Insert all ``records`` in one transaction; nothing is kept on failure."""

        rows = [LedgerTransaction(**_to_row(r)) for r in records]
        if not rows:
            return 0
        with self._session("bulk insert") as session:
            session.add_all(rows)
        logger.info("Inserted %s transactions", len(rows))
        return len(rows)

    def update(self, record: Transaction) -> None:
        """Replace every field of the stored row identified by ``record.id``."""

        if record.id <= 0:
            raise MissingSelection("Select a transaction to update")
        with self._session("update") as session:
            row = session.get(LedgerTransaction, record.id)
            if row is None:
                raise MissingSelection(f"Transaction {record.id} does not exist")
            for key, value in _to_row(record).items():
                setattr(row, key, value)
        logger.info("Updated transaction id=%s", record.id)

    def delete(self, txn_id: int) -> None:
        if txn_id <= 0:
            raise MissingSelection("Select a transaction to delete")
        with self._session("delete") as session:
            row = session.get(LedgerTransaction, txn_id)
            if row is None:
                raise MissingSelection(f"Transaction {txn_id} does not exist")
            session.delete(row)
        logger.info("Deleted transaction id=%s", txn_id)

    def delete_all(self) -> int:
        """Delete every row and restart id assignment at 1.

        Returns the number of rows removed.
        """

        with self._session("delete all") as session:
            removed = session.scalar(select(func.count()).select_from(LedgerTransaction)) or 0
            self._clear_and_reset_ids(session)
        logger.info("Deleted all transactions (%s rows); id sequence reset", removed)
        return removed

    def _clear_and_reset_ids(self, session: Session) -> None:
        name = self.table.name
        dialect = self.dialect_name
        if dialect == "postgresql":
            session.execute(text(f"TRUNCATE TABLE {name} RESTART IDENTITY"))
            return
        session.execute(delete(LedgerTransaction))
        if dialect == "sqlite":
            has_sequence = session.scalar(
                text("SELECT count(*) FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'")
            )
            if has_sequence:
                session.execute(text("DELETE FROM sqlite_sequence WHERE name = :name"), {"name": name})
        elif dialect in ("mysql", "mariadb"):
            session.execute(text(f"ALTER TABLE {name} AUTO_INCREMENT = 1"))

    def sync_id_sequence(self, conn: Connection) -> None:
        """Advance a PostgreSQL identity past explicitly inserted ids.

        SQLite and MySQL track the maximum id on their own.
        """

        if self.dialect_name != "postgresql":
            return
        name = self.table.name
        conn.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{name}', 'id'), "
                f"COALESCE(MAX(id), 1), MAX(id) IS NOT NULL) FROM {name}"
            )
        )

    # ---- queries ------------------------------------------------------------

    def get(self, txn_id: int) -> Transaction | None:
        with self._session("lookup") as session:
            row = session.get(LedgerTransaction, txn_id)
            return _to_record(row) if row is not None else None

    def list_all(self) -> list[Transaction]:
        """Every transaction, newest id first."""

        stmt = select(LedgerTransaction).order_by(LedgerTransaction.id.desc())
        return self._fetch(stmt, "list")

    def list_in_store_order(self) -> list[Transaction]:
        stmt = select(LedgerTransaction).order_by(LedgerTransaction.id.asc())
        return self._fetch(stmt, "list")

    def list_for_symbol(self, symbol: str) -> list[Transaction]:
        """BUY/SELL records of ``symbol`` in ``(date, id)`` order."""

        stmt = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.symbol == symbol,
                LedgerTransaction.txn_type.in_(_TRADE_TYPE_NAMES),
            )
            .order_by(LedgerTransaction.txn_date, LedgerTransaction.id)
        )
        return self._fetch(stmt, "symbol query")

    def list_for_type(self, txn_type: TxnType) -> list[Transaction]:
        stmt = (
            select(LedgerTransaction)
            .where(LedgerTransaction.txn_type == TxnType(txn_type).value)
            .order_by(LedgerTransaction.txn_date, LedgerTransaction.id)
        )
        return self._fetch(stmt, "category query")

    def list_trades(self) -> list[Transaction]:
        stmt = (
            select(LedgerTransaction)
            .where(LedgerTransaction.txn_type.in_(_TRADE_TYPE_NAMES))
            .order_by(LedgerTransaction.txn_date, LedgerTransaction.id)
        )
        return self._fetch(stmt, "trade query")

    def list_chronological(self) -> list[Transaction]:
        stmt = select(LedgerTransaction).order_by(LedgerTransaction.txn_date, LedgerTransaction.id)
        return self._fetch(stmt, "list")

    def _fetch(self, stmt: Any, action: str) -> list[Transaction]:
        with self._session(action) as session:
            return [_to_record(row) for row in session.scalars(stmt)]


__all__ = ["LedgerStore"]
