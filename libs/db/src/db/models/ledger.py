from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, Integer, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..types import ExactDecimal


class Base(DeclarativeBase):
    pass


# Closed set of transaction types accepted by the table. Mirrors
# ``equity_ledger.models.TxnType``; the CHECK below keeps raw SQL imports honest.
TXN_TYPES: tuple[str, ...] = (
    "BUY",
    "SELL",
    "CHARGES",
    "ADD_FUNDS",
    "WITHDRAWAL",
    "REWARDS",
    "CREDIT",
    "DEBIT",
)


# ---------------------------
# Core: ledger_transactions
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "ledger_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    txn_date: Mapped[date] = mapped_column(Date, nullable=False)
    txn_type: Mapped[str] = mapped_column(String(50), nullable=False)
    # Empty string (never NULL) for cash-only types.
    symbol: Mapped[str] = mapped_column(String(255), nullable=False, server_default=text("''"))
    quantity: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    price: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    credit: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    debit: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "txn_type in (" + ",".join(f"'{t}'" for t in TXN_TYPES) + ")",
            name="ck_ledger_tx_type",
        ),
        # Statement queries filter by symbol or type and order by (txn_date, id)
        Index("ix_ledger_transactions_symbol_date", "symbol", "txn_date", "id"),
        Index("ix_ledger_transactions_type_date", "txn_type", "txn_date", "id"),
        # AUTOINCREMENT keeps SQLite from reusing ids after single deletes.
        {"sqlite_autoincrement": True},
    )


__all__ = [
    "Base",
    "LedgerTransaction",
    "TXN_TYPES",
]
