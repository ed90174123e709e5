"""Caller-facing operations for the ``equity_ledger`` package.

:class:`Ledger` ties the pieces together: raw form strings go through
:mod:`equity_ledger.fields`, records are persisted by
:class:`~equity_ledger.store.LedgerStore`, and statements and balances are
computed by :mod:`equity_ledger.statements` over the store's ordered reads.
Bulk interchange is delegated to :mod:`equity_ledger.interchange`.

Commands raise :class:`~equity_ledger.errors.LedgerError` subclasses; input
and selection errors leave stored state unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal
from os import PathLike

from . import statements
from .config import LedgerConfig
from .errors import MissingSelection
from .fields import parse_type, transaction_from_form
from .interchange import delimited, script
from .interchange.delimited import CsvImportResult
from .models import CategoryBalance, Projection, SymbolBalance, Transaction, TxnType
from .store import LedgerStore


def _require_symbol(symbol: str | None) -> str:
    s = (symbol or "").strip()
    if not s:
        raise MissingSelection("Please select or enter a stock name")
    return s


def _require_category(category: TxnType | str | None) -> TxnType:
    if isinstance(category, TxnType):
        return category
    if category is None or not category.strip():
        raise MissingSelection("Please select a transaction type")
    return parse_type(category)


class Ledger:
    """Command/query facade over one ledger store."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    @classmethod
    def open(cls, config: LedgerConfig | None = None, *, ensure_schema: bool = True) -> Ledger:
        """Open the ledger described by ``config`` (or the environment).

        With ``ensure_schema`` the table is created when missing; deployments
        managed by Alembic may pass ``False``.
        """

        store = LedgerStore(config if config is not None else LedgerConfig.from_env())
        if ensure_schema:
            store.ensure_schema()
        return cls(store)

    def close(self) -> None:
        """Release the store's pooled connections."""
        self.store.dispose()

    # ---- commands -----------------------------------------------------------

    def add_transaction(
        self,
        *,
        date: str,
        type: str,
        symbol: str = "",
        quantity: str = "",
        price: str = "",
        amount: str = "",
    ) -> Transaction:
        """Validate form input, persist it, and return the stored record."""

        record = transaction_from_form(
            date_text=date,
            type_text=type,
            symbol=symbol,
            quantity_text=quantity,
            price_text=price,
            amount_text=amount,
        )
        new_id = self.store.insert(record)
        return replace(record, id=new_id)

    def update_transaction(
        self,
        txn_id: int,
        *,
        date: str,
        type: str,
        symbol: str = "",
        quantity: str = "",
        price: str = "",
        amount: str = "",
    ) -> Transaction:
        """Replace every field of transaction ``txn_id`` with the form input."""

        if txn_id <= 0:
            raise MissingSelection("Select a transaction to update")
        record = transaction_from_form(
            date_text=date,
            type_text=type,
            symbol=symbol,
            quantity_text=quantity,
            price_text=price,
            amount_text=amount,
            txn_id=txn_id,
        )
        self.store.update(record)
        return record

    def delete_transaction(self, txn_id: int) -> None:
        self.store.delete(txn_id)

    def delete_all(self) -> int:
        return self.store.delete_all()

    # ---- queries ------------------------------------------------------------

    def list_transactions(self) -> list[Transaction]:
        """All transactions, newest id first."""
        return self.store.list_all()

    def get_transaction(self, txn_id: int) -> Transaction | None:
        return self.store.get(txn_id)

    def statement_for_symbol(self, symbol: str | None) -> list[Transaction]:
        s = _require_symbol(symbol)
        return statements.symbol_statement(self.store.list_for_symbol(s))

    def statement_for_category(self, category: TxnType | str | None) -> list[Transaction]:
        t = _require_category(category)
        return statements.category_statement(self.store.list_for_type(t))

    def balance_for_symbol(self, symbol: str | None) -> SymbolBalance:
        s = _require_symbol(symbol)
        return statements.symbol_balance(s, self.store.list_for_symbol(s))

    def balance_for_category(self, category: TxnType | str | None) -> CategoryBalance:
        t = _require_category(category)
        return statements.category_balance(t, self.store.list_for_type(t))

    def symbol_balances(self) -> list[SymbolBalance]:
        return statements.symbol_balances(self.store.list_trades())

    def category_balances(self) -> list[CategoryBalance]:
        return statements.category_balances(self.store.list_chronological())

    def available_balance(self) -> Decimal:
        return statements.available_balance(self.store.list_chronological())

    # ---- interchange --------------------------------------------------------

    def export_ledger(self, path: str | PathLike[str]) -> int:
        """Write a restorable script of the whole ledger; return rows written."""
        return script.export_script(self.store, path)

    def import_ledger(self, path: str | PathLike[str]) -> int:
        """Replace the ledger with a script; return statements executed."""
        return script.import_script(self.store, path)

    def import_csv(self, path: str | PathLike[str]) -> CsvImportResult:
        return delimited.import_csv(self.store, path)

    def export_csv(
        self,
        path: str | PathLike[str],
        rows: Iterable[Transaction | SymbolBalance | CategoryBalance],
        projection: Projection,
    ) -> int:
        return delimited.export_csv(path, rows, projection)


__all__ = ["Ledger"]
