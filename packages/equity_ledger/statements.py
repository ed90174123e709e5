"""Running statements and consolidated balances over transaction records.

Everything here is a pure function over an iterable of
:class:`~equity_ledger.models.Transaction`. Inputs are re-sorted by
``(date, id)`` so results do not depend on how a backend ordered them.
Sums are exact ``Decimal`` additions starting from zero; an empty selection
yields zero aggregates.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal

from .models import (
    TRADE_TYPES,
    ZERO,
    CategoryBalance,
    SymbolBalance,
    Transaction,
    TxnType,
)


def _chronological(records: Iterable[Transaction]) -> list[Transaction]:
    return sorted(records, key=lambda r: (r.date, r.id))


def symbol_statement(records: Iterable[Transaction]) -> list[Transaction]:
    """Attach running stock quantity and running cash to each record.

    Both balances are inclusive of the row they are attached to. SELL moves
    the quantity down by ``quantity``; every other type moves it up.
    """

    out: list[Transaction] = []
    quantity = ZERO
    cash = ZERO
    for r in _chronological(records):
        quantity += r.signed_quantity
        cash += r.net_cash
        out.append(replace(r, running_stock_quantity=quantity, running_cash_balance=cash))
    return out


def category_statement(records: Iterable[Transaction]) -> list[Transaction]:
    """Attach running cash to each record; the stock column stays ``None``."""

    out: list[Transaction] = []
    cash = ZERO
    for r in _chronological(records):
        cash += r.net_cash
        out.append(replace(r, running_stock_quantity=None, running_cash_balance=cash))
    return out


def symbol_balance(symbol: str, records: Iterable[Transaction]) -> SymbolBalance:
    """Consolidate the BUY/SELL records of ``symbol``."""

    quantity = ZERO
    cash = ZERO
    for r in records:
        if r.symbol == symbol and r.type in TRADE_TYPES:
            quantity += r.signed_quantity
            cash += r.net_cash
    return SymbolBalance(symbol=symbol, stock_quantity=quantity, cash_balance=cash)


def symbol_balances(records: Iterable[Transaction]) -> list[SymbolBalance]:
    """One balance per distinct traded symbol, largest holding first.

    Equal quantities are ordered by symbol so the listing is stable.
    """

    totals: dict[str, tuple[Decimal, Decimal]] = {}
    for r in records:
        if r.type not in TRADE_TYPES:
            continue
        quantity, cash = totals.get(r.symbol, (ZERO, ZERO))
        totals[r.symbol] = (quantity + r.signed_quantity, cash + r.net_cash)

    balances = [
        SymbolBalance(symbol=s, stock_quantity=q, cash_balance=c) for s, (q, c) in totals.items()
    ]
    balances.sort(key=lambda b: b.symbol)
    balances.sort(key=lambda b: b.stock_quantity, reverse=True)
    return balances


def category_balance(txn_type: TxnType, records: Iterable[Transaction]) -> CategoryBalance:
    cash = ZERO
    for r in records:
        if r.type == txn_type:
            cash += r.net_cash
    return CategoryBalance(type=TxnType(txn_type), cash_balance=cash)


def category_balances(records: Iterable[Transaction]) -> list[CategoryBalance]:
    """One balance per transaction type present, ordered by type name."""

    totals: dict[TxnType, Decimal] = {}
    for r in records:
        totals[r.type] = totals.get(r.type, ZERO) + r.net_cash
    return [
        CategoryBalance(type=t, cash_balance=totals[t]) for t in sorted(totals, key=lambda t: t.value)
    ]


def available_balance(records: Iterable[Transaction]) -> Decimal:
    """Total credit minus total debit across ``records``."""

    credit = ZERO
    debit = ZERO
    for r in records:
        credit += r.credit
        debit += r.debit
    return credit - debit


__all__ = [
    "symbol_statement",
    "category_statement",
    "symbol_balance",
    "symbol_balances",
    "category_balance",
    "category_balances",
    "available_balance",
]
