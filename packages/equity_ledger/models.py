"""Value types for the ledger: transactions, consolidated balances, projections.

Every type here is an immutable ``dataclass``. Monetary and quantity fields
are ``decimal.Decimal`` throughout; nothing in this package converts them to
``float``.

Projections
-----------
Delimited-text exports render rows through one of four fixed
:class:`Projection` layouts. Each layout is an ordered list of
``(header, attribute)`` pairs looked up on the row with ``getattr``, so any of
:class:`Transaction`, :class:`SymbolBalance` or :class:`CategoryBalance` can be
rendered by any projection. Missing numbers render as ``"0"``, missing dates
and strings as ``""``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any

from .errors import InvalidNumber, MissingField

ZERO = Decimal(0)


class TxnType(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    CHARGES = "CHARGES"
    ADD_FUNDS = "ADD_FUNDS"
    WITHDRAWAL = "WITHDRAWAL"
    REWARDS = "REWARDS"
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"

    @property
    def is_trade(self) -> bool:
        """True for the types that carry a stock leg (BUY/SELL)."""
        return self in TRADE_TYPES

    @property
    def is_credit(self) -> bool:
        """True when the amount of this type lands in ``credit``."""
        return self in CREDIT_TYPES


TRADE_TYPES: frozenset[TxnType] = frozenset({TxnType.BUY, TxnType.SELL})
CREDIT_TYPES: frozenset[TxnType] = frozenset(
    {TxnType.SELL, TxnType.ADD_FUNDS, TxnType.REWARDS, TxnType.CREDIT}
)
DEBIT_TYPES: frozenset[TxnType] = frozenset(
    {TxnType.BUY, TxnType.WITHDRAWAL, TxnType.CHARGES, TxnType.DEBIT}
)


def split_amount(txn_type: TxnType, amount: Decimal) -> tuple[Decimal, Decimal]:
    """Return ``(credit, debit)`` for a magnitude of the given type."""

    if txn_type in CREDIT_TYPES:
        return amount, ZERO
    if txn_type in DEBIT_TYPES:
        return ZERO, amount
    return ZERO, ZERO  # pragma: no cover - every member is in one of the sets


@dataclass(frozen=True, slots=True, kw_only=True)
class Transaction:
    """One ledger event, optionally annotated with running balances.

    ``id`` is ``0`` until the store assigns one. ``running_cash_balance`` and
    ``running_stock_quantity`` are only set on rows produced by
    :mod:`equity_ledger.statements`; they are never persisted.

    Construction normalizes ``symbol`` to ``""`` for cash-only types and
    rejects negative magnitudes, a blank symbol on BUY/SELL, and a
    credit/debit pair that does not match the type's side.
    """

    date: date
    type: TxnType
    symbol: str = ""
    quantity: Decimal = ZERO
    price: Decimal = ZERO
    credit: Decimal = ZERO
    debit: Decimal = ZERO
    id: int = 0
    running_cash_balance: Decimal | None = None
    running_stock_quantity: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", TxnType(self.type))
        symbol = (self.symbol or "").strip()
        if not self.type.is_trade:
            symbol = ""
        elif not symbol:
            raise MissingField("symbol", f"Stock name is required for {self.type} transactions")
        object.__setattr__(self, "symbol", symbol)

        for field_name in ("quantity", "price", "credit", "debit"):
            value: Decimal = getattr(self, field_name)
            if value < 0:
                raise InvalidNumber(field_name, str(value), "negative amount")

        wrong_side = self.debit if self.type.is_credit else self.credit
        if wrong_side != 0:
            side = "debit" if self.type.is_credit else "credit"
            raise InvalidNumber(side, str(wrong_side), f"{self.type} cannot carry a {side} amount")

    @classmethod
    def from_amount(
        cls,
        *,
        date: date,
        type: TxnType,
        amount: Decimal,
        symbol: str = "",
        quantity: Decimal = ZERO,
        price: Decimal = ZERO,
        id: int = 0,
    ) -> Transaction:
        """Build a record from a single magnitude, placing it on the type's side."""

        credit, debit = split_amount(type, amount)
        return cls(
            id=id,
            date=date,
            type=type,
            symbol=symbol,
            quantity=quantity,
            price=price,
            credit=credit,
            debit=debit,
        )

    @property
    def amount(self) -> Decimal:
        """The non-zero side of the record (``credit`` or ``debit``)."""
        return self.credit if self.type.is_credit else self.debit

    @property
    def net_cash(self) -> Decimal:
        return self.credit - self.debit

    @property
    def signed_quantity(self) -> Decimal:
        """Quantity as it moves holdings: SELL reduces, everything else adds."""
        return -self.quantity if self.type is TxnType.SELL else self.quantity

    def project(self, projection: Projection) -> list[str]:
        return render_row(self, projection)


@dataclass(frozen=True, slots=True)
class SymbolBalance:
    """Consolidated holding for one symbol across its BUY/SELL records."""

    symbol: str
    stock_quantity: Decimal = ZERO
    cash_balance: Decimal = ZERO


@dataclass(frozen=True, slots=True)
class CategoryBalance:
    """Consolidated cash movement for one transaction type."""

    type: TxnType
    cash_balance: Decimal = ZERO


# ---------------------------------------------------------------------------
# Delimited-text projections
# ---------------------------------------------------------------------------

CSV_DATE_FORMAT = "%d/%m/%Y"


class Projection(StrEnum):
    STATEMENT = "statement"
    BALANCES = "balances"
    CATEGORY_STATEMENT = "category-statement"
    CATEGORY_BALANCES = "category-balances"


_PROJECTION_COLUMNS: dict[Projection, tuple[tuple[str, str], ...]] = {
    Projection.STATEMENT: (
        ("Date", "date"),
        ("Txn_Type", "type"),
        ("Stock_Name", "symbol"),
        ("Qty", "quantity"),
        ("Rate", "price"),
        ("Credit", "credit"),
        ("Debit", "debit"),
        ("Stock_Balance", "running_stock_quantity"),
        ("Balance", "running_cash_balance"),
    ),
    Projection.BALANCES: (
        ("Stock_Name", "symbol"),
        ("Stock_Balance", "stock_quantity"),
        ("Balance", "cash_balance"),
    ),
    Projection.CATEGORY_STATEMENT: (
        ("Date", "date"),
        ("Txn_Type", "type"),
        ("Credit", "credit"),
        ("Debit", "debit"),
        ("Balance", "running_cash_balance"),
    ),
    Projection.CATEGORY_BALANCES: (
        ("Txn_Type", "type"),
        ("Balance", "cash_balance"),
    ),
}

# Attributes rendered as numbers ("0" when missing); everything else is text.
_NUMERIC_ATTRS = frozenset(
    {
        "quantity",
        "price",
        "credit",
        "debit",
        "running_stock_quantity",
        "running_cash_balance",
        "stock_quantity",
        "cash_balance",
    }
)


def projection_header(projection: Projection) -> list[str]:
    return [header for header, _ in _PROJECTION_COLUMNS[projection]]


def _render_cell(attr: str, value: Any) -> str:
    if value is None:
        return "0" if attr in _NUMERIC_ATTRS else ""
    if isinstance(value, date):
        return value.strftime(CSV_DATE_FORMAT)
    return str(value)


def render_row(row: Transaction | SymbolBalance | CategoryBalance, projection: Projection) -> list[str]:
    """Render ``row`` as the ordered cells of ``projection``."""

    return [_render_cell(attr, getattr(row, attr, None)) for _, attr in _PROJECTION_COLUMNS[projection]]


__all__ = [
    "ZERO",
    "TxnType",
    "TRADE_TYPES",
    "CREDIT_TYPES",
    "DEBIT_TYPES",
    "split_amount",
    "Transaction",
    "SymbolBalance",
    "CategoryBalance",
    "CSV_DATE_FORMAT",
    "Projection",
    "projection_header",
    "render_row",
]
