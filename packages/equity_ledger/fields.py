"""Field parsing: raw strings from forms and CSV cells into typed values.

All parsers raise a :class:`~equity_ledger.errors.FieldError` subclass on bad
input and never return ``None``:

- :func:`parse_date` tries a fixed, ordered list of day-first and year-first
  patterns and returns the first match.
- :func:`parse_type` accepts any casing and surrounding whitespace.
- :func:`parse_decimal` treats blank input as zero.
- :func:`split_delimited_line` splits one CSV line on commas outside quotes.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation

from .errors import InvalidDate, InvalidNumber, InvalidTransactionType
from .models import ZERO, Transaction, TxnType

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

# (pattern label, regex, field order). Tried in this exact order; the first
# pattern that matches and yields a real calendar date wins. ``d``/``M``
# accept one or two digits, ``dd``/``MM`` exactly two, ``yy`` exactly two
# (2000-2099) and ``yyyy`` exactly four.
_DATE_PATTERNS: tuple[tuple[str, re.Pattern[str], str], ...] = (
    ("d/M/yy", re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2})"), "dmy"),
    ("dd/MM/yyyy", re.compile(r"(\d{2})/(\d{2})/(\d{4})"), "dmy"),
    ("d/M/yyyy", re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), "dmy"),
    ("dd/M/yyyy", re.compile(r"(\d{2})/(\d{1,2})/(\d{4})"), "dmy"),
    ("dd/MM/yy", re.compile(r"(\d{2})/(\d{2})/(\d{2})"), "dmy"),
    ("yyyy/M/d", re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})"), "ymd"),
    ("yyyy/MM/dd", re.compile(r"(\d{4})/(\d{2})/(\d{2})"), "ymd"),
)

DATE_PATTERNS: tuple[str, ...] = tuple(label for label, _, _ in _DATE_PATTERNS)


def _match_date(regex: re.Pattern[str], order: str, s: str) -> date | None:
    m = regex.fullmatch(s)
    if m is None:
        return None
    a, b, c = m.groups()
    if order == "dmy":
        day, month, year_text = int(a), int(b), c
    else:
        year_text, month, day = a, int(b), int(c)
    year = int(year_text)
    if len(year_text) == 2:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(text: str | None) -> date:
    """Parse ``text`` with the first matching pattern in :data:`DATE_PATTERNS`.

    Two-digit years fall in 2000-2099. A well-formed but impossible calendar
    date such as ``31/02/2024`` is rejected, not clamped to the last day of
    the month as the desktop tool's lenient parser did.
    """

    s = (text or "").strip()
    for _label, regex, order in _DATE_PATTERNS:
        parsed = _match_date(regex, order, s)
        if parsed is not None:
            return parsed
    raise InvalidDate(text or "")


# ---------------------------------------------------------------------------
# Transaction types
# ---------------------------------------------------------------------------

VALID_TYPES: tuple[str, ...] = tuple(t.value for t in TxnType)


def parse_type(text: str | None) -> TxnType:
    """Return the :class:`TxnType` named by ``text`` (case-insensitive).

    The older spelling ``ADD FUNDS`` (with a space) is accepted for
    ``ADD_FUNDS``.
    """

    raw = text or ""
    normalized = " ".join(raw.strip().upper().split()).replace(" ", "_")
    try:
        return TxnType(normalized)
    except ValueError:
        raise InvalidTransactionType(raw, VALID_TYPES) from None


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def parse_decimal(text: str | None, field_name: str) -> Decimal:
    """Parse an exact decimal; blank input is zero.

    Only finite values are accepted. ``field_name`` is carried on the raised
    :class:`InvalidNumber` so callers can point at the offending input.
    """

    if text is None or not text.strip():
        return ZERO
    s = text.strip()
    try:
        d = Decimal(s)
    except InvalidOperation:
        raise InvalidNumber(field_name, s) from None
    if not d.is_finite():
        raise InvalidNumber(field_name, s)
    return d


# ---------------------------------------------------------------------------
# Delimited lines
# ---------------------------------------------------------------------------


def split_delimited_line(line: str) -> list[str]:
    """Split ``line`` on commas that are outside double-quoted spans.

    Quote characters toggle the quoted state and are dropped from the output.
    Doubled quotes are not an escape: ``"a""b"`` yields ``ab``.
    """

    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    for ch in line:
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


# ---------------------------------------------------------------------------
# Form input
# ---------------------------------------------------------------------------


def transaction_from_form(
    *,
    date_text: str | None,
    type_text: str | None,
    symbol: str | None,
    quantity_text: str | None,
    price_text: str | None,
    amount_text: str | None,
    txn_id: int = 0,
) -> Transaction:
    """Build a :class:`Transaction` from the six strings of an entry form.

    The single ``amount`` lands in ``credit`` or ``debit`` according to the
    type. ``symbol`` is ignored (stored empty) for cash-only types.
    """

    txn_type = parse_type(type_text)
    amount = parse_decimal(amount_text, "Amount")
    return Transaction.from_amount(
        id=txn_id,
        date=parse_date(date_text),
        type=txn_type,
        amount=amount,
        symbol=symbol or "",
        quantity=parse_decimal(quantity_text, "Quantity"),
        price=parse_decimal(price_text, "Rate"),
    )


__all__ = [
    "DATE_PATTERNS",
    "VALID_TYPES",
    "parse_date",
    "parse_type",
    "parse_decimal",
    "split_delimited_line",
    "transaction_from_form",
]
