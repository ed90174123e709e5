"""Typed failures raised by the ledger engine.

Every failure the engine surfaces is a :class:`LedgerError` subclass with a
stable ``kind`` string, so callers (the CLI, a GUI shell, tests) can pick a
message or recovery path without inspecting free text.

Recoverable input problems derive from :class:`FieldError` (also a
``ValueError``) and never change stored state. :class:`MalformedRow` is
collected as a diagnostic by the CSV importer rather than raised to callers.
Storage errors always chain the driver exception as ``__cause__``.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import ClassVar


class LedgerError(Exception):
    """Base class for all engine failures."""

    kind: ClassVar[str] = "ledger_error"


class FieldError(LedgerError, ValueError):
    """A raw input value could not be turned into a typed field."""

    kind = "field_error"


class InvalidDate(FieldError):
    kind = "invalid_date"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(
            f"Invalid date format for {text!r}. Use formats like DD/MM/YYYY, D/M/YY or YYYY/MM/DD."
        )


class InvalidTransactionType(FieldError):
    kind = "invalid_transaction_type"

    def __init__(self, text: str, valid: Iterable[str]) -> None:
        self.text = text
        self.valid = tuple(valid)
        super().__init__(
            f"Invalid transaction type {text!r}. Please use one of: {', '.join(self.valid)}"
        )


class InvalidNumber(FieldError):
    kind = "invalid_number"

    def __init__(self, field: str, text: str, reason: str | None = None) -> None:
        self.field = field
        self.text = text
        detail = reason or "invalid number format"
        super().__init__(f"{detail} for {field}: {text!r}")


class MissingField(FieldError):
    kind = "missing_field"

    def __init__(self, field: str, reason: str | None = None) -> None:
        self.field = field
        super().__init__(reason or f"{field} is required")


class MissingSelection(LedgerError):
    """A command was issued without identifying (or with an unknown) target."""

    kind = "missing_selection"


class StorageFailure(LedgerError):
    """The backing store was unreachable or rejected an operation."""

    kind = "storage_failure"


class ImportAborted(StorageFailure):
    """A full-ledger import failed part way and was rolled back as a whole."""

    kind = "import_aborted"

    def __init__(self, message: str, *, statement_number: int | None = None) -> None:
        self.statement_number = statement_number
        super().__init__(message)


class MalformedRow(LedgerError):
    """One delimited-text line that could not be parsed into a transaction."""

    kind = "malformed_row"

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}")


__all__ = [
    "LedgerError",
    "FieldError",
    "InvalidDate",
    "InvalidTransactionType",
    "InvalidNumber",
    "MissingField",
    "MissingSelection",
    "StorageFailure",
    "ImportAborted",
    "MalformedRow",
]
