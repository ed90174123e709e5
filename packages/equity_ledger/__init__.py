"""Public interface for the ``equity_ledger`` package.

Re-exports the caller-facing facade, the value types it returns, and the
error hierarchy. There is no runtime logic here, only symbol re-exports.
"""

from .api import Ledger
from .config import LedgerConfig
from .errors import (
    FieldError,
    ImportAborted,
    InvalidDate,
    InvalidNumber,
    InvalidTransactionType,
    LedgerError,
    MalformedRow,
    MissingField,
    MissingSelection,
    StorageFailure,
)
from .interchange.delimited import CsvImportResult
from .models import (
    CategoryBalance,
    Projection,
    SymbolBalance,
    Transaction,
    TxnType,
)
from .store import LedgerStore

__all__ = [
    # API
    "Ledger",
    "LedgerConfig",
    "LedgerStore",
    # Models / types
    "Transaction",
    "TxnType",
    "SymbolBalance",
    "CategoryBalance",
    "Projection",
    "CsvImportResult",
    # Errors
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
