"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ledger model used by ``equity_ledger``.
"""

from .ledger import TXN_TYPES, Base, LedgerTransaction

__all__ = [
    "Base",
    "LedgerTransaction",
    "TXN_TYPES",
]
