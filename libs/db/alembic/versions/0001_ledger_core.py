# ruff: noqa: I001
"""Ledger core table.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2025-10-04
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# libs/db/src is on sys.path via `prepend_sys_path` in alembic.ini.
from db.types import ExactDecimal


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


_TXN_TYPES = (
    "BUY",
    "SELL",
    "CHARGES",
    "ADD_FUNDS",
    "WITHDRAWAL",
    "REWARDS",
    "CREDIT",
    "DEBIT",
)


def upgrade() -> None:
    op.create_table(
        "ledger_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("txn_date", sa.Date(), nullable=False),
        sa.Column("txn_type", sa.String(50), nullable=False),
        sa.Column("symbol", sa.String(255), nullable=False, server_default=sa.text("''")),
        sa.Column("quantity", ExactDecimal(), nullable=False),
        sa.Column("price", ExactDecimal(), nullable=False),
        sa.Column("credit", ExactDecimal(), nullable=False),
        sa.Column("debit", ExactDecimal(), nullable=False),
        sa.CheckConstraint(
            "txn_type in (" + ",".join(f"'{t}'" for t in _TXN_TYPES) + ")",
            name="ck_ledger_tx_type",
        ),
        sqlite_autoincrement=True,
    )

    # Statement queries filter by symbol or type and order by (txn_date, id)
    op.create_index(
        "ix_ledger_transactions_symbol_date",
        "ledger_transactions",
        ["symbol", "txn_date", "id"],
        unique=False,
    )
    op.create_index(
        "ix_ledger_transactions_type_date",
        "ledger_transactions",
        ["txn_type", "txn_date", "id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_ledger_transactions_type_date", table_name="ledger_transactions")
    op.drop_index("ix_ledger_transactions_symbol_date", table_name="ledger_transactions")
    op.drop_table("ledger_transactions")
