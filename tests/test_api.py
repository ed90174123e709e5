from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from equity_ledger.api import Ledger
from equity_ledger.config import LedgerConfig
from equity_ledger.errors import InvalidDate, InvalidTransactionType, MissingSelection
from equity_ledger.models import Projection, TxnType

from tests.helpers.db import bootstrap_ledger, sqlite_url


@pytest.fixture()
def ledger(tmp_path: Path) -> Ledger:
    return bootstrap_ledger(tmp_path / "ledger.db")


def _acme(ledger: Ledger) -> None:
    ledger.add_transaction(date="01/01/2024", type="ADD_FUNDS", amount="5000")
    ledger.add_transaction(date="15/01/2024", type="BUY", symbol="ACME", quantity="10", price="100", amount="1000")
    ledger.add_transaction(date="20/01/24", type="sell", symbol="ACME", quantity="4", price="120", amount="480")
    ledger.add_transaction(date="2024/01/21", type="CHARGES", amount="12.50")


def test_open_creates_schema_from_config(tmp_path: Path):
    ledger = Ledger.open(LedgerConfig(database_url=sqlite_url(tmp_path / "fresh.db")))
    assert ledger.list_transactions() == []


def test_acme_scenario(ledger: Ledger):
    _acme(ledger)
    rows = ledger.statement_for_symbol("ACME")
    assert [r.running_stock_quantity for r in rows] == [Decimal(10), Decimal(6)]
    assert [r.running_cash_balance for r in rows] == [Decimal(-1000), Decimal(-520)]

    bal = ledger.balance_for_symbol(" ACME ")
    assert (bal.symbol, bal.stock_quantity, bal.cash_balance) == ("ACME", Decimal(6), Decimal(-520))
    assert ledger.available_balance() == Decimal("4467.50")


def test_add_returns_stored_record(ledger: Ledger):
    rec = ledger.add_transaction(date="15/01/2024", type="BUY", symbol="ACME", quantity="1", amount="10")
    assert rec.id == 1
    assert ledger.get_transaction(1) == rec


def test_invalid_input_leaves_store_unchanged(ledger: Ledger):
    with pytest.raises(InvalidDate):
        ledger.add_transaction(date="31/02/2024", type="BUY", symbol="ACME", amount="1")
    with pytest.raises(InvalidTransactionType):
        ledger.add_transaction(date="01/02/2024", type="GIFT", amount="1")
    assert ledger.list_transactions() == []


def test_update_and_delete(ledger: Ledger):
    _acme(ledger)
    ledger.update_transaction(4, date="21/01/2024", type="CHARGES", amount="2.50")
    assert ledger.balance_for_category("CHARGES").cash_balance == Decimal("-2.50")
    ledger.delete_transaction(4)
    assert ledger.get_transaction(4) is None
    with pytest.raises(MissingSelection):
        ledger.update_transaction(0, date="21/01/2024", type="CHARGES", amount="1")
    with pytest.raises(MissingSelection):
        ledger.delete_transaction(4)


def test_blank_selectors_raise_missing_selection(ledger: Ledger):
    for call in (
        lambda: ledger.statement_for_symbol(""),
        lambda: ledger.balance_for_symbol("  "),
        lambda: ledger.statement_for_category(None),
        lambda: ledger.balance_for_category(""),
    ):
        with pytest.raises(MissingSelection):
            call()


def test_category_views(ledger: Ledger):
    _acme(ledger)
    ledger.add_transaction(date="25/01/2024", type="ADD FUNDS", amount="100")
    rows = ledger.statement_for_category(TxnType.ADD_FUNDS)
    assert [r.running_cash_balance for r in rows] == [Decimal(5000), Decimal(5100)]
    assert [(b.type, b.cash_balance) for b in ledger.category_balances()] == [
        (TxnType.ADD_FUNDS, Decimal(5100)),
        (TxnType.BUY, Decimal(-1000)),
        (TxnType.CHARGES, Decimal("-12.50")),
        (TxnType.SELL, Decimal(480)),
    ]
    assert [b.symbol for b in ledger.symbol_balances()] == ["ACME"]


def test_delete_all_then_insert_starts_at_one(ledger: Ledger):
    for i in range(5):
        ledger.add_transaction(date="01/01/2024", type="CREDIT", amount=str(i + 1))
    assert ledger.delete_all() == 5
    assert ledger.add_transaction(date="02/01/2024", type="DEBIT", amount="1").id == 1


def test_interchange_through_facade(ledger: Ledger, tmp_path: Path):
    _acme(ledger)
    csv_out = tmp_path / "acme.csv"
    assert ledger.export_csv(csv_out, ledger.statement_for_symbol("ACME"), Projection.STATEMENT) == 2

    script = tmp_path / "backup.sql"
    assert ledger.export_ledger(script) == 4
    before = ledger.list_transactions()
    ledger.delete_all()
    ledger.import_ledger(script)
    assert ledger.list_transactions() == before

    src = tmp_path / "in.csv"
    src.write_text("Date,Txn_Type,Stock_Name,Qty,Rate,Credit,Debit\n01/03/2024,REWARDS,,,,3,0\n", encoding="utf-8")
    assert ledger.import_csv(src).imported == 1
    assert ledger.available_balance() == Decimal("4470.50")
