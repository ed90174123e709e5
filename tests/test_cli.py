from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from equity_ledger.cli import app

from tests.helpers.db import sqlite_url

runner = CliRunner()


@pytest.fixture()
def db_args(tmp_path: Path) -> list[str]:
    return ["--database-url", sqlite_url(tmp_path / "cli.db")]


def _ok(args: list[str]) -> str:
    result = runner.invoke(app, args)
    assert result.exit_code == 0, result.output
    return result.output


def test_add_then_statement_and_balance(db_args: list[str]):
    assert "Added transaction 1" in _ok(
        db_args + ["add", "-d", "15/01/2024", "-t", "BUY", "-s", "ACME", "-q", "10", "-p", "100", "-a", "1000"]
    )
    _ok(db_args + ["add", "-d", "20/01/2024", "-t", "SELL", "-s", "ACME", "-q", "4", "-p", "120", "-a", "480"])

    lines = _ok(db_args + ["statement", "ACME"]).splitlines()
    assert lines[0].split("\t") == [
        "Id",
        "Date",
        "Txn_Type",
        "Stock_Name",
        "Qty",
        "Rate",
        "Credit",
        "Debit",
        "Stock_Balance",
        "Balance",
    ]
    assert lines[-1].split("\t")[-2:] == ["6", "-520"]

    assert "ACME\t6\t-520" in _ok(db_args + ["balance", "ACME"])
    assert "Available balance: -520" in _ok(db_args + ["cash"])


def test_database_url_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EQUITY_LEDGER_DATABASE_URL", sqlite_url(tmp_path / "env.db"))
    _ok(["add", "--date", "01/01/2024", "--type", "ADD_FUNDS", "--amount", "50"])
    assert "ADD_FUNDS" in _ok(["list"])


def test_errors_are_reported_with_exit_code_1(db_args: list[str]):
    result = runner.invoke(app, db_args + ["add", "-d", "not-a-date", "-t", "BUY", "-s", "ACME", "-a", "1"])
    assert result.exit_code == 1
    assert "Error: Invalid date format" in result.output

    result = runner.invoke(app, db_args + ["delete", "7"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_missing_database_url_is_an_error():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 1
    assert "Error: Database URL is not set" in result.output


def test_delete_all_and_update(db_args: list[str]):
    for amount in ("1", "2", "3"):
        _ok(db_args + ["add", "-d", "01/01/2024", "-t", "CREDIT", "-a", amount])
    _ok(db_args + ["update", "2", "-d", "02/01/2024", "-t", "DEBIT", "-a", "5"])
    assert "DEBIT\t-5" in _ok(db_args + ["category-balance", "DEBIT"])
    assert "Deleted 3 transactions" in _ok(db_args + ["delete-all", "--yes"])
    assert "Added transaction 1" in _ok(db_args + ["add", "-d", "03/01/2024", "-t", "CREDIT", "-a", "1"])


def test_delete_all_asks_for_confirmation(db_args: list[str]):
    _ok(db_args + ["add", "-d", "01/01/2024", "-t", "CREDIT", "-a", "1"])
    result = runner.invoke(app, db_args + ["delete-all"], input="n\n")
    assert result.exit_code == 1
    assert "CREDIT" in _ok(db_args + ["list"])


def test_export_import_and_csv_commands(db_args: list[str], tmp_path: Path):
    src = tmp_path / "in.csv"
    src.write_text(
        "Date,Txn_Type,Stock_Name,Qty,Rate,Credit,Debit\n"
        "15/01/2024,BUY,ACME,10,100,0,1000\n"
        "bad,BUY,ACME,1,1,0,1\n"
        "16/01/2024,ADD_FUNDS,,,,2000,0\n",
        encoding="utf-8",
    )
    out = _ok(db_args + ["import-csv", str(src)])
    assert "Imported 2 transactions" in out
    assert "line 3" in out

    script = tmp_path / "backup.sql"
    assert "Exported 2 transactions" in _ok(db_args + ["export", str(script)])
    _ok(db_args + ["delete-all", "--yes"])
    assert "Executed 6 statements" in _ok(db_args + ["import", str(script)])
    assert "Available balance: 1000" in _ok(db_args + ["cash"])

    balances = tmp_path / "balances.csv"
    _ok(db_args + ["export-csv", str(balances), "--view", "balances"])
    assert balances.read_text(encoding="utf-8") == "Stock_Name,Stock_Balance,Balance\nACME,10,-1000\n"

    stmt = tmp_path / "stmt.csv"
    result = runner.invoke(app, db_args + ["export-csv", str(stmt), "--view", "statement"])
    assert result.exit_code == 1
    assert "Error:" in result.output

    _ok(db_args + ["export-csv", str(stmt), "--view", "category-statement", "--category", "add_funds"])
    assert stmt.read_text(encoding="utf-8").splitlines()[1] == "16/01/2024,ADD_FUNDS,2000,0,2000"


def test_category_balances_and_balances_listing(db_args: list[str]):
    _ok(db_args + ["add", "-d", "01/01/2024", "-t", "REWARDS", "-a", "3"])
    _ok(db_args + ["add", "-d", "01/01/2024", "-t", "BUY", "-s", "ZED", "-q", "2", "-a", "20"])
    out = _ok(db_args + ["category-balances"]).splitlines()
    assert out == ["Txn_Type\tBalance", "BUY\t-20", "REWARDS\t3"]
    assert _ok(db_args + ["balances"]).splitlines()[1] == "ZED\t2\t-20"
    assert "REWARDS" in _ok(db_args + ["category-statement", "rewards"])


def test_every_command_releases_its_engine(db_args: list[str], monkeypatch: pytest.MonkeyPatch):
    from equity_ledger.store import LedgerStore

    disposed: list[LedgerStore] = []
    real_dispose = LedgerStore.dispose

    def _recording_dispose(self: LedgerStore) -> None:
        disposed.append(self)
        real_dispose(self)

    monkeypatch.setattr(LedgerStore, "dispose", _recording_dispose)

    _ok(db_args + ["add", "-d", "01/01/2024", "-t", "CREDIT", "-a", "1"])
    assert len(disposed) == 1

    result = runner.invoke(app, db_args + ["delete", "99"])
    assert result.exit_code == 1
    assert len(disposed) == 2
