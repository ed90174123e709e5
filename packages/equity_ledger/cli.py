# ruff: noqa: I001
"""Typer console for the ``equity_ledger`` package.

Every command is a thin caller of :class:`equity_ledger.api.Ledger`. The root
callback loads ``.env`` from the working directory (never overriding variables
that are already set), configures logging once, and remembers the optional
``--database-url`` override for the subcommands.

Any :class:`~equity_ledger.errors.LedgerError` is reported as
``Error: <message>`` on stderr with exit status 1.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv

from .config import LedgerConfig
from .errors import LedgerError, MissingSelection
from .logging_setup import configure_logging
from .models import (
    CategoryBalance,
    Projection,
    SymbolBalance,
    Transaction,
    projection_header,
    render_row,
)

if TYPE_CHECKING:
    from .api import Ledger


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Track stock trades and cash movements, derive running statements and "
        "balances, and move the ledger in and out as SQL scripts or CSV."
    ),
)


@contextmanager
def _reported_errors() -> Iterator[None]:
    try:
        yield
    except (LedgerError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


@contextmanager
def _opened_ledger(ctx: typer.Context) -> Iterator[Ledger]:
    from .api import Ledger

    database_url = (ctx.obj or {}).get("database_url")
    ledger = Ledger.open(LedgerConfig.from_env(database_url))
    try:
        yield ledger
    finally:
        ledger.close()


def _print_table(
    rows: Iterable[Transaction | SymbolBalance | CategoryBalance],
    projection: Projection,
    *,
    with_id: bool = False,
) -> None:
    header = projection_header(projection)
    typer.echo("\t".join((["Id"] if with_id else []) + header))
    for row in rows:
        cells = render_row(row, projection)
        if with_id:
            cells = [str(getattr(row, "id", ""))] + cells
        typer.echo("\t".join(cells))


# ---- option declarations (module level keeps calls out of defaults) ----------

DateOpt = Annotated[str, typer.Option("--date", "-d", help="Transaction date, e.g. 15/01/2024.")]
TypeOpt = Annotated[
    str, typer.Option("--type", "-t", help="BUY, SELL, CHARGES, ADD_FUNDS, WITHDRAWAL, REWARDS, CREDIT or DEBIT.")
]
SymbolOpt = Annotated[str, typer.Option("--symbol", "-s", help="Stock name (BUY/SELL only).")]
QuantityOpt = Annotated[str, typer.Option("--quantity", "-q", help="Share quantity (blank is 0).")]
PriceOpt = Annotated[str, typer.Option("--price", "-p", help="Rate per share (blank is 0).")]
AmountOpt = Annotated[str, typer.Option("--amount", "-a", help="Cash amount; credit or debit follows the type.")]


# ---- commands ----------------------------------------------------------------


@app.command("add")
def add_cmd(
    ctx: typer.Context,
    date: DateOpt,
    txn_type: TypeOpt,
    symbol: SymbolOpt = "",
    quantity: QuantityOpt = "",
    price: PriceOpt = "",
    amount: AmountOpt = "",
) -> None:
    """Add one transaction."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        record = ledger.add_transaction(
            date=date, type=txn_type, symbol=symbol, quantity=quantity, price=price, amount=amount
        )
    typer.echo(f"Added transaction {record.id}")


@app.command("update")
def update_cmd(
    ctx: typer.Context,
    txn_id: Annotated[int, typer.Argument(help="Id of the transaction to replace.")],
    date: DateOpt,
    txn_type: TypeOpt,
    symbol: SymbolOpt = "",
    quantity: QuantityOpt = "",
    price: PriceOpt = "",
    amount: AmountOpt = "",
) -> None:
    """Replace every field of an existing transaction."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        ledger.update_transaction(
            txn_id, date=date, type=txn_type, symbol=symbol, quantity=quantity, price=price, amount=amount
        )
    typer.echo(f"Updated transaction {txn_id}")


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    txn_id: Annotated[int, typer.Argument(help="Id of the transaction to delete.")],
) -> None:
    """Delete one transaction."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        ledger.delete_transaction(txn_id)
    typer.echo(f"Deleted transaction {txn_id}")


@app.command("delete-all")
def delete_all_cmd(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation.")] = False,
) -> None:
    """Delete every transaction and restart ids at 1."""

    if not yes:
        typer.confirm("Delete ALL transactions? This cannot be undone", abort=True)
    with _reported_errors(), _opened_ledger(ctx) as ledger:
        removed = ledger.delete_all()
    typer.echo(f"Deleted {removed} transactions")


@app.command("list")
def list_cmd(ctx: typer.Context) -> None:
    """List every transaction, newest first."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        rows = ledger.list_transactions()
    _print_table(rows, Projection.STATEMENT, with_id=True)


@app.command("statement")
def statement_cmd(
    ctx: typer.Context,
    symbol: Annotated[str, typer.Argument(help="Stock name.")],
) -> None:
    """Running stock and cash balance for one symbol."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        rows = ledger.statement_for_symbol(symbol)
    _print_table(rows, Projection.STATEMENT, with_id=True)


@app.command("category-statement")
def category_statement_cmd(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="Transaction type.")],
) -> None:
    """Running cash balance for one transaction type."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        rows = ledger.statement_for_category(category)
    _print_table(rows, Projection.CATEGORY_STATEMENT, with_id=True)


@app.command("balance")
def balance_cmd(
    ctx: typer.Context,
    symbol: Annotated[str, typer.Argument(help="Stock name.")],
) -> None:
    """Consolidated holding and cash for one symbol."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        bal = ledger.balance_for_symbol(symbol)
    _print_table([bal], Projection.BALANCES)


@app.command("category-balance")
def category_balance_cmd(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="Transaction type.")],
) -> None:
    """Consolidated cash for one transaction type."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        bal = ledger.balance_for_category(category)
    _print_table([bal], Projection.CATEGORY_BALANCES)


@app.command("balances")
def balances_cmd(ctx: typer.Context) -> None:
    """Consolidated balance of every traded symbol, largest holding first."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        rows = ledger.symbol_balances()
    _print_table(rows, Projection.BALANCES)


@app.command("category-balances")
def category_balances_cmd(ctx: typer.Context) -> None:
    """Consolidated cash per transaction type."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        rows = ledger.category_balances()
    _print_table(rows, Projection.CATEGORY_BALANCES)


@app.command("cash")
def cash_cmd(ctx: typer.Context) -> None:
    """Available cash: total credit minus total debit."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        total = ledger.available_balance()
    typer.echo(f"Available balance: {total}")


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(dir_okay=False, help="Script file to write.")],
) -> None:
    """Export the whole ledger as a restorable SQL script."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        n = ledger.export_ledger(path)
    typer.echo(f"Exported {n} transactions to {path}")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(dir_okay=False, help="Script file to execute.")],
) -> None:
    """Replace the ledger with a previously exported script (all or nothing)."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        n = ledger.import_ledger(path)
    typer.echo(f"Executed {n} statements from {path}")


@app.command("import-csv")
def import_csv_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(dir_okay=False, help="CSV file to import.")],
) -> None:
    """Import Date,Txn_Type,Stock_Name,Qty,Rate,Credit,Debit rows."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        result = ledger.import_csv(path)
    typer.echo(f"Imported {result.imported} transactions from {path}")
    for bad in result.skipped:
        typer.echo(f"Skipped {bad}", err=True)


@app.command("export-csv")
def export_csv_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(dir_okay=False, help="CSV file to write.")],
    view: Annotated[Projection, typer.Option("--view", help="Which statement or balance to export.")] = Projection.STATEMENT,
    symbol: Annotated[str, typer.Option("--symbol", "-s", help="Stock name for --view statement.")] = "",
    category: Annotated[str, typer.Option("--category", "-c", help="Type for --view category-statement.")] = "",
) -> None:
    """Export a statement or balance listing as CSV."""

    with _reported_errors(), _opened_ledger(ctx) as ledger:
        rows: list[Transaction] | list[SymbolBalance] | list[CategoryBalance]
        if view is Projection.STATEMENT:
            rows = ledger.statement_for_symbol(symbol)
        elif view is Projection.CATEGORY_STATEMENT:
            rows = ledger.statement_for_category(category)
        elif view is Projection.BALANCES:
            rows = ledger.symbol_balances()
        elif view is Projection.CATEGORY_BALANCES:
            rows = ledger.category_balances()
        else:  # pragma: no cover - exhaustive over Projection
            raise MissingSelection(f"Unknown view {view!r}")
        n = ledger.export_csv(path, rows, view)
    typer.echo(f"Exported {n} rows to {path}")


@app.callback()
def _root(
    ctx: typer.Context,
    database_url: Annotated[
        str | None,
        typer.Option(
            "--database-url",
            help="SQLAlchemy URL (falls back to EQUITY_LEDGER_DATABASE_URL, then DATABASE_URL).",
        ),
    ] = None,
) -> None:
    """Root command: environment and logging setup shared by every subcommand."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()
    ctx.obj = {"database_url": database_url}


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m equity_ledger.cli`
    app()
