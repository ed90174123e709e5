# ruff: noqa: I001
"""Full-ledger SQL script export and import.

The script is plain SQL in a line-oriented layout:

- ``--`` comment lines (a header describing the export),
- ``DROP TABLE IF EXISTS`` followed by ``CREATE TABLE`` and ``CREATE INDEX``
  statements compiled for the store's dialect,
- one single-line ``INSERT`` per transaction, ids included, in id order.

Import splits the file back into statements with :func:`iter_statements` and
executes them all inside one transaction, so a failing statement leaves the
store exactly as it was.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, datetime, UTC
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateIndex, CreateTable

from ..errors import ImportAborted, StorageFailure
from ..logging_setup import get_logger
from ..models import Transaction
from ..store import LedgerStore

logger = get_logger("equity_ledger.interchange.script")

_COMMENT_PREFIXES = ("--", "#")


def _sql_literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    # Quoted so SQLite keeps the exact digits; server databases cast to NUMERIC.
    if isinstance(value, Decimal):
        return f"'{value}'"
    if isinstance(value, date):
        value = value.isoformat()
    return "'" + str(value).replace("'", "''") + "'"


def _row_values(record: Transaction) -> dict[str, Any]:
    return {
        "id": record.id,
        "txn_date": record.date,
        "txn_type": record.type.value,
        "symbol": record.symbol,
        "quantity": record.quantity,
        "price": record.price,
        "credit": record.credit,
        "debit": record.debit,
    }


def _schema_statements(store: LedgerStore) -> list[str]:
    dialect = store.engine.dialect
    table = store.table
    out = [f"DROP TABLE IF EXISTS {table.name};"]
    out.append(str(CreateTable(table).compile(dialect=dialect)).strip() + ";")
    for index in sorted(table.indexes, key=lambda ix: ix.name or ""):
        out.append(str(CreateIndex(index).compile(dialect=dialect)).strip() + ";")
    return out


def export_script(store: LedgerStore, path: str | PathLike[str]) -> int:
    """Write the whole ledger to ``path`` as a restorable SQL script.

    Returns the number of transactions written.
    """

    records = store.list_in_store_order()
    table = store.table
    columns = [c.name for c in table.columns]
    column_list = ", ".join(columns)

    lines: list[str] = [
        "-- equity-ledger full ledger export",
        f"-- dialect: {store.dialect_name}",
        f"-- generated: {datetime.now(UTC).isoformat(timespec='seconds')}",
        f"-- transactions: {len(records)}",
        "",
    ]
    lines.extend(_schema_statements(store))
    lines.append("")
    for record in records:
        values = _row_values(record)
        rendered = ", ".join(_sql_literal(values[c]) for c in columns)
        lines.append(f"INSERT INTO {table.name} ({column_list}) VALUES ({rendered});")

    target = Path(path)
    try:
        with target.open("w", encoding="utf-8", newline="\n") as f:
            f.write("\n".join(lines) + "\n")
    except OSError as exc:
        raise StorageFailure(f"cannot write export to {target}: {exc}") from exc
    logger.info("Exported %s transactions to %s", len(records), target)
    return len(records)


def iter_statements(lines: Iterable[str]) -> Iterator[str]:
    """Yield complete SQL statements from script lines.

    Lines are trimmed; blank lines and ``--``/``#`` comment lines are skipped.
    Consecutive lines are joined with one space until a line ends with ``;``.
    Text left over without a terminator raises :class:`ImportAborted`.
    """

    buffer: list[str] = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue
        buffer.append(line)
        if line.endswith(";"):
            yield " ".join(buffer)
            buffer = []
    if buffer:
        pending = " ".join(buffer)
        raise ImportAborted(f"script ends with an unterminated statement: {pending[:80]!r}")


def import_script(store: LedgerStore, path: str | PathLike[str]) -> int:
    """Execute every statement of the script at ``path`` in one transaction.

    Returns the number of statements executed. On any failure nothing is
    kept and :class:`ImportAborted` is raised with the 1-based number of the
    failing statement; the driver error is chained as ``__cause__``.
    """

    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise ImportAborted(f"cannot read {source}: {exc}") from exc

    statements = list(iter_statements(text.splitlines()))
    number = 0
    try:
        with store.begin() as conn:
            for number, statement in enumerate(statements, start=1):
                conn.exec_driver_sql(statement)
            store.sync_id_sequence(conn)
    except SQLAlchemyError as exc:
        cause = getattr(exc, "orig", None) or exc
        logger.exception("Import of %s aborted at statement %s; rolled back", source, number)
        raise ImportAborted(
            f"import failed at statement {number}: {cause}", statement_number=number or None
        ) from exc

    logger.info("Imported %s statements from %s", len(statements), source)
    return len(statements)


__all__ = ["export_script", "import_script", "iter_statements"]
