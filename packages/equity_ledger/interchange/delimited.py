"""CSV statement import and projection export.

Import expects the seven-column layout
``Date,Txn_Type,Stock_Name,Qty,Rate,Credit,Debit`` with a header on the first
line. Each data line either becomes a :class:`Transaction` or a
:class:`~equity_ledger.errors.MalformedRow` diagnostic; bad lines never stop
the import. Valid rows are written in a single bulk insert.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from os import PathLike
from pathlib import Path

from ..errors import FieldError, ImportAborted, MalformedRow, StorageFailure
from ..fields import parse_date, parse_decimal, parse_type, split_delimited_line
from ..logging_setup import get_logger
from ..models import (
    CategoryBalance,
    Projection,
    SymbolBalance,
    Transaction,
    projection_header,
    render_row,
)
from ..store import LedgerStore

logger = get_logger("equity_ledger.interchange.delimited")

CSV_IMPORT_COLUMNS: tuple[str, ...] = (
    "Date",
    "Txn_Type",
    "Stock_Name",
    "Qty",
    "Rate",
    "Credit",
    "Debit",
)


@dataclass(frozen=True, slots=True)
class CsvImportResult:
    imported: int
    skipped: list[MalformedRow] = field(default_factory=list)


def _number(cell: str, field_name: str) -> Decimal:
    # Thousands separators ("1,250.50") are accepted in numeric cells.
    return parse_decimal(cell.replace(",", ""), field_name)


def parse_csv_row(line: str, line_number: int) -> Transaction:
    """Parse one CSV data line; raise :class:`MalformedRow` on any problem."""

    cells = [c.strip() for c in split_delimited_line(line)]
    if len(cells) != len(CSV_IMPORT_COLUMNS):
        raise MalformedRow(
            line_number,
            line,
            f"expected {len(CSV_IMPORT_COLUMNS)} columns "
            f"({','.join(CSV_IMPORT_COLUMNS)}), found {len(cells)}",
        )
    date_text, type_text, symbol, qty, rate, credit, debit = cells
    try:
        return Transaction(
            date=parse_date(date_text),
            type=parse_type(type_text),
            symbol=symbol,
            quantity=_number(qty, "Qty"),
            price=_number(rate, "Rate"),
            credit=_number(credit, "Credit"),
            debit=_number(debit, "Debit"),
        )
    except FieldError as exc:
        raise MalformedRow(line_number, line, str(exc)) from exc


def import_csv(store: LedgerStore, path: str | PathLike[str]) -> CsvImportResult:
    """Import every valid data line of the CSV at ``path``.

    Line 1 is the header. Blank lines are ignored. Importing the same file
    twice inserts its rows twice.
    """

    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ImportAborted(f"cannot read {source}: {exc}") from exc

    records: list[Transaction] = []
    skipped: list[MalformedRow] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if line_number == 1 or not line.strip():
            continue
        try:
            records.append(parse_csv_row(line, line_number))
        except MalformedRow as bad:
            logger.warning("Skipping malformed CSV line %s of %s: %s", line_number, source, bad.reason)
            skipped.append(bad)

    imported = store.insert_many(records)
    logger.info(
        "CSV import from %s: %s imported, %s skipped", source, imported, len(skipped)
    )
    return CsvImportResult(imported=imported, skipped=skipped)


def export_csv(
    path: str | PathLike[str],
    rows: Iterable[Transaction | SymbolBalance | CategoryBalance],
    projection: Projection,
) -> int:
    """Write ``rows`` under ``projection``'s header; return the row count."""

    target = Path(path)
    written = 0
    try:
        with target.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(projection_header(projection))
            for row in rows:
                writer.writerow(render_row(row, projection))
                written += 1
    except OSError as exc:
        raise StorageFailure(f"cannot write CSV to {target}: {exc}") from exc
    logger.info("Exported %s rows (%s) to %s", written, projection, target)
    return written


__all__ = [
    "CSV_IMPORT_COLUMNS",
    "CsvImportResult",
    "parse_csv_row",
    "import_csv",
    "export_csv",
]
