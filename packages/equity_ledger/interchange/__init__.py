"""Bulk interchange formats for the ledger.

- :mod:`.script`: full-ledger SQL script export and all-or-nothing import.
- :mod:`.delimited`: CSV statement import with per-row diagnostics, and CSV
  export of any projection.
"""

from __future__ import annotations

from .delimited import CsvImportResult, export_csv, import_csv, parse_csv_row
from .script import export_script, import_script, iter_statements

__all__ = [
    "CsvImportResult",
    "export_csv",
    "import_csv",
    "parse_csv_row",
    "export_script",
    "import_script",
    "iter_statements",
]
