"""Pytest configuration for test isolation.

Ledger code reads its database URL, credentials and log settings from the
environment (and from a ``.env`` in the working directory). A developer's
shell or ``.env`` must never leak into a test, so every test starts with
those variables cleared, runs from its own temporary directory, and gets a
fresh logging setup.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from equity_ledger.logging_setup import reset_logging

_LEDGER_ENV_VARS = (
    "EQUITY_LEDGER_DATABASE_URL",
    "DATABASE_URL",
    "EQUITY_LEDGER_DB_USER",
    "EQUITY_LEDGER_DB_PASSWORD",
    "EQUITY_LEDGER_LOG_FILE",
)


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _LEDGER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep INFO chatter out of captured CLI output.
    monkeypatch.setenv("EQUITY_LEDGER_LOG_LEVEL", "WARNING")
    work = tmp_path / "cwd"
    work.mkdir()
    monkeypatch.chdir(work)
    yield
    reset_logging()
