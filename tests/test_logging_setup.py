from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from equity_ledger.logging_setup import configure_logging, get_logger, reset_logging


def test_configure_logging_is_idempotent_and_routes_package_records():
    stream = io.StringIO()
    configure_logging("INFO", stream=stream, fmt="%(name)s|%(levelname)s|%(message)s")
    configure_logging("DEBUG", stream=io.StringIO())

    pkg = logging.getLogger("equity_ledger")
    assert pkg.propagate is False
    assert len(pkg.handlers) == 1

    get_logger("equity_ledger.store").info("inserted %s", 3)
    get_logger("equity_ledger.store").debug("hidden")
    assert stream.getvalue() == "equity_ledger.store|INFO|inserted 3\n"


def test_level_comes_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("EQUITY_LEDGER_LOG_LEVEL", "error")
    configure_logging(stream=io.StringIO())
    assert logging.getLogger("equity_ledger").level == logging.ERROR


def test_unknown_level_is_rejected():
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("CHATTY", stream=io.StringIO())


def test_optional_log_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "ledger.log"
    configure_logging("INFO", stream=io.StringIO(), log_file=log_file)
    get_logger("equity_ledger.cli").warning("written to disk")
    reset_logging()
    assert "written to disk" in log_file.read_text(encoding="utf-8")


def test_unconfigured_package_gets_null_handler():
    reset_logging()
    get_logger("equity_ledger.fields")
    handlers = logging.getLogger("equity_ledger").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)
