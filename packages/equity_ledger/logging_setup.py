"""Centralized logging configuration for the ``equity_ledger`` package.

Public helpers:

- ``configure_logging(...)``: attach handlers to the package root logger
  (``"equity_ledger"``): one ``StreamHandler`` and, when asked, a daily
  rotating file log. Called once by entrypoints (the CLI) at startup.
- ``get_logger(name)``: acquire a child logger, making sure the package root
  has a ``NullHandler`` while nothing is configured so library use stays quiet.
- ``reset_logging()``: detach everything ``configure_logging`` attached. Used
  by tests that configure logging more than once per process.

Library modules never attach handlers themselves; they call
``get_logger("equity_ledger.<module>")`` and inherit the central setup.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from os import PathLike
from pathlib import Path
from typing import IO

_PKG_LOGGER_NAME = "equity_ledger"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_LOG_FILE_BACKUP_COUNT = 7
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        env_val = os.getenv("EQUITY_LEDGER_LOG_LEVEL")
        return _parse_level(env_val) if env_val else logging.INFO
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        raise ValueError(f"Unknown log level: {level!r}")
    return numeric


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    log_file: str | PathLike[str] | None = None,
) -> None:
    """Configure the package root logger exactly once.

    Parameters
    ----------
    level:
        ``int`` or level name (``"INFO"``). ``None`` reads
        ``EQUITY_LEDGER_LOG_LEVEL`` and falls back to ``logging.INFO``.
    fmt:
        Format string for every handler. Defaults to
        ``"%(asctime)s %(name)s %(levelname)s %(message)s"``.
    stream:
        Stream for the console handler (defaults to ``sys.stderr`` at call
        time, so test runners that swap ``sys.stderr`` are honored).
    log_file:
        Optional path of a log file rotated at midnight, keeping seven days.
        ``EQUITY_LEDGER_LOG_FILE`` is used when omitted.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = _parse_level(level)
    formatter = logging.Formatter(fmt or _DEFAULT_FORMAT)
    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    logger.addHandler(console)

    file_target = log_file or os.getenv("EQUITY_LEDGER_LOG_FILE")
    if file_target:
        path = Path(file_target)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=path,
            when="midnight",
            backupCount=_LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(resolved)
    # Avoid double emission via the root logger.
    logger.propagate = False

    _CONFIGURED = True


def reset_logging() -> None:
    """Remove handlers attached by :func:`configure_logging` and allow reconfiguring."""

    global _CONFIGURED
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, ensuring safe defaults for library use."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
