"""Connection settings for a :class:`~equity_ledger.store.LedgerStore`.

The store never reads the environment itself; callers build a
:class:`LedgerConfig` (directly, or via :meth:`LedgerConfig.from_env`) and pass
it in. ``.env`` files are honored through ``python-dotenv`` without
overriding variables that are already set.
"""

from __future__ import annotations

import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy.engine import URL, make_url

ENV_DATABASE_URL = "EQUITY_LEDGER_DATABASE_URL"
ENV_FALLBACK_DATABASE_URL = "DATABASE_URL"
ENV_DB_USER = "EQUITY_LEDGER_DB_USER"
ENV_DB_PASSWORD = "EQUITY_LEDGER_DB_PASSWORD"


class LedgerConfig(BaseModel):
    """Where the ledger lives and how to authenticate against it.

    ``username``/``password`` are merged into ``database_url`` by :meth:`url`,
    replacing any credentials already embedded in it.
    """

    model_config = ConfigDict(strict=True, frozen=True, extra="forbid", str_strip_whitespace=True)

    database_url: str
    username: str | None = None
    password: str | None = None
    echo: bool = False

    @field_validator("database_url")
    @classmethod
    def _url_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("database_url must be non-empty")
        return v

    @field_validator("username", "password")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        return v or None

    @classmethod
    def from_env(cls, database_url: str | None = None) -> LedgerConfig:
        """Build a config from explicit input, falling back to the environment.

        Raises ``RuntimeError`` when no database URL can be found.
        """

        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)
        url = (
            database_url
            or os.getenv(ENV_DATABASE_URL)
            or os.getenv(ENV_FALLBACK_DATABASE_URL)
        )
        if not url or not url.strip():
            raise RuntimeError(
                f"Database URL is not set. Pass --database-url or set {ENV_DATABASE_URL} "
                f"(or {ENV_FALLBACK_DATABASE_URL}) in the environment or a .env file."
            )
        return cls(
            database_url=url,
            username=os.getenv(ENV_DB_USER),
            password=os.getenv(ENV_DB_PASSWORD),
        )

    def url(self) -> URL:
        """Return the effective SQLAlchemy URL, credentials applied."""

        u = make_url(self.database_url)
        if self.username is not None:
            u = u.set(username=self.username)
        if self.password is not None:
            u = u.set(password=self.password)
        return u


__all__ = ["LedgerConfig"]
