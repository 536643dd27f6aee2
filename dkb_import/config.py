"""Explicit configuration for an import run.

Configuration is read from environment variables (the CLI loads ``.env``
first via ``python-dotenv``) into immutable pydantic models and passed to the
importer. Nothing in the parsing core reads the environment itself.

Variables
---------
``ACCOUNT_{i}_NAME`` / ``ACCOUNT_{i}_IBAN`` / ``ACCOUNT_{i}_SYNC_ID``
    One block per account, ``i = 0, 1, ...``; scanning stops at the first
    index where all three are absent.
``OWN_IBANS``
    Comma-separated IBANs of further own accounts (e.g. savings at another
    bank) whose transfers should be labelled by IBAN.
``LEDGER_DATABASE_URL``
    SQLAlchemy URL of the ledger database; ``DATABASE_URL`` is used when unset.
``DKB_DOWNLOADS_DIR``
    Directory holding the exported statements; defaults to ``~/Downloads``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import ConfigError
from .payee import normalize_iban


class AccountConfig(BaseModel):
    """One bank account to import.

    ``name`` must match the ledger account name (case-insensitive); ``sync_id``
    identifies the ledger budget the account lives in.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str
    iban: str
    sync_id: str

    @field_validator("name", "iban", "sync_id")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    accounts: tuple[AccountConfig, ...]
    extra_own_ibans: tuple[str, ...] = ()
    database_url: str | None = None
    downloads_dir: Path = Path.home() / "Downloads"

    @field_validator("accounts")
    @classmethod
    def _at_least_one(cls, v: tuple[AccountConfig, ...]) -> tuple[AccountConfig, ...]:
        if not v:
            raise ValueError("at least one account is required")
        return v

    @property
    def own_ibans(self) -> frozenset[str]:
        """Normalized IBANs of all configured accounts plus ``extra_own_ibans``."""

        ibans = [a.iban for a in self.accounts] + list(self.extra_own_ibans)
        return frozenset(normalize_iban(i) for i in ibans if i.strip())


def _load_accounts(env: Mapping[str, str]) -> list[AccountConfig]:
    accounts: list[AccountConfig] = []
    i = 0
    while True:
        keys = (f"ACCOUNT_{i}_NAME", f"ACCOUNT_{i}_IBAN", f"ACCOUNT_{i}_SYNC_ID")
        values = [(env.get(k) or "").strip() for k in keys]
        if not any(values):
            break
        missing = [k for k, v in zip(keys, values, strict=True) if not v]
        if missing:
            raise ConfigError(f"Incomplete account config, missing: {', '.join(missing)}")
        name, iban, sync_id = values
        accounts.append(AccountConfig(name=name, iban=iban, sync_id=sync_id))
        i += 1
    return accounts


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build an :class:`AppConfig` from ``environ`` (defaults to ``os.environ``).

    Raises :class:`ConfigError` for incomplete account blocks or when no
    account is configured.
    """

    env = os.environ if environ is None else environ

    accounts = _load_accounts(env)
    if not accounts:
        raise ConfigError(
            "No accounts configured. Add ACCOUNT_0_NAME, ACCOUNT_0_IBAN, "
            "ACCOUNT_0_SYNC_ID to .env"
        )

    extra = tuple(s.strip() for s in (env.get("OWN_IBANS") or "").split(",") if s.strip())
    database_url = env.get("LEDGER_DATABASE_URL") or env.get("DATABASE_URL") or None
    fields: dict[str, object] = {
        "accounts": tuple(accounts),
        "extra_own_ibans": extra,
        "database_url": database_url,
    }
    downloads = (env.get("DKB_DOWNLOADS_DIR") or "").strip()
    if downloads:
        fields["downloads_dir"] = Path(downloads).expanduser()

    try:
        return AppConfig(**fields)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


__all__ = ["AccountConfig", "AppConfig", "load_config"]
