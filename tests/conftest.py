"""Pytest configuration for test isolation.

Configuration is read from the process environment (and a developer's local
``.env`` may have populated it). To keep tests hermetic, every variable the
package reads is removed for the duration of each test, and cached SQLAlchemy
engines are disposed afterwards so per-test SQLite files are released.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterator

import pytest

from dkb_import.db.client import dispose_engines

_ENV_PATTERN = re.compile(
    r"^(ACCOUNT_\d+_(NAME|IBAN|SYNC_ID)|OWN_IBANS|LEDGER_DATABASE_URL|DATABASE_URL|DKB_.*)$"
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if _ENV_PATTERN.match(key):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _dispose_engines() -> Iterator[None]:
    yield
    dispose_engines()
