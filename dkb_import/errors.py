"""Exception types raised by ``dkb_import``.

``ParseError`` derives from :class:`csv.Error` so callers that already treat
``csv.Error`` as "the file could not be parsed" keep working. ``FormatError``
derives from :class:`ValueError` for the same reason on the value level.
"""

from __future__ import annotations

import csv
from collections.abc import Sequence


class ParseError(csv.Error):
    """Structural failure reading a statement (bad skip count, missing header)."""


class FormatError(ValueError):
    """A decimal or date field is present but cannot be parsed."""

    def __init__(self, kind: str, value: str) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"cannot parse {kind}: {value!r}")


class NotFoundError(LookupError):
    """A ledger account name did not match any configured account.

    ``available`` lists the names the ledger does know about so the message
    is actionable without a second lookup.
    """

    def __init__(self, name: str, available: Sequence[str]) -> None:
        self.name = name
        self.available = tuple(available)
        listed = ", ".join(f'"{a}"' for a in self.available) or "(none)"
        super().__init__(f'account "{name}" not found in ledger. Available accounts: {listed}')


class ConfigError(ValueError):
    """Configuration is incomplete or invalid."""


__all__ = ["ConfigError", "FormatError", "NotFoundError", "ParseError"]
