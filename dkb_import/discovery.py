"""Locate and read DKB statement exports.

DKB names its exports ``{dd-mm-yyyy}_Umsatzliste_{Girokonto|Tagesgeld}_{IBAN}.csv``
where the date is the day of the download.
"""

from __future__ import annotations

from datetime import date
from os import PathLike
from pathlib import Path

_ACCOUNT_KINDS = ("Girokonto", "Tagesgeld")


def statement_filenames(iban: str, on_date: date) -> list[str]:
    """Return candidate file names for ``iban`` downloaded on ``on_date``."""

    stamp = on_date.strftime("%d-%m-%Y")
    return [f"{stamp}_Umsatzliste_{kind}_{iban}.csv" for kind in _ACCOUNT_KINDS]


def find_statement_file(
    iban: str,
    *,
    on_date: date | None = None,
    directory: str | PathLike[str] | None = None,
) -> Path | None:
    """Return the first existing export for ``iban`` or ``None``.

    ``on_date`` defaults to today and ``directory`` to ``~/Downloads``.
    """

    base = Path(directory) if directory is not None else Path.home() / "Downloads"
    for filename in statement_filenames(iban, on_date or date.today()):
        candidate = base / filename
        if candidate.is_file():
            return candidate
    return None


def read_statement(path: str | PathLike[str]) -> str:
    """Read a statement as UTF-8 text, dropping a leading BOM if present."""

    return Path(path).read_text(encoding="utf-8-sig")


__all__ = ["find_statement_file", "read_statement", "statement_filenames"]
