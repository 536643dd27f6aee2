"""German-locale amount and date parsing.

Amounts use ``.`` as thousands separator and ``,`` as decimal separator
(``"1.234,56"``). Dates are ``dd.mm.yy`` or ``dd.mm.yyyy``; two-digit years
are read as 2000–2099.
"""

from __future__ import annotations

import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from .errors import FormatError


def parse_decimal(raw: str) -> float:
    """Parse a German-formatted decimal string into a float.

    All ``.`` characters are removed and the decimal ``,`` becomes ``.``.
    Raises :class:`FormatError` when what is left is not a finite number.
    """

    s = raw.strip().replace(".", "").replace(",", ".")
    # float() would accept digit-group underscores ("1_000").
    if "_" in s:
        raise FormatError("amount", raw)
    try:
        value = float(s)
    except ValueError as exc:
        raise FormatError("amount", raw) from exc
    # float() also accepts "nan"/"inf", neither of which is an amount.
    if not math.isfinite(value):
        raise FormatError("amount", raw)
    return value


def to_minor_units(value: float) -> int:
    """Scale a currency amount to integer cents, ties rounded away from zero.

    The float goes through its shortest ``repr`` so ``0.125`` is treated as the
    decimal the user saw rather than its binary approximation.
    """

    cents = (Decimal(repr(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def parse_date(raw: str) -> str:
    """Parse ``dd.mm.yy`` / ``dd.mm.yyyy`` into ``YYYY-MM-DD``.

    Raises :class:`FormatError` unless the value splits into exactly three
    numeric parts with a 2- or 4-digit year forming a real calendar date.
    """

    parts = [p.strip() for p in raw.strip().split(".")]
    if len(parts) != 3 or not all(p.isascii() and p.isdigit() for p in parts):
        raise FormatError("date", raw)
    dd, mm, yy = parts
    if len(yy) == 2:
        year = 2000 + int(yy)
    elif len(yy) == 4:
        year = int(yy)
    else:
        raise FormatError("date", raw)
    try:
        return date(year, int(mm), int(dd)).isoformat()
    except ValueError as exc:
        raise FormatError("date", raw) from exc


__all__ = ["parse_date", "parse_decimal", "to_minor_units"]
