"""Row → :class:`CanonicalTransaction` assembly and the dedup key.

The ``imported_id`` is what lets the ledger recognize a booking it has
already seen when the user exports an overlapping date range again. It is a
pure function of the canonical content of the transaction, so the same
booking maps to the same key no matter which export file it came from or at
which line it appeared.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping, Set

from .locale_values import parse_date, parse_decimal, to_minor_units
from .logging_setup import get_logger
from .models import CanonicalTransaction, DkbColumn
from .payee import resolve_payee

logger = get_logger("dkb_import.assemble")

IMPORTED_ID_LENGTH = 32
_SEPARATOR = "|"


def compute_imported_id(date: str, amount: int, payee_name: str, notes: str) -> str:
    """Return the first 32 hex chars of SHA-256 over the canonical fields.

    Fields: ISO date, amount in cents, payee name, notes, joined with ``|``.
    """

    raw = _SEPARATOR.join((date, str(amount), payee_name, notes))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()[:IMPORTED_ID_LENGTH]


def assemble_row(
    row: Mapping[str, str],
    account_ref: str,
    own_ibans: Set[str] = frozenset(),
) -> CanonicalTransaction | None:
    """Build one canonical transaction from a raw statement row.

    Returns ``None`` for rows without an amount or booking date (summary or
    filler lines); that is a skip, not an error. Malformed amounts or dates
    raise :class:`~dkb_import.errors.FormatError`. ``own_ibans`` may be given in
    any spacing or case.
    """

    amount_raw = (row.get(DkbColumn.AMOUNT) or "").strip()
    booking_raw = (row.get(DkbColumn.BOOKING_DATE) or "").strip()
    if not amount_raw or not booking_raw:
        logger.debug("skipping row without amount/booking date: %r", dict(row))
        return None

    amount_float = parse_decimal(amount_raw)
    amount = to_minor_units(amount_float)
    date = parse_date(booking_raw)
    notes = row.get(DkbColumn.PURPOSE) or ""
    # Sign check on the float: a -0,004 booking still counts as outgoing.
    payee = resolve_payee(row, amount_float, own_ibans)

    return CanonicalTransaction(
        account_ref=account_ref,
        date=date,
        amount=amount,
        payee_name=payee.payee_name,
        imported_payee=payee.imported_payee,
        notes=notes,
        imported_id=compute_imported_id(date, amount, payee.payee_name, notes),
        cleared=True,
    )


__all__ = ["IMPORTED_ID_LENGTH", "assemble_row", "compute_imported_id"]
