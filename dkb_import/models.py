"""Data models and column names for ``dkb_import``.

Field order of :class:`CanonicalTransaction` (exact):
    - account_ref: opaque ledger account id
    - date: string (YYYY-MM-DD)
    - amount: signed integer in minor currency units (cents)
    - payee_name: canonical counterparty name
    - imported_payee: display form, ``"<payee> (<IBAN>)"`` when an IBAN is known
    - notes: free-text purpose field
    - imported_id: 32 hex characters, the content-derived dedup key
    - cleared: always ``True`` (DKB exports only settled bookings)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

# ---------------------------------------------------------------------------
# Raw statement rows
# ---------------------------------------------------------------------------

# One data line of a statement keyed by the file's own header. Values are the
# raw strings; short lines are padded with "" by the reader.
type RawRow = dict[str, str]


class DkbColumn:
    """Column headers of the DKB "Umsatzliste" CSV export."""

    BOOKING_DATE = "Buchungsdatum"
    VALUE_DATE = "Wertstellung"
    STATUS = "Status"
    PAYER = "Zahlungspflichtige*r"
    RECIPIENT = "Zahlungsempfänger*in"
    PURPOSE = "Verwendungszweck"
    TRANSACTION_TYPE = "Umsatztyp"
    IBAN = "IBAN"
    AMOUNT = "Betrag (€)"
    CREDITOR_ID = "Gläubiger-ID"
    MANDATE_REFERENCE = "Mandatsreferenz"
    CUSTOMER_REFERENCE = "Kundenreferenz"


# ---------------------------------------------------------------------------
# Canonical output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CanonicalTransaction:
    """A single transaction in the shape a ledger import expects.

    ``amount`` is an integer number of minor units so no float ever reaches the
    ledger. ``imported_id`` depends only on ``(date, amount, payee_name,
    notes)``; position in the file and the file name play no part.
    """

    account_ref: str
    date: str
    amount: int
    payee_name: str
    imported_payee: str
    notes: str
    imported_id: str
    cleared: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Return the ledger payload form (``account`` instead of ``account_ref``)."""

        return {
            "account": self.account_ref,
            "date": self.date,
            "amount": self.amount,
            "payee_name": self.payee_name,
            "imported_payee": self.imported_payee,
            "notes": self.notes,
            "imported_id": self.imported_id,
            "cleared": self.cleared,
        }


class ResolvedPayee(NamedTuple):
    """Counterparty name and its informational display form."""

    payee_name: str
    imported_payee: str


# ---------------------------------------------------------------------------
# Ledger results and per-row failures
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImportErrorDetail:
    """A single record the ledger refused to import."""

    imported_id: str | None
    message: str


@dataclass(slots=True)
class ImportResult:
    """Outcome of one ``import_transactions`` call.

    ``added`` and ``updated`` hold ledger transaction ids. Records that were
    already present and unchanged appear in neither list.
    """

    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    errors: list[ImportErrorDetail] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RowFailure:
    """A data row rejected under the collect-and-report error policy.

    ``line_no`` is the 1-based physical line in the statement when the rows
    were read from statement text, else the 1-based position of the row.
    """

    line_no: int
    row: RawRow
    error: Exception


__all__ = [
    "CanonicalTransaction",
    "DkbColumn",
    "ImportErrorDetail",
    "ImportResult",
    "RawRow",
    "ResolvedPayee",
    "RowFailure",
]
