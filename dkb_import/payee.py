"""Counterparty resolution for statement rows.

DKB fills both a payer and a recipient column; which one names the
counterparty depends on the direction of the booking. Transfers between the
user's own accounts are labelled with the counterpart IBAN instead, because
the bank-provided display names for those are inconsistent across exports.
"""

from __future__ import annotations

from collections.abc import Mapping, Set

from .models import DkbColumn, ResolvedPayee


def normalize_iban(value: str) -> str:
    """Return ``value`` without whitespace and upper-cased, for comparisons."""

    return "".join(value.split()).upper()


def _field(row: Mapping[str, str], key: str) -> str:
    return (row.get(key) or "").strip()


def _normalized(ibans: Set[str]) -> Set[str]:
    return {normalize_iban(i) for i in ibans}


def opposing_name(row: Mapping[str, str], signed_amount: float) -> str:
    """Pick the counterparty column by booking direction.

    Outgoing (``signed_amount < 0``): recipient, else payer. Incoming: payer,
    else recipient. ``""`` when both are empty.
    """

    payer = _field(row, DkbColumn.PAYER)
    recipient = _field(row, DkbColumn.RECIPIENT)
    if signed_amount < 0:
        return recipient or payer
    return payer or recipient


def resolve_payee(
    row: Mapping[str, str],
    signed_amount: float,
    own_ibans: Set[str],
) -> ResolvedPayee:
    """Resolve the canonical payee name and its display form for ``row``.

    Parameters
    ----------
    row:
        Raw statement row keyed by DKB column headers.
    signed_amount:
        The parsed amount before conversion to cents; only its sign matters.
    own_ibans:
        IBANs of the user's own accounts in any spacing or case.
    """

    counterpart_iban = _field(row, DkbColumn.IBAN)
    if counterpart_iban and normalize_iban(counterpart_iban) in _normalized(own_ibans):
        payee_name = counterpart_iban.upper()
    else:
        payee_name = opposing_name(row, signed_amount)

    imported_payee = f"{payee_name} ({counterpart_iban})" if counterpart_iban else payee_name
    return ResolvedPayee(payee_name=payee_name.strip(), imported_payee=imported_payee.strip())


__all__ = ["normalize_iban", "opposing_name", "resolve_payee"]
