"""Ledger collaborator interface.

The importer talks to the ledger only through :class:`Ledger`. The ledger
owns all persistent dedup state: it recognizes previously imported records by
``imported_id`` and reports what it added or updated. The SQLAlchemy-backed
implementation lives in :mod:`dkb_import.ledger.sql` and is imported
explicitly by callers that need it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models import CanonicalTransaction, ImportResult


@runtime_checkable
class Ledger(Protocol):
    def open_budget(self, sync_id: str) -> None:
        """Make ``sync_id`` the budget that subsequent calls operate on."""
        ...

    def resolve_account_id(self, name: str) -> str:
        """Return the account id whose name equals ``name`` ignoring case.

        Raises :class:`~dkb_import.errors.NotFoundError` listing the known
        account names when there is no match.
        """
        ...

    def import_transactions(
        self, account_ref: str, transactions: Sequence[CanonicalTransaction]
    ) -> ImportResult: ...

    def sync(self) -> None:
        """Persist/exchange the current budget state with the backing store."""
        ...

    def close(self) -> None: ...


__all__ = ["Ledger"]
