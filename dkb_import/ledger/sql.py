"""SQLAlchemy-backed ledger.

Transactions are written to ``ledger_transactions`` with a unique
``(account_id, imported_id)`` pair, which is the whole dedup mechanism:

- an unseen ``imported_id`` is inserted and reported as *added*;
- a known ``imported_id`` whose other fields differ (e.g. the display payee
  changed) is refreshed and reported as *updated*;
- a known, unchanged ``imported_id`` is left alone and reported as neither.

Writes are flushed during :meth:`SqlLedger.import_transactions` and committed
by :meth:`SqlLedger.sync`. Anything not synced is rolled back on
:meth:`SqlLedger.close`.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..assemble import IMPORTED_ID_LENGTH
from ..db.client import create_schema, get_session
from ..db.models import LedgerAccount, LedgerTransaction
from ..errors import NotFoundError
from ..logging_setup import get_logger
from ..models import CanonicalTransaction, ImportErrorDetail, ImportResult

logger = get_logger("dkb_import.ledger.sql")

# Columns copied from a CanonicalTransaction on insert/update.
_MUTABLE_FIELDS = ("payee_name", "imported_payee", "notes", "cleared")


def _validate(tx: CanonicalTransaction) -> date:
    """Return the parsed booking date or raise ``ValueError`` describing the problem."""

    if len(tx.imported_id) != IMPORTED_ID_LENGTH:
        raise ValueError(f"imported_id must be {IMPORTED_ID_LENGTH} characters")
    if isinstance(tx.amount, bool) or not isinstance(tx.amount, int):
        raise ValueError(f"amount must be an integer number of cents, got {tx.amount!r}")
    try:
        return date.fromisoformat(tx.date)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid date: {tx.date!r}") from exc


class SqlLedger:
    """:class:`~dkb_import.ledger.Ledger` implementation over a SQL database.

    Parameters
    ----------
    database_url:
        SQLAlchemy URL; falls back to ``LEDGER_DATABASE_URL``/``DATABASE_URL``.
    """

    def __init__(self, database_url: str | None = None) -> None:
        self._database_url = database_url
        self._session: Session | None = None
        self._sync_id: str | None = None
        self._unsynced = False

    @property
    def session(self) -> Session:
        if self._session is None:
            self._session = get_session(database_url=self._database_url)
        return self._session

    # ---- bootstrap -----------------------------------------------------------

    def create_schema(self) -> None:
        create_schema(database_url=self._database_url)

    def ensure_account(self, name: str, sync_id: str) -> str:
        """Return the id of account ``name`` in budget ``sync_id``, creating it if needed.

        The new row is flushed, not committed; call :meth:`sync` to persist.
        """

        existing = self.session.execute(
            select(LedgerAccount).where(
                LedgerAccount.sync_id == sync_id,
                func.lower(LedgerAccount.name) == name.lower(),
            )
        ).scalar_one_or_none()
        if existing is not None:
            return existing.id
        account = LedgerAccount(name=name, sync_id=sync_id)
        self.session.add(account)
        self.session.flush()
        self._unsynced = True
        logger.info("created ledger account %r in budget %s", name, sync_id)
        return account.id

    # ---- Ledger protocol -----------------------------------------------------

    def open_budget(self, sync_id: str) -> None:
        if self._session is not None and self._unsynced:
            logger.warning("discarding unsynced changes of budget %s", self._sync_id)
            self._session.rollback()
            self._unsynced = False
        self._sync_id = sync_id
        logger.info("budget opened: %s", sync_id)

    def resolve_account_id(self, name: str) -> str:
        stmt = select(LedgerAccount.id, LedgerAccount.name).order_by(LedgerAccount.name)
        if self._sync_id is not None:
            stmt = stmt.where(LedgerAccount.sync_id == self._sync_id)
        accounts = self.session.execute(stmt).all()
        wanted = name.lower()
        for account_id, account_name in accounts:
            if account_name.lower() == wanted:
                return account_id
        raise NotFoundError(name, [account_name for _, account_name in accounts])

    def import_transactions(
        self, account_ref: str, transactions: Sequence[CanonicalTransaction]
    ) -> ImportResult:
        result = ImportResult()
        if not transactions:
            return result

        session = self.session
        wanted_ids = {tx.imported_id for tx in transactions}
        existing: dict[str, LedgerTransaction] = {
            row.imported_id: row
            for row in session.execute(
                select(LedgerTransaction).where(
                    LedgerTransaction.account_id == account_ref,
                    LedgerTransaction.imported_id.in_(wanted_ids),
                )
            ).scalars()
        }

        for tx in transactions:
            try:
                tx_date = _validate(tx)
            except ValueError as exc:
                result.errors.append(ImportErrorDetail(imported_id=tx.imported_id, message=str(exc)))
                continue

            row = existing.get(tx.imported_id)
            if row is None:
                row = LedgerTransaction(
                    account_id=account_ref,
                    date=tx_date,
                    amount=tx.amount,
                    imported_id=tx.imported_id,
                    **{f: getattr(tx, f) for f in _MUTABLE_FIELDS},
                )
                session.add(row)
                # Flush so the generated id is known and later duplicates in
                # the same batch see this row.
                session.flush()
                existing[tx.imported_id] = row
                result.added.append(row.id)
                continue

            changed = False
            for f in _MUTABLE_FIELDS:
                if getattr(row, f) != getattr(tx, f):
                    setattr(row, f, getattr(tx, f))
                    changed = True
            if changed and row.id not in result.added and row.id not in result.updated:
                result.updated.append(row.id)

        session.flush()
        if result.added or result.updated:
            self._unsynced = True
        if result.errors:
            logger.error("ledger rejected %d transaction(s): %s", len(result.errors), result.errors)
        return result

    def sync(self) -> None:
        if self._session is not None:
            self._session.commit()
        self._unsynced = False

    def close(self) -> None:
        if self._session is not None:
            self._session.rollback()
            self._session.close()
            self._session = None
        self._unsynced = False


__all__ = ["SqlLedger"]
