"""DB helpers for tests: bootstrap a temporary SQLite ledger and seed accounts."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import event, select

from dkb_import.db.client import create_schema, get_engine, session_scope
from dkb_import.db.models import LedgerAccount, LedgerTransaction


def bootstrap_sqlite_db(db_file: Path) -> str:
    """Create a SQLite database file with the ledger schema and return its URL.

    A file-backed database lets several SQLAlchemy connections share state
    (in-memory SQLite databases are per-connection).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _):  # pragma: no cover - tiny bridge
        dbapi_conn.execute("PRAGMA foreign_keys = ON")

    create_schema(database_url=url)
    return url


def seed_accounts(database_url: str, accounts: list[tuple[str, str]]) -> dict[str, str]:
    """Insert ``(name, sync_id)`` ledger accounts and return ``{name: id}``."""

    ids: dict[str, str] = {}
    with session_scope(database_url=database_url) as session:
        for name, sync_id in accounts:
            account = LedgerAccount(name=name, sync_id=sync_id)
            session.add(account)
            session.flush()
            ids[name] = account.id
    return ids


def fetch_transactions(database_url: str, account_id: str) -> list[LedgerTransaction]:
    with session_scope(database_url=database_url) as session:
        rows = session.execute(
            select(LedgerTransaction)
            .where(LedgerTransaction.account_id == account_id)
            .order_by(LedgerTransaction.date, LedgerTransaction.imported_id)
        ).scalars()
        return list(rows)
