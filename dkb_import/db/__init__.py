"""db: ledger database models and engine/session helpers (SQLAlchemy).

Public exports
--------------
- ``Base`` and ``metadata``
- ORM models ``LedgerAccount`` and ``LedgerTransaction``
- Engine/session helpers in ``dkb_import.db.client``
"""

from __future__ import annotations

from .models import Base, LedgerAccount, LedgerTransaction

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "LedgerAccount",
    "LedgerTransaction",
]
