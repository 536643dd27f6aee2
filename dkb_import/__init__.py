"""Public interface for the ``dkb_import`` package.

Re-exports the parsing core (reader, locale values, payee resolution,
assembly), the pipeline and the public models/types. The SQL ledger is not
imported here to keep SQLAlchemy out of the import path of library users that
bring their own :class:`~dkb_import.ledger.Ledger`.
"""

from .assemble import assemble_row, compute_imported_id
from .config import AccountConfig, AppConfig, load_config
from .errors import ConfigError, FormatError, NotFoundError, ParseError
from .ledger import Ledger
from .locale_values import parse_date, parse_decimal, to_minor_units
from .models import (
    CanonicalTransaction,
    DkbColumn,
    ImportErrorDetail,
    ImportResult,
    RawRow,
    ResolvedPayee,
    RowFailure,
)
from .payee import resolve_payee
from .pipeline import (
    AccountOutcome,
    AccountStatus,
    ErrorPolicy,
    StatementImporter,
    TransformResult,
    transform_rows,
    transform_statement,
)
from .reader import read_rows

__all__ = [
    # Core
    "read_rows",
    "parse_decimal",
    "parse_date",
    "to_minor_units",
    "resolve_payee",
    "assemble_row",
    "compute_imported_id",
    # Pipeline
    "transform_rows",
    "transform_statement",
    "StatementImporter",
    "ErrorPolicy",
    "TransformResult",
    "AccountOutcome",
    "AccountStatus",
    # Config / ledger
    "AccountConfig",
    "AppConfig",
    "load_config",
    "Ledger",
    # Models / types
    "CanonicalTransaction",
    "DkbColumn",
    "ImportErrorDetail",
    "ImportResult",
    "RawRow",
    "ResolvedPayee",
    "RowFailure",
    # Errors
    "ConfigError",
    "FormatError",
    "NotFoundError",
    "ParseError",
]
