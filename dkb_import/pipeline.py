"""Statement → ledger pipeline.

Two layers:

- :func:`transform_statement` / :func:`transform_rows` turn statement text (or
  already-read rows) into canonical transactions for one ledger account. Pure
  apart from logging.
- :class:`StatementImporter` runs the whole import for every configured
  account: grouped by budget, one statement per account, one ledger sync per
  budget.

Error policy
------------
``ErrorPolicy.ABORT`` (default) lets the first :class:`FormatError` propagate,
so a statement is imported completely or not at all. ``ErrorPolicy.COLLECT``
skips the offending rows, reports them as :class:`RowFailure` and imports the
rest; the number of imported transactions is then lower than the number of
data rows.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Set
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from os import PathLike
from pathlib import Path

from .assemble import assemble_row
from .config import AccountConfig, AppConfig
from .discovery import find_statement_file, read_statement
from .errors import FormatError, NotFoundError, ParseError
from .ledger import Ledger
from .logging_setup import get_logger
from .models import CanonicalTransaction, RawRow, RowFailure
from .reader import DEFAULT_DELIMITER, DEFAULT_SKIP_LINES, iter_rows

logger = get_logger("dkb_import.pipeline")

# Failures that abort one account during a run; anything else aborts the run.
_ACCOUNT_ERRORS = (ParseError, FormatError, NotFoundError, OSError, UnicodeDecodeError)


class ErrorPolicy(StrEnum):
    ABORT = "abort"
    COLLECT = "collect"


@dataclass(slots=True)
class TransformResult:
    transactions: list[CanonicalTransaction] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)
    rows: int = 0
    skipped: int = 0


def _transform(
    numbered_rows: Iterable[tuple[int, RawRow]],
    account_ref: str,
    own_ibans: Set[str],
    policy: ErrorPolicy,
) -> TransformResult:
    result = TransformResult()
    for line_no, row in numbered_rows:
        result.rows += 1
        try:
            tx = assemble_row(row, account_ref, own_ibans)
        except FormatError as exc:
            if policy is ErrorPolicy.ABORT:
                raise
            logger.warning("line %d skipped: %s", line_no, exc)
            result.failures.append(RowFailure(line_no=line_no, row=row, error=exc))
            continue
        if tx is None:
            result.skipped += 1
            continue
        result.transactions.append(tx)
    return result


def transform_rows(
    rows: Iterable[RawRow],
    account_ref: str,
    own_ibans: Set[str] = frozenset(),
    *,
    policy: ErrorPolicy = ErrorPolicy.ABORT,
) -> TransformResult:
    """Assemble already-read rows; ``RowFailure.line_no`` is the 1-based row position."""

    return _transform(enumerate(rows, start=1), account_ref, own_ibans, policy)


def transform_statement(
    content: str,
    account_ref: str,
    own_ibans: Set[str] = frozenset(),
    *,
    policy: ErrorPolicy = ErrorPolicy.ABORT,
    delimiter: str = DEFAULT_DELIMITER,
    skip_lines: int = DEFAULT_SKIP_LINES,
) -> TransformResult:
    """Read statement text and assemble its transactions in file order.

    ``RowFailure.line_no`` is the physical line in ``content``. Raises
    :class:`ParseError` for structural problems and, under
    ``ErrorPolicy.ABORT``, :class:`FormatError` for the first bad value.
    """

    numbered = iter_rows(content, delimiter=delimiter, skip_lines=skip_lines)
    return _transform(numbered, account_ref, own_ibans, policy)


# ---------------------------------------------------------------------------
# Multi-account run
# ---------------------------------------------------------------------------


class AccountStatus(StrEnum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class AccountOutcome:
    account: AccountConfig
    status: AccountStatus
    path: Path | None = None
    rows: int = 0
    transactions: int = 0
    added: int = 0
    updated: int = 0
    ledger_errors: int = 0
    failures: list[RowFailure] = field(default_factory=list)
    error: Exception | None = None


class StatementImporter:
    """Import today's statements of all configured accounts into a ledger.

    Parameters
    ----------
    config:
        Accounts and own IBANs.
    ledger:
        Any :class:`~dkb_import.ledger.Ledger` implementation.
    policy:
        Row-level error policy, see module docstring.
    on_date:
        Download date encoded in the statement file names (default: today).
    directory:
        Where statements are looked up (default: ``config.downloads_dir``).
    """

    def __init__(
        self,
        config: AppConfig,
        ledger: Ledger,
        *,
        policy: ErrorPolicy = ErrorPolicy.ABORT,
        on_date: date | None = None,
        directory: str | PathLike[str] | None = None,
        find_file: Callable[..., Path | None] = find_statement_file,
        read_file: Callable[[Path], str] = read_statement,
    ) -> None:
        self.config = config
        self.ledger = ledger
        self.policy = policy
        self.on_date = on_date
        self.directory = Path(directory) if directory is not None else config.downloads_dir
        self._find_file = find_file
        self._read_file = read_file

    def budgets(self) -> dict[str, list[AccountConfig]]:
        """Accounts grouped by ``sync_id`` in configuration order."""

        groups: dict[str, list[AccountConfig]] = {}
        for account in self.config.accounts:
            groups.setdefault(account.sync_id, []).append(account)
        return groups

    def import_account(self, account: AccountConfig) -> AccountOutcome:
        """Import one account's statement; parse and lookup errors propagate."""

        path = self._find_file(account.iban, on_date=self.on_date, directory=self.directory)
        if path is None:
            logger.info("no statement for %s in %s, skipping", account.name, self.directory)
            return AccountOutcome(account=account, status=AccountStatus.SKIPPED)
        logger.info("found %s", path)

        numbered = list(iter_rows(self._read_file(path)))
        logger.info("%d rows parsed", len(numbered))
        if not numbered:
            return AccountOutcome(account=account, status=AccountStatus.SKIPPED, path=path)

        account_ref = self.ledger.resolve_account_id(account.name)
        logger.debug("ledger account id for %s: %s", account.name, account_ref)

        transformed = _transform(numbered, account_ref, self.config.own_ibans, self.policy)
        logger.info("%d transactions transformed", len(transformed.transactions))

        result = self.ledger.import_transactions(account_ref, transformed.transactions)
        logger.info("imported: %d new, %d updated", len(result.added), len(result.updated))
        return AccountOutcome(
            account=account,
            status=AccountStatus.IMPORTED,
            path=path,
            rows=transformed.rows,
            transactions=len(transformed.transactions),
            added=len(result.added),
            updated=len(result.updated),
            ledger_errors=len(result.errors),
            failures=transformed.failures,
        )

    def run(self) -> list[AccountOutcome]:
        """Import every account, syncing once per budget; always closes the ledger.

        A statement that cannot be parsed, or an account missing from the
        ledger, fails that account only; the remaining accounts still run.
        """

        outcomes: list[AccountOutcome] = []
        try:
            for sync_id, accounts in self.budgets().items():
                logger.info("=== budget %s ===", sync_id)
                self.ledger.open_budget(sync_id)
                for account in accounts:
                    logger.info("--- %s (%s) ---", account.name, account.iban)
                    try:
                        outcomes.append(self.import_account(account))
                    except _ACCOUNT_ERRORS as exc:
                        logger.error("import of %s failed: %s", account.name, exc)
                        outcomes.append(
                            AccountOutcome(account=account, status=AccountStatus.FAILED, error=exc)
                        )
                self.ledger.sync()
                logger.info("budget %s synced", sync_id)
        finally:
            self.ledger.close()
        return outcomes


__all__ = [
    "AccountOutcome",
    "AccountStatus",
    "ErrorPolicy",
    "StatementImporter",
    "TransformResult",
    "transform_rows",
    "transform_statement",
]
