# ruff: noqa: I001
"""CLI for the ``dkb_import`` package.

Typer-based console interface. Environment variables (account blocks,
``OWN_IBANS``, ``LEDGER_DATABASE_URL``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to :mod:`dkb_import.pipeline`.

Commands
--------
``run``          import today's statements of all configured accounts
``parse``        dry-run a single statement and print JSON lines
``init-ledger``  create the ledger schema and the configured accounts
"""

from __future__ import annotations

import json
import os
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging

if TYPE_CHECKING:
    from .config import AppConfig


def _echo_err(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)


def _parse_day(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint="--date") from e


def _load_config_or_exit() -> AppConfig:
    from .config import load_config
    from .errors import ConfigError

    try:
        return load_config()
    except ConfigError as e:
        _echo_err(str(e))
        raise typer.Exit(1) from e


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import DKB CSV statement exports into the ledger without duplicates. "
        "Loads account configuration from a local .env before running."
    ),
)

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a DKB 'Umsatzliste' CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


@app.command("run")
def run_cmd(
    *,
    on_date: str | None = typer.Option(
        None, "--date", help="Download date in the statement file names (default: today)."
    ),
    downloads_dir: Path | None = typer.Option(
        None, help="Directory with the statements (falls back to DKB_DOWNLOADS_DIR)."
    ),
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env var)."
    ),
    collect_errors: bool = typer.Option(
        False,
        "--collect-errors",
        help="Skip and report malformed rows instead of failing the whole statement.",
    ),
) -> None:
    """Import the statements of all configured accounts."""

    from sqlalchemy.exc import SQLAlchemyError

    from .ledger.sql import SqlLedger
    from .pipeline import AccountStatus, ErrorPolicy, StatementImporter

    day = _parse_day(on_date)
    config = _load_config_or_exit()
    ledger = SqlLedger(database_url or config.database_url)
    importer = StatementImporter(
        config,
        ledger,
        policy=ErrorPolicy.COLLECT if collect_errors else ErrorPolicy.ABORT,
        on_date=day,
        directory=downloads_dir,
    )

    try:
        outcomes = importer.run()
    except (SQLAlchemyError, RuntimeError) as e:
        _echo_err(f"ledger failure: {e}")
        raise typer.Exit(1) from e

    failed = 0
    for o in outcomes:
        label = f"{o.account.name} ({o.account.iban})"
        if o.status is AccountStatus.IMPORTED:
            typer.echo(
                f"{label}: {o.transactions} transactions, {o.added} new, {o.updated} updated"
                + (f", {len(o.failures)} rows rejected" if o.failures else "")
                + (f", {o.ledger_errors} ledger errors" if o.ledger_errors else "")
            )
        elif o.status is AccountStatus.SKIPPED:
            typer.echo(f"{label}: skipped ({'no transactions' if o.path else 'no statement found'})")
        else:
            failed += 1
            typer.echo(f"{label}: FAILED: {o.error}", err=True)

    if failed:
        raise typer.Exit(1)


@app.command("parse")
def parse_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    account_ref: str = typer.Option(
        "dry-run", help="Account reference written into each transaction."
    ),
    own_iban: list[str] | None = typer.Option(
        None, "--own-iban", help="Own IBAN to mask (repeatable); OWN_IBANS is added."
    ),
    collect_errors: bool = typer.Option(
        False, "--collect-errors", help="Skip and report malformed rows."
    ),
) -> None:
    """Print the canonical transactions of one statement as JSON lines."""

    from .discovery import read_statement
    from .errors import FormatError, ParseError
    from .pipeline import ErrorPolicy, transform_statement

    own = list(own_iban or [])
    own += [s.strip() for s in os.getenv("OWN_IBANS", "").split(",") if s.strip()]

    try:
        content = read_statement(csv_path)
        result = transform_statement(
            content,
            account_ref,
            frozenset(own),
            policy=ErrorPolicy.COLLECT if collect_errors else ErrorPolicy.ABORT,
        )
    except FileNotFoundError as e:
        _echo_err(f"File not found: {csv_path}")
        raise typer.Exit(1) from e
    except PermissionError as e:
        _echo_err(f"Permission denied: {csv_path}")
        raise typer.Exit(1) from e
    except (ParseError, FormatError, UnicodeDecodeError) as e:
        _echo_err(f"Failed to parse statement: {e}")
        raise typer.Exit(1) from e

    for tx in result.transactions:
        typer.echo(json.dumps(tx.to_dict(), ensure_ascii=False))
    for failure in result.failures:
        typer.echo(f"line {failure.line_no}: {failure.error}", err=True)


@app.command("init-ledger")
def init_ledger_cmd(
    *,
    database_url: str | None = typer.Option(
        None, help="Override LEDGER_DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Create the ledger tables and one ledger account per configured account."""

    from .ledger.sql import SqlLedger

    config = _load_config_or_exit()
    ledger = SqlLedger(database_url or config.database_url)
    try:
        ledger.create_schema()
        for account in config.accounts:
            account_id = ledger.ensure_account(account.name, account.sync_id)
            typer.echo(f"{account.name}\t{account.sync_id}\t{account_id}")
        ledger.sync()
    except RuntimeError as e:
        _echo_err(str(e))
        raise typer.Exit(1) from e
    finally:
        ledger.close()


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to DKB_IMPORT_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging(log_level)

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m dkb_import.cli`
    app()
