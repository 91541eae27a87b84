# ruff: noqa: I001
"""CLI for the ``financial_ledger`` package.

A Typer console interface over :class:`financial_ledger.api.Ledger`.
Environment variables (notably ``DATABASE_URL``) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Business logic lives
in the library modules; handlers here only parse options, call the ledger,
and render results as tab-separated lines.

Exit codes
----------
- ``0``: success (an import with rejected rows is still a success)
- ``1``: usage, I/O, or store failure
- ``2``: the ledger rejected the request (validation or insufficient funds)
"""

from __future__ import annotations

import csv
import sys
from decimal import Decimal
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .api import Ledger, create_schema
from .errors import (
    BatchImportError,
    ImportCancelled,
    InvalidFileType,
    InvalidTransactionId,
    StoreError,
    TransactionNotFound,
)
from .logging_setup import configure_logging
from .models import Rejection, Transaction, TransactionRequest

EXIT_FAILURE = 1
EXIT_REJECTED = 2


# ---- Small module-level helpers used by CLI commands -------------------------


def _fail(message: str, code: int = EXIT_FAILURE) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(code)


def _open_ledger(database_url: str | None) -> Ledger:
    try:
        return Ledger.open(database_url)
    except RuntimeError as e:
        raise _fail(str(e)) from None


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def _transaction_line(tx: Transaction) -> str:
    category = tx.category.title if tx.category is not None else ""
    return f"{tx.id}\t{tx.type}\t{_money(tx.value)}\t{category}\t{tx.title}"


def _print_balance(ledger_balance) -> None:
    print(f"income\t{_money(ledger_balance.income)}")
    print(f"outcome\t{_money(ledger_balance.outcome)}")
    print(f"total\t{_money(ledger_balance.total)}")


def _print_results(results) -> None:
    for idx, item in enumerate(results, start=1):
        if isinstance(item, Rejection):
            print(f"{idx}\trejected\t{item.reason}\t{item.message}")
        else:
            print(f"{idx}\taccepted\t{_transaction_line(item)}")


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Record income/outcome transactions against categories and report the balance. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects these when used as default values below.
# Inside ``Annotated`` the default comes from the parameter (``= None``), so
# the leading string is the option name.
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a CSV file with a header row: title,type,value,category",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler reports nice errors
)


@app.command("init-db")
def init_db_cmd(database_url: Annotated[str | None, DATABASE_URL_OPTION] = None) -> None:
    """Create the ledger tables from the ORM models (SQLite/dev databases)."""

    try:
        create_schema(database_url)
    except RuntimeError as e:
        raise _fail(str(e)) from None
    except Exception as e:
        raise _fail(f"schema creation failed: {e}") from None
    print("Ledger schema is ready.")


@app.command("balance")
def balance_cmd(database_url: Annotated[str | None, DATABASE_URL_OPTION] = None) -> None:
    """Print income, outcome, and total."""

    ledger = _open_ledger(database_url)
    try:
        balance = ledger.balance()
    except StoreError as e:
        raise _fail(str(e)) from None
    _print_balance(balance)


@app.command("list")
def list_cmd(database_url: Annotated[str | None, DATABASE_URL_OPTION] = None) -> None:
    """Print every transaction followed by the balance of the same read."""

    ledger = _open_ledger(database_url)
    try:
        statement = ledger.statement()
    except StoreError as e:
        raise _fail(str(e)) from None
    for tx in statement.transactions:
        print(_transaction_line(tx))
    _print_balance(statement.balance)


@app.command("create")
def create_cmd(
    title: Annotated[str, typer.Option("--title", help="Transaction title.")],
    value: Annotated[str, typer.Option("--value", help="Strictly positive amount.")],
    type_: Annotated[str, typer.Option("--type", help="income or outcome.")],
    category: Annotated[str, typer.Option("--category", help="Category title.")],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Admit a single transaction."""

    ledger = _open_ledger(database_url)
    candidate = TransactionRequest(title=title, value=value, type=type_, category=category)
    try:
        result = ledger.create(candidate)
    except StoreError as e:
        raise _fail(str(e)) from None
    if isinstance(result, Rejection):
        raise _fail(result.message, EXIT_REJECTED)
    print(_transaction_line(result))


@app.command("import")
def import_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Import a CSV batch; prints one result line per row and a summary."""

    ledger = _open_ledger(database_url)
    try:
        report = ledger.import_csv(csv_path)
    except FileNotFoundError:
        raise _fail(f"File not found: {csv_path}") from None
    except PermissionError:
        raise _fail(f"Permission denied: {csv_path}") from None
    except InvalidFileType as e:
        raise _fail(str(e)) from None
    except ValueError as e:
        raise _fail(f"Failed to read CSV: {e}") from None
    except csv.Error as e:
        raise _fail(f"Failed to parse CSV: {e}") from None
    except (BatchImportError, ImportCancelled) as e:
        _print_results(e.results)
        raise _fail(f"import stopped after {len(e.results)} row(s): {e}") from None
    except StoreError as e:
        raise _fail(str(e)) from None

    _print_results(report.results)
    print(f"accepted {len(report.accepted)}, rejected {len(report.rejected)}")


@app.command("delete")
def delete_cmd(
    transaction_id: Annotated[str, typer.Argument(help="UUID of the transaction to delete.")],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Delete a transaction unless that would leave the balance negative."""

    ledger = _open_ledger(database_url)
    try:
        result = ledger.delete(transaction_id)
    except (InvalidTransactionId, TransactionNotFound) as e:
        raise _fail(str(e)) from None
    except StoreError as e:
        raise _fail(str(e)) from None
    if isinstance(result, Rejection):
        raise _fail(result.message, EXIT_REJECTED)
    print(f"deleted\t{_transaction_line(result)}")


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    app()
