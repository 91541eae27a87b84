"""Public API and wiring for the ``financial_ledger`` package.

:class:`Ledger` composes the core components around one store so that the
single-entry and bulk admission paths share the same category resolver and the
same writer lock. Host applications (the CLI, an HTTP layer) should open one
``Ledger`` per process and database.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from db import metadata
from db.client import get_engine, get_session_factory

from .balance import BalanceCalculator
from .categories import CategoryResolver
from .config import resolve_database_url
from .errors import InvalidFileType, TransactionRejected
from .importing import BulkImportCoordinator, ImportReport
from .ingest.csv_rows import read_rows
from .models import (
    AdmissionResult,
    Balance,
    Rejection,
    Transaction,
    TransactionRequest,
)
from .removal import TransactionRemover
from .store import LedgerStore, SqlAlchemyStore
from .transactions import TransactionCreator
from .validation import TransactionValidator

_CSV_SUFFIXES = {".csv"}

# One writer lock per database URL, shared by every store ``Ledger.open`` builds.
_WRITER_LOCKS: dict[str, threading.Lock] = {}
_WRITER_LOCKS_GUARD = threading.Lock()


def _writer_lock_for(database_url: str) -> threading.Lock:
    with _WRITER_LOCKS_GUARD:
        lock = _WRITER_LOCKS.get(database_url)
        if lock is None:
            lock = _WRITER_LOCKS[database_url] = threading.Lock()
        return lock


@dataclass(frozen=True, slots=True)
class Statement:
    """All transactions (with categories) and the balance of that same read."""

    transactions: tuple[Transaction, ...]
    balance: Balance


class Ledger:
    def __init__(
        self,
        store: LedgerStore,
        *,
        category_workers: int | None = None,
        flush_size: int | None = None,
    ) -> None:
        self.store = store
        calculator = BalanceCalculator()
        validator = TransactionValidator()
        categories = CategoryResolver(store, max_workers=category_workers)
        self._calculator = calculator
        self.creator = TransactionCreator(
            store, categories=categories, validator=validator, calculator=calculator
        )
        self.importer = BulkImportCoordinator(
            store,
            categories=categories,
            validator=validator,
            calculator=calculator,
            flush_size=flush_size,
        )
        self.remover = TransactionRemover(store, calculator=calculator)

    @classmethod
    def open(cls, database_url: str | None = None, **kwargs) -> Ledger:
        """Open a ledger over the SQLAlchemy store for ``database_url``.

        Falls back to ``DATABASE_URL`` when ``database_url`` is ``None``.
        Ledgers opened on the same URL in one process share a writer lock.
        """

        url = resolve_database_url(database_url)
        store = SqlAlchemyStore(get_session_factory(database_url=url), lock=_writer_lock_for(url))
        return cls(store, **kwargs)

    # ---- reads --------------------------------------------------------------

    def balance(self) -> Balance:
        return self._calculator.compute(self.store.find_transactions())

    def statement(self) -> Statement:
        transactions = self.store.find_transactions()
        return Statement(
            transactions=tuple(transactions),
            balance=self._calculator.compute(transactions),
        )

    # ---- writes -------------------------------------------------------------

    def create(self, candidate: TransactionRequest) -> AdmissionResult:
        return self.creator.create(candidate)

    def create_or_raise(self, candidate: TransactionRequest) -> Transaction:
        result = self.creator.create(candidate)
        if isinstance(result, Rejection):
            raise TransactionRejected(result)
        return result

    def import_rows(
        self,
        rows: Iterable[TransactionRequest],
        *,
        cancel: threading.Event | None = None,
    ) -> ImportReport:
        return ImportReport.from_results(self.importer.import_batch(rows, cancel=cancel))

    def import_csv(
        self,
        csv_path: str | PathLike[str],
        *,
        cancel: threading.Event | None = None,
    ) -> ImportReport:
        """Import a CSV export (``title,type,value,category`` with a header row)."""

        p = Path(csv_path)
        if p.suffix.lower() not in _CSV_SUFFIXES:
            raise InvalidFileType(str(p))
        with p.open(encoding="utf-8", newline="") as f:
            return self.import_rows(read_rows(f), cancel=cancel)

    def delete(self, transaction_id: str) -> Transaction | Rejection:
        return self.remover.delete(transaction_id)


def create_schema(database_url: str | None = None) -> None:
    """Create the ledger tables directly from the ORM metadata.

    Intended for local SQLite files and tests; managed databases should run
    the Alembic migrations under ``libs/db/alembic`` instead.
    """

    metadata.create_all(bind=get_engine(database_url=resolve_database_url(database_url)))


__all__ = ["Ledger", "Statement", "create_schema"]
