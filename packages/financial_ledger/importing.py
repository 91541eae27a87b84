"""Bulk import of candidate transactions.

Admitting rows independently (each against its own balance snapshot) lets two
outcome rows that are individually affordable overdraw the ledger together.
``BulkImportCoordinator`` avoids that by splitting a batch into two phases:

1. **Categories.** Every distinct category title among the shape-valid rows is
   resolved with one :meth:`CategoryResolver.resolve_or_create` call, which
   creates unseen titles with bounded parallelism. This phase finishes before
   any admission decision is made.
2. **Admission.** Under the store's writer lock, rows are judged strictly in
   input order against a running balance that starts at the persisted balance
   and is advanced after each accepted row. Rejected rows leave it unchanged
   and processing continues. Accepted rows are buffered and written with one
   bulk ``save_transactions`` call (or every ``flush_size`` accepted rows).

The batch is not all-or-nothing: the result list carries one
:class:`Transaction` or :class:`Rejection` per input row, in input order.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .balance import BalanceCalculator
from .categories import CategoryResolver
from .config import resolve_flush_size
from .errors import BatchImportError, ImportCancelled, StoreError
from .logging_setup import get_logger
from .models import (
    Admissible,
    AdmissionResult,
    Category,
    NewTransaction,
    Rejection,
    Transaction,
    TransactionRequest,
    ValidationResult,
)
from .store import LedgerStore
from .validation import TransactionValidator

logger = get_logger("financial_ledger.importing")


@dataclass(frozen=True, slots=True)
class ImportReport:
    """Per-row results of one batch, partitioned for callers."""

    results: tuple[AdmissionResult, ...]

    @classmethod
    def from_results(cls, results: Iterable[AdmissionResult]) -> ImportReport:
        return cls(results=tuple(results))

    @property
    def accepted(self) -> list[tuple[int, Transaction]]:
        return [(i, r) for i, r in enumerate(self.results) if isinstance(r, Transaction)]

    @property
    def rejected(self) -> list[tuple[int, Rejection]]:
        return [(i, r) for i, r in enumerate(self.results) if isinstance(r, Rejection)]


@dataclass(slots=True)
class _Pending:
    row: int
    new: NewTransaction
    category: Category


class BulkImportCoordinator:
    def __init__(
        self,
        store: LedgerStore,
        *,
        categories: CategoryResolver | None = None,
        validator: TransactionValidator | None = None,
        calculator: BalanceCalculator | None = None,
        flush_size: int | None = None,
    ) -> None:
        self._store = store
        self._categories = categories or CategoryResolver(store)
        self._validator = validator or TransactionValidator()
        self._calculator = calculator or BalanceCalculator()
        self._flush_size = resolve_flush_size(flush_size)

    def import_batch(
        self,
        rows: Iterable[TransactionRequest],
        *,
        cancel: threading.Event | None = None,
    ) -> list[AdmissionResult]:
        """Admit ``rows`` in order; return one result per row.

        Raises
        ------
        BatchImportError
            A store failure aborted the batch; ``results`` holds the outcomes
            of the leading rows that were already final (persisted or
            rejected).
        ImportCancelled
            ``cancel`` was set; rows admitted so far were flushed and their
            outcomes are in ``results``.
        """

        # Row sources are single pass; both phases need the rows.
        batch = list(rows)
        if not batch:
            return []

        checked = [self._validator.check(r) for r in batch]
        titles = [c.category for c in checked if isinstance(c, Admissible)]
        try:
            categories = self._categories.resolve_or_create(titles)
        except StoreError as e:
            logger.warning("import aborted during category phase: %s", e)
            raise BatchImportError(f"category phase failed: {e}", results=[]) from e

        results = self._admit_in_order(checked, categories, cancel)
        report = ImportReport.from_results(results)
        logger.info(
            "imported batch of %d rows: %d accepted, %d rejected",
            len(results),
            len(report.accepted),
            len(report.rejected),
        )
        return results

    def _admit_in_order(
        self,
        checked: Sequence[ValidationResult],
        categories: dict[str, Category],
        cancel: threading.Event | None,
    ) -> list[AdmissionResult]:
        total_rows = len(checked)
        results: list[AdmissionResult | None] = [None] * total_rows
        pending: list[_Pending] = []

        with self._store.writer_lock():
            try:
                running = self._calculator.compute(self._store.find_transactions())
            except StoreError as e:
                raise BatchImportError(f"balance snapshot failed: {e}", results=[]) from e

            for idx, item in enumerate(checked):
                if cancel is not None and cancel.is_set():
                    self._flush(pending, results)
                    logger.info("import cancelled before row %d of %d", idx, total_rows)
                    raise ImportCancelled(results=results[:idx], total_rows=total_rows)

                if isinstance(item, Rejection):
                    results[idx] = item
                    continue
                decision = self._validator.admit(item, running)
                if isinstance(decision, Rejection):
                    logger.debug("row %d rejected: %s", idx, decision.reason)
                    results[idx] = decision
                    continue

                category = categories[decision.category]
                pending.append(
                    _Pending(
                        row=idx,
                        new=NewTransaction(
                            title=decision.title,
                            value=decision.value,
                            type=decision.type,
                            category_id=category.id,
                        ),
                        category=category,
                    )
                )
                running = running.admit(decision.type, decision.value)

                if self._flush_size is not None and len(pending) >= self._flush_size:
                    self._flush(pending, results)

            self._flush(pending, results)

        return [r for r in results if r is not None]

    def _flush(self, pending: list[_Pending], results: list[AdmissionResult | None]) -> None:
        if not pending:
            return
        try:
            saved = self._store.save_transactions([p.new for p in pending])
        except StoreError as e:
            first_unwritten = pending[0].row
            logger.warning(
                "import aborted while writing %d admitted row(s) starting at row %d: %s",
                len(pending),
                first_unwritten,
                e,
            )
            raise BatchImportError(
                f"bulk write failed: {e}", results=results[:first_unwritten]
            ) from e
        for p, tx in zip(pending, saved, strict=True):
            results[p.row] = tx.with_category(p.category)
        pending.clear()


__all__ = ["BulkImportCoordinator", "ImportReport"]
