"""Single-entry transaction admission.

``TransactionCreator.create`` snapshots the balance, validates the candidate
against it, resolves the category, and persists, all while holding the store's
writer lock. Concurrent ``create`` calls (and the transaction phase of a bulk
import) sharing the same store therefore never judge an outcome against a
stale balance.
"""

from __future__ import annotations

from .balance import BalanceCalculator
from .categories import CategoryResolver
from .logging_setup import get_logger
from .models import (
    AdmissionResult,
    NewTransaction,
    Rejection,
    TransactionRequest,
)
from .store import LedgerStore
from .validation import TransactionValidator

logger = get_logger("financial_ledger.transactions")


class TransactionCreator:
    def __init__(
        self,
        store: LedgerStore,
        *,
        categories: CategoryResolver | None = None,
        validator: TransactionValidator | None = None,
        calculator: BalanceCalculator | None = None,
    ) -> None:
        self._store = store
        self._categories = categories or CategoryResolver(store)
        self._validator = validator or TransactionValidator()
        self._calculator = calculator or BalanceCalculator()

    def create(self, candidate: TransactionRequest) -> AdmissionResult:
        """Admit ``candidate`` or return the first rule it breaks.

        Returns the persisted :class:`~financial_ledger.models.Transaction`
        (with its category attached) or a
        :class:`~financial_ledger.models.Rejection`. Rejections leave the store
        untouched. Store failures raise :class:`~financial_ledger.errors.StoreError`.
        """

        # Shape problems never need the store.
        checked = self._validator.check(candidate)
        if isinstance(checked, Rejection):
            logger.debug("rejected candidate %r: %s", candidate.title, checked.reason)
            return checked

        with self._store.writer_lock():
            balance = self._calculator.compute(self._store.find_transactions())
            decision = self._validator.admit(checked, balance)
            if isinstance(decision, Rejection):
                logger.debug(
                    "rejected %s of %s against total %s: %s",
                    checked.type,
                    checked.value,
                    balance.total,
                    decision.reason,
                )
                return decision

            category = self._categories.resolve_one(decision.category)
            saved = self._store.save_transaction(
                NewTransaction(
                    title=decision.title,
                    value=decision.value,
                    type=decision.type,
                    category_id=category.id,
                )
            )

        logger.info("admitted %s %s (%s)", saved.type, saved.value, category.title)
        return saved.with_category(category)


__all__ = ["TransactionCreator"]
