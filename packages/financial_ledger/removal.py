"""Deletion of a single transaction.

Deletion is kept apart from admission. It still runs under the writer lock and
re-checks the ledger: removing an income transaction whose value is larger
than the current total would leave the ledger negative, so that deletion is
refused with an ``INSUFFICIENT_FUNDS`` rejection.
"""

from __future__ import annotations

from uuid import UUID

from .balance import BalanceCalculator
from .errors import InvalidTransactionId, TransactionNotFound
from .logging_setup import get_logger
from .models import Rejection, RejectionReason, Transaction, TransactionType
from .store import LedgerStore

logger = get_logger("financial_ledger.removal")


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (TypeError, ValueError):
        return False
    return True


class TransactionRemover:
    def __init__(self, store: LedgerStore, *, calculator: BalanceCalculator | None = None) -> None:
        self._store = store
        self._calculator = calculator or BalanceCalculator()

    def delete(self, transaction_id: str) -> Transaction | Rejection:
        """Delete ``transaction_id`` and return the removed record.

        Raises :class:`InvalidTransactionId` for malformed ids and
        :class:`TransactionNotFound` when no such transaction exists.
        """

        if not _is_uuid(transaction_id):
            raise InvalidTransactionId(transaction_id)

        with self._store.writer_lock():
            found = self._store.get_transaction(transaction_id)
            if found is None:
                raise TransactionNotFound(transaction_id)
            if found.type is TransactionType.INCOME:
                balance = self._calculator.compute(self._store.find_transactions())
                if balance.total - found.value < 0:
                    logger.info(
                        "refused deleting income %s: total %s would go negative",
                        transaction_id,
                        balance.total,
                    )
                    return Rejection.of(RejectionReason.INSUFFICIENT_FUNDS)
            self._store.delete_transaction(transaction_id)

        logger.info("deleted %s %s (%s)", found.type, found.value, transaction_id)
        return found


__all__ = ["TransactionRemover"]
