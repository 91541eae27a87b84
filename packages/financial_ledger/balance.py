"""Balance aggregation over a transaction snapshot.

Callers own snapshot semantics: pass a consistent read of the transaction set
(e.g., one ``find_transactions()`` call made while holding the store's writer
lock).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from .models import Balance, Transaction, TransactionType


class BalanceCalculator:
    """Pure, single-pass income/outcome aggregation."""

    def compute(self, transactions: Iterable[Transaction]) -> Balance:
        income = Decimal("0.00")
        outcome = Decimal("0.00")
        for tx in transactions:
            if tx.type is TransactionType.INCOME:
                income += tx.value
            elif tx.type is TransactionType.OUTCOME:
                outcome += tx.value
        return Balance(income=income, outcome=outcome)


def compute_balance(transactions: Iterable[Transaction]) -> Balance:
    """Module-level convenience wrapper around :meth:`BalanceCalculator.compute`."""

    return BalanceCalculator().compute(transactions)


__all__ = ["BalanceCalculator", "compute_balance"]
