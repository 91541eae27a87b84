"""Admission rules for candidate transactions.

Checks run in a fixed order and the first failure wins:

1. all four fields present (not ``None``)      -> ``MISSING_FIELDS``
2. ``title`` non-empty                          -> ``INVALID_TITLE``
3. ``category`` non-empty                       -> ``INVALID_CATEGORY``
4. ``type`` is ``income`` or ``outcome``        -> ``INVALID_TYPE``
5. ``value`` is a finite number > 0 (cents)     -> ``INVALID_VALUE``
6. outcome ``value`` <= ``balance.total``       -> ``INSUFFICIENT_FUNDS``

Only the last check depends on ledger state; the balance is always supplied by
the caller so that single-entry and batch admission control which snapshot (or
running balance) a candidate is judged against.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .models import (
    Admissible,
    Balance,
    Rejection,
    RejectionReason,
    TransactionRequest,
    TransactionType,
    ValidationResult,
)

_CENT = Decimal("0.01")
# ``lg_transactions.value`` is Numeric(18, 2): at most 16 integer digits.
VALUE_LIMIT = Decimal("1e16")


def parse_value(raw: Any) -> Decimal | None:
    """Parse ``raw`` into a Decimal rounded half-up to cents.

    Returns ``None`` for anything that is not a finite number (including
    booleans, empty strings, ``"abc"``, ``NaN`` and infinities) and for
    amounts whose rounded magnitude reaches :data:`VALUE_LIMIT`.
    """

    if raw is None or isinstance(raw, bool):
        return None
    try:
        d = Decimal(str(raw).strip())
        if not d.is_finite() or abs(d) >= VALUE_LIMIT:
            return None
        rounded = d.quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return None
    # 9999999999999999.995 only crosses the limit after rounding.
    if abs(rounded) >= VALUE_LIMIT:
        return None
    return rounded


def _non_empty(value: str) -> bool:
    return bool(value.strip())


class TransactionValidator:
    """Stateless rule checker; never reads the store."""

    def check(self, candidate: TransactionRequest) -> ValidationResult:
        """Run the balance-independent checks (1-5)."""

        title, value, type_, category = (
            candidate.title,
            candidate.value,
            candidate.type,
            candidate.category,
        )
        if title is None or value is None or type_ is None or category is None:
            return Rejection.of(RejectionReason.MISSING_FIELDS)
        if not _non_empty(title):
            return Rejection.of(RejectionReason.INVALID_TITLE)
        if not _non_empty(category):
            return Rejection.of(RejectionReason.INVALID_CATEGORY)
        try:
            tx_type = TransactionType(type_.strip())
        except ValueError:
            return Rejection.of(RejectionReason.INVALID_TYPE)
        amount = parse_value(value)
        if amount is None or amount <= 0:
            return Rejection.of(RejectionReason.INVALID_VALUE)
        return Admissible(
            title=title.strip(),
            value=amount,
            type=tx_type,
            category=category.strip(),
        )

    def admit(self, checked: Admissible, current_balance: Balance) -> ValidationResult:
        """Apply the balance check (6) to an already shape-checked candidate."""

        if checked.type is TransactionType.OUTCOME and checked.value > current_balance.total:
            return Rejection.of(RejectionReason.INSUFFICIENT_FUNDS)
        return checked

    def validate(
        self, candidate: TransactionRequest, current_balance: Balance
    ) -> ValidationResult:
        """Run every check against ``current_balance``; first failure wins."""

        checked = self.check(candidate)
        if isinstance(checked, Rejection):
            return checked
        return self.admit(checked, current_balance)


__all__ = ["VALUE_LIMIT", "TransactionValidator", "parse_value"]
