"""Data models and type aliases for ``financial_ledger``.

Domain records returned by the store (:class:`Category`, :class:`Transaction`)
are frozen dataclasses detached from any database session. The inbound request
shape (:class:`TransactionRequest`) is a pydantic model so that the CLI and any
host application validate payload *types* once at the boundary; the ledger
rules themselves live in :mod:`financial_ledger.validation`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

# ---------------------------------------------------------------------------
# Transaction type
# ---------------------------------------------------------------------------


class TransactionType(StrEnum):
    INCOME = "income"
    OUTCOME = "outcome"


# ---------------------------------------------------------------------------
# Persisted records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    title: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class Transaction:
    """A persisted ledger movement.

    ``category`` is populated by the store when the category row is loaded
    alongside the transaction and by the admission paths on return. The
    ``category_id`` reference is fixed at creation time.
    """

    id: str
    title: str
    value: Decimal
    type: TransactionType
    category_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category: Category | None = None

    def with_category(self, category: Category) -> Transaction:
        return replace(self, category=category)


@dataclass(frozen=True, slots=True)
class NewTransaction:
    """An admitted transaction that has not been written yet."""

    title: str
    value: Decimal
    type: TransactionType
    category_id: str


# ---------------------------------------------------------------------------
# Balance
# ---------------------------------------------------------------------------

_ZERO = Decimal("0.00")


@dataclass(frozen=True, slots=True)
class Balance:
    """Derived income/outcome sums; ``total`` is always ``income - outcome``."""

    income: Decimal = _ZERO
    outcome: Decimal = _ZERO

    @property
    def total(self) -> Decimal:
        return self.income - self.outcome

    def admit(self, type: TransactionType, value: Decimal) -> Balance:
        """Return the balance after one more transaction of ``type``/``value``."""

        if type is TransactionType.INCOME:
            return Balance(income=self.income + value, outcome=self.outcome)
        return Balance(income=self.income, outcome=self.outcome + value)

    def as_dict(self) -> dict[str, Decimal]:
        return {"income": self.income, "outcome": self.outcome, "total": self.total}


# ---------------------------------------------------------------------------
# Requests and validation results
# ---------------------------------------------------------------------------


class TransactionRequest(BaseModel):
    """Candidate transaction as received from a caller or an import row.

    Every field is optional at this layer: presence, emptiness and value
    parsing are ledger rules reported as :class:`Rejection` values, not
    pydantic errors. ``value`` keeps the raw scalar (CSV rows deliver strings).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: str | None = None
    value: Decimal | int | float | str | None = None
    type: str | None = None
    category: str | None = None


class RejectionReason(StrEnum):
    MISSING_FIELDS = "missing_fields"
    INVALID_TITLE = "invalid_title"
    INVALID_CATEGORY = "invalid_category"
    INVALID_TYPE = "invalid_type"
    INVALID_VALUE = "invalid_value"
    INSUFFICIENT_FUNDS = "insufficient_funds"


_REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.MISSING_FIELDS: "Insufficient information.",
    RejectionReason.INVALID_TITLE: "Invalid title.",
    RejectionReason.INVALID_CATEGORY: "Invalid category.",
    RejectionReason.INVALID_TYPE: "Invalid transaction type",
    RejectionReason.INVALID_VALUE: "Invalid value",
    RejectionReason.INSUFFICIENT_FUNDS: "Excessive outcome",
}


@dataclass(frozen=True, slots=True)
class Rejection:
    """Business-rule failure for one candidate; reported verbatim, never retried."""

    reason: RejectionReason
    message: str

    @classmethod
    def of(cls, reason: RejectionReason) -> Rejection:
        return cls(reason=reason, message=_REJECTION_MESSAGES[reason])


@dataclass(frozen=True, slots=True)
class Admissible:
    """A candidate that passed validation, with normalized field values."""

    title: str
    value: Decimal
    type: TransactionType
    category: str


type ValidationResult = Admissible | Rejection
type AdmissionResult = Transaction | Rejection


__all__ = [
    "Admissible",
    "AdmissionResult",
    "Balance",
    "Category",
    "NewTransaction",
    "Rejection",
    "RejectionReason",
    "Transaction",
    "TransactionRequest",
    "TransactionType",
    "ValidationResult",
]
