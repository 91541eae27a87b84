"""Exception hierarchy for ``financial_ledger``.

Business-rule failures are *not* exceptions: the validator and the admission
paths return :class:`~financial_ledger.models.Rejection` values. Exceptions
here cover persistence failures, aborted batches, and the deletion path.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Rejection


class LedgerError(Exception):
    """Base class for every error raised by ``financial_ledger``."""


class StoreError(LedgerError):
    """The persistence collaborator failed (I/O, availability, constraint)."""


class UniqueConstraintViolation(StoreError):
    """A category with the same title already exists in the store."""

    def __init__(self, title: str) -> None:
        super().__init__(f"category title already exists: {title!r}")
        self.title = title


class BatchImportError(StoreError):
    """A store failure aborted ``import_batch`` part way through.

    ``results`` holds the per-row outcomes for the leading rows whose fate is
    final (persisted or rejected) at the time of the abort.
    """

    def __init__(self, message: str, *, results: Sequence[Any]) -> None:
        super().__init__(message)
        self.results = list(results)


class ImportCancelled(LedgerError):
    """``import_batch`` stopped between rows because cancellation was requested."""

    def __init__(self, *, results: Sequence[Any], total_rows: int) -> None:
        super().__init__(f"import cancelled after {len(results)} of {total_rows} rows")
        self.results = list(results)
        self.total_rows = total_rows


class InvalidTransactionId(LedgerError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__("Invalid ID.")
        self.transaction_id = transaction_id


class TransactionNotFound(LedgerError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__("No such ID.")
        self.transaction_id = transaction_id


class InvalidFileType(LedgerError):
    """An import file does not carry a supported suffix."""

    def __init__(self, path: str) -> None:
        super().__init__("Invalid file type.")
        self.path = path


class TransactionRejected(LedgerError):
    """Raised by callers that prefer exceptions over returned rejections."""

    def __init__(self, rejection: Rejection) -> None:
        super().__init__(rejection.message)
        self.rejection = rejection


__all__ = [
    "BatchImportError",
    "ImportCancelled",
    "InvalidFileType",
    "InvalidTransactionId",
    "LedgerError",
    "StoreError",
    "TransactionNotFound",
    "TransactionRejected",
    "UniqueConstraintViolation",
]
