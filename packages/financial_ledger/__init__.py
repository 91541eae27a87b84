"""Public interface for the ``financial_ledger`` package.

Symbol re-exports only; there is no runtime logic here.
"""

from .api import Ledger, Statement, create_schema
from .balance import BalanceCalculator, compute_balance
from .categories import CategoryResolver
from .errors import (
    BatchImportError,
    ImportCancelled,
    InvalidFileType,
    InvalidTransactionId,
    LedgerError,
    StoreError,
    TransactionNotFound,
    TransactionRejected,
    UniqueConstraintViolation,
)
from .importing import BulkImportCoordinator, ImportReport
from .models import (
    Admissible,
    Balance,
    Category,
    NewTransaction,
    Rejection,
    RejectionReason,
    Transaction,
    TransactionRequest,
    TransactionType,
)
from .removal import TransactionRemover
from .store import LedgerStore, SqlAlchemyStore
from .transactions import TransactionCreator
from .validation import TransactionValidator

__all__ = [
    # API
    "Ledger",
    "Statement",
    "create_schema",
    # Core components
    "BalanceCalculator",
    "compute_balance",
    "TransactionValidator",
    "CategoryResolver",
    "TransactionCreator",
    "BulkImportCoordinator",
    "ImportReport",
    "TransactionRemover",
    # Store
    "LedgerStore",
    "SqlAlchemyStore",
    # Models / types
    "Admissible",
    "Balance",
    "Category",
    "NewTransaction",
    "Rejection",
    "RejectionReason",
    "Transaction",
    "TransactionRequest",
    "TransactionType",
    # Errors
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
