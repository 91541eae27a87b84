"""Shared SQLAlchemy models registry for the ledger database.

Currently includes the category and transaction tables used by
``financial_ledger``.
"""

from .ledger import Base, LedgerCategory, LedgerTransaction

__all__ = [
    "Base",
    "LedgerCategory",
    "LedgerTransaction",
]
