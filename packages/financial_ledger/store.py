"""Persistence collaborator for the ledger core.

``LedgerStore`` is the narrow contract the core depends on; every component
receives an instance explicitly. ``SqlAlchemyStore`` implements it over the
shared ``db`` library: each call runs in its own short ``session_scope`` and
returns detached domain records (:mod:`financial_ledger.models`), so a single
store instance can be shared by worker threads.

Error mapping
-------------
- ``IntegrityError`` on the category title unique index ->
  :class:`~financial_ledger.errors.UniqueConstraintViolation`
- any other ``SQLAlchemyError`` -> :class:`~financial_ledger.errors.StoreError`

Writer lock
-----------
``writer_lock()`` is the single-writer critical section used by the admission
paths to make "read balance, decide, write" atomic with respect to each other.
It is process-local; run one store per process per database.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from db.client import session_scope
from db.models.ledger import LedgerCategory, LedgerTransaction
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import StoreError, UniqueConstraintViolation
from .logging_setup import get_logger
from .models import Category, NewTransaction, Transaction, TransactionType

logger = get_logger("financial_ledger.store")


class LedgerStore(Protocol):
    def find_transactions(self, *, type: TransactionType | None = None) -> list[Transaction]: ...

    def get_transaction(self, transaction_id: str) -> Transaction | None: ...

    def save_transaction(self, new: NewTransaction) -> Transaction: ...

    def save_transactions(self, news: Sequence[NewTransaction]) -> list[Transaction]: ...

    def delete_transaction(self, transaction_id: str) -> None: ...

    def find_categories_by_titles(self, titles: Iterable[str]) -> list[Category]: ...

    def save_category(self, title: str) -> Category: ...

    def writer_lock(self) -> AbstractContextManager[None]: ...


# ---------------------------
# Row -> record mapping
# ---------------------------


def _category_from_row(row: LedgerCategory) -> Category:
    return Category(
        id=row.id,
        title=row.title,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _transaction_from_row(row: LedgerTransaction) -> Transaction:
    return Transaction(
        id=row.id,
        title=row.title,
        value=row.value,
        type=TransactionType(row.type),
        category_id=row.category_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        category=_category_from_row(row.category) if row.category is not None else None,
    )


def _row_from_new(new: NewTransaction) -> LedgerTransaction:
    return LedgerTransaction(
        title=new.title,
        value=new.value,
        type=new.type.value,
        category_id=new.category_id,
    )


class SqlAlchemyStore:
    """``LedgerStore`` backed by SQLAlchemy sessions from ``session_factory``."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        lock: threading.Lock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._lock = lock or threading.Lock()

    @contextmanager
    def _scope(self, op: str) -> Iterator[Session]:
        try:
            with session_scope(session_factory=self._session_factory) as session:
                yield session
        except UniqueConstraintViolation:
            raise
        except SQLAlchemyError as e:
            logger.warning("store operation %s failed: %s", op, e)
            raise StoreError(f"{op} failed: {e}") from e

    # ---- transactions -------------------------------------------------------

    def find_transactions(self, *, type: TransactionType | None = None) -> list[Transaction]:
        stmt = select(LedgerTransaction).order_by(LedgerTransaction.created_at)
        if type is not None:
            stmt = stmt.where(LedgerTransaction.type == type.value)
        with self._scope("find_transactions") as session:
            rows = session.execute(stmt).scalars().all()
            return [_transaction_from_row(r) for r in rows]

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        with self._scope("get_transaction") as session:
            row = session.get(LedgerTransaction, transaction_id)
            return _transaction_from_row(row) if row is not None else None

    def save_transaction(self, new: NewTransaction) -> Transaction:
        return self.save_transactions([new])[0]

    def save_transactions(self, news: Sequence[NewTransaction]) -> list[Transaction]:
        """Insert ``news`` in one session/commit and return them in input order."""

        if not news:
            return []
        with self._scope("save_transactions") as session:
            rows = [_row_from_new(n) for n in news]
            session.add_all(rows)
            session.flush()
            for row in rows:
                session.refresh(row, attribute_names=["category"])
            return [_transaction_from_row(r) for r in rows]

    def delete_transaction(self, transaction_id: str) -> None:
        with self._scope("delete_transaction") as session:
            session.execute(delete(LedgerTransaction).where(LedgerTransaction.id == transaction_id))

    # ---- categories ---------------------------------------------------------

    def find_categories_by_titles(self, titles: Iterable[str]) -> list[Category]:
        wanted = sorted(set(titles))
        if not wanted:
            return []
        with self._scope("find_categories_by_titles") as session:
            rows = (
                session.execute(select(LedgerCategory).where(LedgerCategory.title.in_(wanted)))
                .scalars()
                .all()
            )
            return [_category_from_row(r) for r in rows]

    def save_category(self, title: str) -> Category:
        with self._scope("save_category") as session:
            row = LedgerCategory(title=title)
            try:
                session.add(row)
                session.flush()
            except IntegrityError as e:
                session.rollback()
                if self._title_exists(session, title):
                    raise UniqueConstraintViolation(title) from e
                raise
            return _category_from_row(row)

    @staticmethod
    def _title_exists(session: Session, title: str) -> bool:
        found = session.execute(
            select(LedgerCategory.id).where(LedgerCategory.title == title)
        ).first()
        return found is not None

    # ---- locking ------------------------------------------------------------

    @contextmanager
    def writer_lock(self) -> Iterator[None]:
        with self._lock:
            yield


__all__ = ["LedgerStore", "SqlAlchemyStore"]
