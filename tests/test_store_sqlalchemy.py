from __future__ import annotations

from decimal import Decimal

import pytest
from db.client import get_session_factory, session_scope
from db.models.ledger import LedgerCategory
from sqlalchemy import func, select

from financial_ledger.categories import CategoryResolver
from financial_ledger.errors import StoreError, UniqueConstraintViolation
from financial_ledger.models import NewTransaction, TransactionType
from financial_ledger.store import SqlAlchemyStore


@pytest.fixture()
def store(sqlite_url: str) -> SqlAlchemyStore:
    return SqlAlchemyStore(get_session_factory(database_url=sqlite_url))


def test_category_round_trip(store: SqlAlchemyStore) -> None:
    saved = store.save_category("Food")

    found = store.find_categories_by_titles(["Food", "Missing"])

    assert [c.id for c in found] == [saved.id]
    assert saved.created_at is not None


def test_duplicate_title_maps_to_unique_violation(store: SqlAlchemyStore) -> None:
    store.save_category("Food")

    with pytest.raises(UniqueConstraintViolation) as excinfo:
        store.save_category("Food")

    assert excinfo.value.title == "Food"


def test_resolver_recovers_from_a_duplicate_insert(sqlite_url: str, store: SqlAlchemyStore) -> None:
    # Another writer inserts the title after both of our lookups ran.
    with session_scope(database_url=sqlite_url) as s:
        s.add(LedgerCategory(title="Travel"))

    class _StaleLookupStore(SqlAlchemyStore):
        misses = 2

        def find_categories_by_titles(self, titles):
            if self.misses:
                self.misses -= 1
                return []
            return super().find_categories_by_titles(titles)

    stale = _StaleLookupStore(get_session_factory(database_url=sqlite_url))
    resolved = CategoryResolver(stale, max_workers=1).resolve_or_create(["Travel"])

    assert resolved["Travel"].title == "Travel"
    with session_scope(database_url=sqlite_url) as s:
        count = s.execute(select(func.count()).select_from(LedgerCategory)).scalar_one()
    assert count == 1


def test_bulk_save_returns_rows_in_input_order(store: SqlAlchemyStore) -> None:
    food = store.save_category("Food")
    news = [
        NewTransaction(title=f"t{i}", value=Decimal(f"{i}.50"), type=TransactionType.INCOME,
                       category_id=food.id)
        for i in range(1, 4)
    ]

    saved = store.save_transactions(news)

    assert [t.title for t in saved] == ["t1", "t2", "t3"]
    assert all(t.category is not None and t.category.title == "Food" for t in saved)
    assert sorted(t.value for t in store.find_transactions()) == [
        Decimal("1.50"),
        Decimal("2.50"),
        Decimal("3.50"),
    ]


def test_filters_by_type_and_deletes(store: SqlAlchemyStore) -> None:
    cat = store.save_category("Misc")
    income = store.save_transaction(
        NewTransaction(title="in", value=Decimal("10.00"), type=TransactionType.INCOME,
                       category_id=cat.id)
    )
    outcome = store.save_transaction(
        NewTransaction(title="out", value=Decimal("4.00"), type=TransactionType.OUTCOME,
                       category_id=cat.id)
    )

    assert [t.id for t in store.find_transactions(type=TransactionType.OUTCOME)] == [outcome.id]
    assert store.get_transaction(income.id).type is TransactionType.INCOME

    store.delete_transaction(outcome.id)

    assert store.get_transaction(outcome.id) is None


def test_unknown_category_reference_is_a_store_error(store: SqlAlchemyStore) -> None:
    with pytest.raises(StoreError):
        store.save_transaction(
            NewTransaction(title="x", value=Decimal("1.00"), type=TransactionType.INCOME,
                           category_id="missing")
        )


def test_sixteen_digit_amount_round_trips_exactly(store: SqlAlchemyStore) -> None:
    cat = store.save_category("Big")
    saved = store.save_transaction(
        NewTransaction(title="max", value=Decimal("9999999999999999.99"),
                       type=TransactionType.INCOME, category_id=cat.id)
    )

    assert store.get_transaction(saved.id).value == Decimal("9999999999999999.99")
    assert [t.value for t in store.find_transactions()] == [Decimal("9999999999999999.99")]
