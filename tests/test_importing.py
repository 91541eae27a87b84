from __future__ import annotations

import threading
from decimal import Decimal

import pytest

from financial_ledger.balance import compute_balance
from financial_ledger.categories import CategoryResolver
from financial_ledger.errors import BatchImportError, ImportCancelled
from financial_ledger.importing import BulkImportCoordinator, ImportReport
from financial_ledger.models import (
    Rejection,
    RejectionReason,
    Transaction,
    TransactionRequest,
)
from tests.helpers.memory_store import InMemoryStore


def _row(type_: str, value: str, category: str = "General", title: str = "row") -> TransactionRequest:
    return TransactionRequest(title=title, value=value, type=type_, category=category)


def _coordinator(store: InMemoryStore, **kwargs) -> BulkImportCoordinator:
    return BulkImportCoordinator(store, categories=CategoryResolver(store, max_workers=4), **kwargs)


def test_rows_are_judged_in_order_against_a_running_balance(memory_store: InMemoryStore) -> None:
    memory_store.seed(("income", "80"))
    rows = [_row("outcome", "100"), _row("income", "50"), _row("outcome", "40")]

    results = _coordinator(memory_store).import_batch(rows)

    assert isinstance(results[0], Rejection)
    assert results[0].reason is RejectionReason.INSUFFICIENT_FUNDS
    assert isinstance(results[1], Transaction) and results[1].value == Decimal("50.00")
    assert isinstance(results[2], Transaction) and results[2].value == Decimal("40.00")
    assert compute_balance(memory_store.transactions).total == Decimal("90.00")


def test_individually_affordable_outcomes_cannot_overdraw_together(
    memory_store: InMemoryStore,
) -> None:
    memory_store.seed(("income", "100"))

    results = _coordinator(memory_store).import_batch(
        [_row("outcome", "60"), _row("outcome", "60")]
    )

    assert isinstance(results[0], Transaction)
    assert isinstance(results[1], Rejection)
    assert compute_balance(memory_store.transactions).total == Decimal("40.00")


def test_empty_batch_returns_empty_list(memory_store: InMemoryStore) -> None:
    assert _coordinator(memory_store).import_batch([]) == []
    assert memory_store.save_transactions_calls == []


def test_one_result_per_row_in_input_order(memory_store: InMemoryStore) -> None:
    rows = [
        _row("income", "10", "Salary", "a"),
        _row("income", "abc", "Salary", "b"),
        TransactionRequest(title="c", value="1", type="income"),
        _row("refund", "5", "Salary", "d"),
        _row("outcome", "4", "Food", "e"),
    ]

    results = _coordinator(memory_store).import_batch(rows)

    assert len(results) == len(rows)
    assert [type(r).__name__ for r in results] == [
        "Transaction",
        "Rejection",
        "Rejection",
        "Rejection",
        "Transaction",
    ]
    assert [r.reason for r in results if isinstance(r, Rejection)] == [
        RejectionReason.INVALID_VALUE,
        RejectionReason.MISSING_FIELDS,
        RejectionReason.INVALID_TYPE,
    ]
    assert [r.title for r in results if isinstance(r, Transaction)] == ["a", "e"]


def test_oversized_value_rejects_only_its_own_row(memory_store: InMemoryStore) -> None:
    rows = [_row("income", "10", title="a"), _row("income", "1e30", title="b"),
            _row("income", "5", title="c")]

    results = _coordinator(memory_store).import_batch(rows)

    assert isinstance(results[0], Transaction)
    assert isinstance(results[1], Rejection)
    assert results[1].reason is RejectionReason.INVALID_VALUE
    assert isinstance(results[2], Transaction)
    assert compute_balance(memory_store.transactions).total == Decimal("15.00")


def test_categories_are_resolved_once_per_distinct_title(memory_store: InMemoryStore) -> None:
    rows = [_row("income", "10", "Food"), _row("income", "10", "Food"), _row("income", "1", "Rent")]

    results = _coordinator(memory_store).import_batch(rows)

    assert memory_store.titles() == ["Food", "Rent"]
    assert sorted(memory_store.save_category_calls) == ["Food", "Rent"]
    assert results[0].category_id == results[1].category_id
    assert results[0].category.title == "Food"


def test_shape_invalid_rows_never_create_categories(memory_store: InMemoryStore) -> None:
    _coordinator(memory_store).import_batch([_row("income", "0", "Ghost")])

    assert "Ghost" not in memory_store.categories


def test_accepted_rows_are_written_in_one_bulk_call(memory_store: InMemoryStore) -> None:
    rows = [_row("income", str(i + 1)) for i in range(5)]

    _coordinator(memory_store).import_batch(rows)

    assert memory_store.save_transactions_calls == [5]


def test_flush_size_splits_bulk_writes(memory_store: InMemoryStore) -> None:
    rows = [_row("income", str(i + 1)) for i in range(5)]

    _coordinator(memory_store, flush_size=2).import_batch(rows)

    assert memory_store.save_transactions_calls == [2, 2, 1]


def test_flush_failure_reports_rows_already_final(memory_store: InMemoryStore) -> None:
    memory_store.fail_save_transactions_on_call = 2
    rows = [
        _row("income", "1", title="a"),
        _row("income", "abc", title="b"),
        _row("income", "2", title="c"),
        _row("income", "3", title="d"),
    ]

    with pytest.raises(BatchImportError) as excinfo:
        _coordinator(memory_store, flush_size=1).import_batch(rows)

    results = excinfo.value.results
    assert len(results) == 2
    assert isinstance(results[0], Transaction) and results[0].title == "a"
    assert isinstance(results[1], Rejection)
    assert [t.title for t in memory_store.transactions] == ["a"]


def test_category_phase_failure_aborts_before_any_write(memory_store: InMemoryStore) -> None:
    memory_store.fail_category_titles = {"Broken"}

    with pytest.raises(BatchImportError) as excinfo:
        _coordinator(memory_store).import_batch([_row("income", "1", "Broken")])

    assert excinfo.value.results == []
    assert memory_store.transactions == []


def test_balance_snapshot_failure_aborts(memory_store: InMemoryStore) -> None:
    memory_store.fail_find_transactions = True

    with pytest.raises(BatchImportError):
        _coordinator(memory_store).import_batch([_row("income", "1")])


def test_cancellation_flushes_admitted_rows_and_stops(memory_store: InMemoryStore) -> None:
    cancel = threading.Event()

    def _rows():
        yield _row("income", "1", title="a")
        yield _row("income", "2", title="b")

    coordinator = _coordinator(memory_store)
    cancel.set()
    with pytest.raises(ImportCancelled) as excinfo:
        coordinator.import_batch(_rows(), cancel=cancel)

    assert excinfo.value.results == []
    assert excinfo.value.total_rows == 2
    assert memory_store.transactions == []


class _CancelAfter(threading.Event):
    """Reports cancellation once ``checks`` rows have been let through."""

    def __init__(self, checks: int) -> None:
        super().__init__()
        self._left = checks

    def is_set(self) -> bool:
        self._left -= 1
        return self._left < 0


def test_cancellation_mid_batch_keeps_the_processed_prefix(memory_store: InMemoryStore) -> None:
    rows = [
        _row("income", "1", title="a"),
        _row("outcome", "99", title="b"),
        _row("income", "3", title="c"),
    ]

    with pytest.raises(ImportCancelled) as excinfo:
        _coordinator(memory_store).import_batch(rows, cancel=_CancelAfter(2))

    results = excinfo.value.results
    assert isinstance(results[0], Transaction) and results[0].title == "a"
    assert isinstance(results[1], Rejection)
    assert len(results) == 2
    assert [t.title for t in memory_store.transactions] == ["a"]


def test_report_partitions_results(memory_store: InMemoryStore) -> None:
    results = _coordinator(memory_store).import_batch(
        [_row("income", "5"), _row("outcome", "50"), _row("outcome", "5")]
    )

    report = ImportReport.from_results(results)

    assert [i for i, _ in report.accepted] == [0, 2]
    assert [i for i, _ in report.rejected] == [1]
    assert compute_balance(memory_store.transactions).total == Decimal("0.00")
