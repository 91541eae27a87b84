from __future__ import annotations

import pytest

from financial_ledger.config import (
    DEFAULT_CATEGORY_WORKERS,
    MAX_CATEGORY_WORKERS,
    resolve_category_workers,
    resolve_database_url,
    resolve_flush_size,
)


def test_category_workers_default_override_and_cap(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_category_workers() == DEFAULT_CATEGORY_WORKERS
    assert resolve_category_workers(2) == 2
    assert resolve_category_workers(500) == MAX_CATEGORY_WORKERS

    monkeypatch.setenv("LEDGER_CATEGORY_MAX_WORKERS", "7")
    assert resolve_category_workers() == 7

    monkeypatch.setenv("LEDGER_CATEGORY_MAX_WORKERS", "lots")
    assert resolve_category_workers() == DEFAULT_CATEGORY_WORKERS


def test_flush_size(monkeypatch: pytest.MonkeyPatch) -> None:
    assert resolve_flush_size() is None
    assert resolve_flush_size(0) is None

    monkeypatch.setenv("LEDGER_IMPORT_FLUSH_SIZE", "50")
    assert resolve_flush_size() == 50


def test_database_url(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(RuntimeError):
        resolve_database_url()

    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///x.db")
    assert resolve_database_url() == "sqlite+pysqlite:///x.db"
    assert resolve_database_url("postgresql://h/db") == "postgresql://h/db"
