"""Pytest configuration shared by the ledger tests.

Makes the workspace packages importable without an install (``packages/`` for
``financial_ledger``, ``libs/db/src`` for ``db``, the repo root for
``tests.helpers``) and keeps every test hermetic: environment settings are
cleared and cached SQLAlchemy engines are disposed after each test.
"""

# ruff: noqa: E402, I001
from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PATHS = [_ROOT / "packages", _ROOT / "libs" / "db" / "src", _ROOT]
sys.path[:0] = [str(p) for p in _PATHS if str(p) not in sys.path]

from db.client import dispose_engines

from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.memory_store import InMemoryStore

_LEDGER_ENV = (
    "DATABASE_URL",
    "LEDGER_CATEGORY_MAX_WORKERS",
    "LEDGER_IMPORT_FLUSH_SIZE",
    "LEDGER_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start each test without ledger settings inherited from the shell."""

    for name in _LEDGER_ENV:
        monkeypatch.delenv(name, raising=False)
    yield
    dispose_engines()


@pytest.fixture()
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def sqlite_url(tmp_path: Path) -> str:
    """File-backed SQLite database with the ledger schema already created."""

    return bootstrap_sqlite_db(tmp_path / "ledger.db")
