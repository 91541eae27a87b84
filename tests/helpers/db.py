"""DB helpers for tests: bootstrap a temporary SQLite ledger database."""

from __future__ import annotations

import os
from pathlib import Path

from db import metadata
from db.client import get_engine
from sqlalchemy import inspect


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default), which the
    threaded category phase relies on.
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    metadata.create_all(bind=engine)
    _assert_ledger_tables(url)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def _assert_ledger_tables(database_url: str) -> None:
    """Quick sanity check: both ledger tables exist with their ORM columns."""

    insp = inspect(get_engine(database_url=database_url))
    for table in metadata.sorted_tables:
        got = {c["name"] for c in insp.get_columns(table.name)}
        expected = {c.name for c in table.columns}
        assert got == expected, f"{table.name} schema drift: {expected ^ got}"
