"""Environment-driven settings for the ledger.

The CLI loads a local ``.env`` (``python-dotenv``) before any of these helpers
run; library callers may pass explicit values instead and never touch the
environment.

Variables
---------
- ``DATABASE_URL``: SQLAlchemy URL of the ledger database.
- ``LEDGER_CATEGORY_MAX_WORKERS``: concurrency of the import category phase.
- ``LEDGER_IMPORT_FLUSH_SIZE``: accepted rows per bulk write during import.
- ``LEDGER_LOG_LEVEL``: read by :mod:`financial_ledger.logging_setup`.
"""

from __future__ import annotations

import os

DEFAULT_CATEGORY_WORKERS = 4
MAX_CATEGORY_WORKERS = 32


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


def resolve_database_url(override: str | None = None) -> str:
    url = override or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set; pass --database-url or set it in .env")
    return url


def resolve_category_workers(override: int | None = None) -> int:
    """Resolve the category-phase worker count.

    Honors ``override`` first, then ``LEDGER_CATEGORY_MAX_WORKERS``; non-positive
    or unparsable values fall back to the default. Capped at 32.
    """

    value = override if override is not None else _env_int("LEDGER_CATEGORY_MAX_WORKERS")
    if value is None or value <= 0:
        return DEFAULT_CATEGORY_WORKERS
    return min(value, MAX_CATEGORY_WORKERS)


def resolve_flush_size(override: int | None = None) -> int | None:
    """Accepted rows per bulk write; ``None`` means a single flush at the end."""

    value = override if override is not None else _env_int("LEDGER_IMPORT_FLUSH_SIZE")
    if value is None or value <= 0:
        return None
    return value


__all__ = [
    "DEFAULT_CATEGORY_WORKERS",
    "MAX_CATEGORY_WORKERS",
    "resolve_category_workers",
    "resolve_database_url",
    "resolve_flush_size",
]
