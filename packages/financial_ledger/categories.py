"""Idempotent get-or-create over category titles.

Titles are case-sensitive and unique in the store. Creation of any single
title is serialized through a per-title lock held by the resolver, and the
store's unique index is the final arbiter across processes: a
:class:`~financial_ledger.errors.UniqueConstraintViolation` means another
writer won the race, so the resolver re-reads the row and carries on.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from .config import resolve_category_workers
from .errors import StoreError, UniqueConstraintViolation
from .logging_setup import get_logger
from .models import Category
from .pmap import p_map
from .store import LedgerStore

logger = get_logger("financial_ledger.categories")


class CategoryResolver:
    """Resolve category titles to stored :class:`Category` records.

    Parameters
    ----------
    store:
        Persistence collaborator; never resolved from global state.
    max_workers:
        Upper bound on concurrent ``save_category`` calls when a batch
        introduces several new titles. Defaults to
        ``LEDGER_CATEGORY_MAX_WORKERS`` (see :mod:`financial_ledger.config`).
    """

    def __init__(self, store: LedgerStore, *, max_workers: int | None = None) -> None:
        self._store = store
        self._max_workers = resolve_category_workers(max_workers)
        self._guard = threading.Lock()
        self._title_locks: dict[str, threading.Lock] = {}

    def resolve_or_create(self, titles: Iterable[str]) -> dict[str, Category]:
        """Return exactly one entry per distinct input title.

        Existing categories are found with a single lookup; the remaining
        titles are created with bounded parallelism.
        """

        wanted = list(dict.fromkeys(titles))
        for title in wanted:
            if not title or not title.strip():
                raise ValueError("category title must be non-empty")
        if not wanted:
            return {}

        found = {c.title: c for c in self._store.find_categories_by_titles(wanted)}
        missing = [t for t in wanted if t not in found]
        if missing:
            workers = min(self._max_workers, len(missing))
            if workers == 1:
                created = [self._create_one(t) for t in missing]
            else:
                created = p_map(
                    missing,
                    self._create_one,
                    concurrency=workers,
                    thread_name_prefix="ledger-category",
                )
            found.update(zip(missing, created, strict=True))
            logger.info("created %d new categor(y/ies) out of %d requested", len(missing), len(wanted))

        return {t: found[t] for t in wanted}

    def resolve_one(self, title: str) -> Category:
        return self.resolve_or_create([title])[title]

    def _lock_for(self, title: str) -> threading.Lock:
        with self._guard:
            lock = self._title_locks.get(title)
            if lock is None:
                lock = self._title_locks[title] = threading.Lock()
            return lock

    def _lookup(self, title: str) -> Category | None:
        rows = self._store.find_categories_by_titles([title])
        return next((c for c in rows if c.title == title), None)

    def _create_one(self, title: str) -> Category:
        with self._lock_for(title):
            # A caller holding this lock before us may already have created it.
            existing = self._lookup(title)
            if existing is not None:
                return existing
            try:
                return self._store.save_category(title)
            except UniqueConstraintViolation:
                logger.warning("category %r created concurrently; re-reading", title)
                existing = self._lookup(title)
                if existing is None:
                    raise StoreError(
                        f"category {title!r} reported as duplicate but not found on re-lookup"
                    ) from None
                return existing


__all__ = ["CategoryResolver"]
