"""Row source for tabular transaction imports.

CSV layout (first line is a header and is skipped):
``title, type, value, category``

Mapping rules:
- cells are trimmed on both sides;
- rows with any of the four cells missing or empty are dropped here, so the
  ledger only ever sees complete candidates;
- extra trailing columns are ignored;
- ``value`` stays a string; parsing is a ledger rule
  (see :func:`financial_ledger.validation.parse_value`).
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator
from os import PathLike
from pathlib import Path
from typing import IO

from ..logging_setup import get_logger
from ..models import TransactionRequest

logger = get_logger("financial_ledger.ingest.csv_rows")

_FIELDS = ("title", "type", "value", "category")


def to_requests(rows: Iterable[list[str]]) -> Iterator[TransactionRequest]:
    """Convert already-tokenized data rows (header excluded) to requests."""

    for line_no, row in enumerate(rows, start=2):
        cells = [c.strip() for c in row[: len(_FIELDS)]]
        if len(cells) < len(_FIELDS) or not all(cells):
            logger.debug("dropping incomplete row on line %d", line_no)
            continue
        yield TransactionRequest(**dict(zip(_FIELDS, cells, strict=True)))


def read_rows(stream: IO[str]) -> Iterator[TransactionRequest]:
    """Lazily yield one request per complete data row of ``stream``."""

    reader = csv.reader(stream)
    if next(reader, None) is None:
        return
    yield from to_requests(reader)


def read_csv_file(csv_path: str | PathLike[str]) -> list[TransactionRequest]:
    """Read a CSV export from disk and return its complete rows."""

    p = Path(csv_path)
    with p.open(encoding="utf-8", newline="") as f:
        return list(read_rows(f))


__all__ = ["read_csv_file", "read_rows", "to_requests"]
