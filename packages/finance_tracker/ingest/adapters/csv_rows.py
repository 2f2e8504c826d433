"""Adapter for generic bank CSV exports.

The first non-blank row is the header; see :mod:`.columns` for how the date,
description and amount columns are located. Quoted cells (``"1,234.56"``,
``"Coffee, Large"``) are handled by :mod:`csv`.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator

from ...models import Candidate
from .columns import map_columns, rows_to_candidates


def read_rows(text: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text), skipinitialspace=True)
    return [row for row in reader if any(cell.strip() for cell in row)]


def to_candidates(text: str) -> Iterator[Candidate]:
    """Yield candidates for every data row of a CSV document."""

    rows = read_rows(text)
    if not rows:
        return
    columns = map_columns(rows[0])
    yield from rows_to_candidates(rows[1:], columns, strategy="csv")


__all__ = ["read_rows", "to_candidates"]
