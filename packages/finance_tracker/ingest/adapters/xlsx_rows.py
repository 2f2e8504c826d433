"""Adapter for ``.xlsx`` workbooks exported by online banking.

Only the active sheet is read. Cells are turned into text so that the same
column rules as the CSV adapter apply: dates become ``YYYY-MM-DD``, numbers
keep their repr, blanks become empty strings.
"""

from __future__ import annotations

import datetime as _dt
import io
from collections.abc import Iterator
from decimal import Decimal

from openpyxl import load_workbook

from ...errors import InputError
from ...models import Candidate
from .columns import map_columns, rows_to_candidates


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, _dt.datetime):
        return value.date().isoformat()
    if isinstance(value, _dt.date):
        return value.isoformat()
    if isinstance(value, float):
        return str(Decimal(repr(value)))
    return str(value).strip()


def read_rows(content: bytes) -> list[list[str]]:
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:  # openpyxl raises zipfile/KeyError/InvalidFileException variants
        raise InputError(
            "Could not read the Excel workbook. Please upload a valid .xlsx or CSV file."
        ) from e
    try:
        ws = wb.active
        if ws is None:
            return []
        rows: list[list[str]] = []
        for values in ws.iter_rows(values_only=True):
            row = [_cell_text(v) for v in values]
            if any(row):
                rows.append(row)
        return rows
    finally:
        wb.close()


def to_candidates(content: bytes) -> Iterator[Candidate]:
    rows = read_rows(content)
    if not rows:
        return
    columns = map_columns(rows[0])
    yield from rows_to_candidates(rows[1:], columns, strategy="xlsx")


__all__ = ["read_rows", "to_candidates"]
