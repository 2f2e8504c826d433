"""Header matching shared by the CSV and XLSX adapters.

Bank exports name their columns inconsistently ("Date", "Trans Date",
"Transaction Date"; "Amount" vs. separate "Debit"/"Credit"). A header matches
a wanted name when either contains the other. Missing columns fall back to
the first column, so a malformed export yields rows that fail date or amount
parsing and get dropped rather than an exception.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from ...models import Candidate

DATE_COLUMN_NAMES: tuple[str, ...] = ("date", "transaction date", "trans date")
DESCRIPTION_COLUMN_NAMES: tuple[str, ...] = (
    "description",
    "memo",
    "details",
    "transaction details",
)
AMOUNT_COLUMN_NAMES: tuple[str, ...] = ("amount", "debit", "credit", "transaction amount")

_MIN_CELLS = 3


def normalize_header(cell: object) -> str:
    return str(cell if cell is not None else "").strip().strip('"').strip().lower()


def find_column_index(headers: Sequence[str], names: Sequence[str], default: int = 0) -> int:
    """Index of the first header matching a name, trying names in order."""

    for name in names:
        for i, header in enumerate(headers):
            if header and (name in header or header in name):
                return i
    return default


def _exact_or_contains(headers: Sequence[str], word: str) -> int | None:
    for i, header in enumerate(headers):
        if header and word in header:
            return i
    return None


@dataclass(frozen=True, slots=True)
class ColumnMap:
    date: int
    description: int
    amount: int
    # Set when the export splits money out and money in into two columns.
    debit: int | None = None
    credit: int | None = None

    @property
    def split_amounts(self) -> bool:
        return self.debit is not None and self.credit is not None


def map_columns(headers: Sequence[str]) -> ColumnMap:
    normalized = [normalize_header(h) for h in headers]
    date_i = find_column_index(normalized, DATE_COLUMN_NAMES)
    desc_i = find_column_index(normalized, DESCRIPTION_COLUMN_NAMES)
    amount_i = find_column_index(normalized, AMOUNT_COLUMN_NAMES)
    has_amount = _exact_or_contains(normalized, "amount") is not None
    debit_i = _exact_or_contains(normalized, "debit")
    credit_i = _exact_or_contains(normalized, "credit")
    if not has_amount and debit_i is not None and credit_i is not None and debit_i != credit_i:
        return ColumnMap(date_i, desc_i, debit_i, debit=debit_i, credit=credit_i)
    return ColumnMap(date_i, desc_i, amount_i)


def _cell(row: Sequence[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def _split_amount(row: Sequence[str], columns: ColumnMap) -> str:
    debit = _cell(row, columns.debit) if columns.debit is not None else ""
    credit = _cell(row, columns.credit) if columns.credit is not None else ""
    if debit:
        return "-" + debit.lstrip("-")
    return credit


def rows_to_candidates(
    rows: Iterable[Sequence[str]], columns: ColumnMap, *, strategy: str
) -> Iterator[Candidate]:
    """Yield one candidate per data row. ``rows`` excludes the header row.

    Rows with fewer than three cells are skipped. Empty cells fall back to
    the first three columns in order (date, description, amount).
    """

    for line_no, row in enumerate(rows, start=1):
        if len(row) < _MIN_CELLS:
            continue
        date_text = _cell(row, columns.date) or _cell(row, 0)
        description = _cell(row, columns.description) or _cell(row, 1)
        if columns.split_amounts:
            amount_text = _split_amount(row, columns)
        else:
            amount_text = _cell(row, columns.amount) or _cell(row, 2)
        if not amount_text:
            continue
        yield Candidate(
            description=description,
            amount_text=amount_text,
            date_text=date_text or None,
            line_no=line_no,
            strategy=strategy,
        )


__all__ = [
    "AMOUNT_COLUMN_NAMES",
    "DATE_COLUMN_NAMES",
    "DESCRIPTION_COLUMN_NAMES",
    "ColumnMap",
    "find_column_index",
    "map_columns",
    "normalize_header",
    "rows_to_candidates",
]
