"""Amount, date and description normalization.

Statement text arrives with every flavor of money and date formatting (OCR
noise included). These helpers turn raw tokens into ``Decimal`` amounts and
``datetime.date`` values, returning ``None`` instead of raising when a token
cannot be read so that one bad line never aborts a whole statement.
"""

from __future__ import annotations

import re
from collections import Counter
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dateutil import parser as date_parser

from .corrections import DEFAULT_CORRECTIONS, CorrectionTable
from .models import quantize_cents

# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_DASHES_RE = re.compile(r"[\u2010-\u2015\u2212]")
_EURO_GROUPED_RE = re.compile(r"\d{1,3}(?:\.\d{3})+,\d{2}")
_EURO_SIMPLE_RE = re.compile(r"\d+,\d{2}")
_US_GROUPED_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?:\.\d+)?")
_PLAIN_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")


def _strip_markers(s: str) -> tuple[str, bool]:
    """Strip sign, currency and parenthesis markers, returning ``(rest, negative)``."""

    negative = False
    # Iterate until stable so any ordering such as "-($1,234.56)" or "$-5" works.
    while True:
        changed = False
        if s.startswith(("=", "+")):
            s = s[1:].lstrip()
            changed = True
        elif s.startswith("-"):
            negative = True
            s = s[1:].lstrip()
            changed = True
        if s.startswith("$"):
            s = s[1:].lstrip()
            changed = True
        if s.startswith("(") and s.endswith(")") and len(s) >= 2:
            negative = True
            s = s[1:-1].strip()
            changed = True
        if s.endswith("-"):
            negative = True
            s = s[:-1].rstrip()
            changed = True
        if not changed:
            return s, negative


def _restore_decimal_point(digits: str) -> str:
    # "5" -> "5.00", "47" -> "0.47", "2821" -> "28.21"
    if len(digits) == 1:
        return f"{digits}.00"
    return f"{digits[:-2] or '0'}.{digits[-2:]}"


def parse_amount(
    raw: str | None,
    table: CorrectionTable = DEFAULT_CORRECTIONS,
    *,
    reconstruct_decimal: bool = True,
) -> Decimal | None:
    """Parse a money token into a signed ``Decimal`` quantized to cents.

    Handles ``$``/``+``/``=`` prefixes, parentheses and leading or trailing
    minus signs (any dash variant), US thousands separators, European
    ``1.234,56`` and ``741,25`` forms, and garbled OCR tokens from ``table``.

    When ``reconstruct_decimal`` is true a bare integer is read as an amount
    whose decimal point was lost (``"1234"`` → ``12.34``). Thousands-separated
    integers (``"1,234"``) are always whole dollars.

    Returns ``None`` for unreadable, non-finite or zero amounts.
    """

    if raw is None:
        return None
    s = _DASHES_RE.sub("-", str(raw)).strip()
    if not s:
        return None
    s = table.garbled_amounts.get(s, s)

    s, negative = _strip_markers(s)
    s = table.garbled_amounts.get(s, s).replace(" ", "")
    if not s:
        return None

    whole_dollars = False
    if _EURO_GROUPED_RE.fullmatch(s):
        s = s.replace(".", "").replace(",", ".")
    elif _EURO_SIMPLE_RE.fullmatch(s):
        s = s.replace(",", ".")
    elif _US_GROUPED_RE.fullmatch(s):
        whole_dollars = "." not in s
        s = s.replace(",", "")
    else:
        s = s.replace(",", "")

    if not _PLAIN_NUMBER_RE.fullmatch(s):
        return None
    if reconstruct_decimal and not whole_dollars and s.isdigit():
        s = _restore_decimal_point(s)

    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    value = quantize_cents(value)
    if value == 0:
        return None
    return -value if negative else value


def format_amount(value: Decimal) -> str:
    """Render an amount with exactly two decimals and a leading minus if negative."""

    return f"{quantize_cents(value):.2f}"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_PIVOT = 50
_MONTHS = {
    m: i
    for i, names in enumerate(
        (
            ("jan", "january"),
            ("feb", "february"),
            ("mar", "march"),
            ("apr", "april"),
            ("may",),
            ("jun", "june"),
            ("jul", "july"),
            ("aug", "august"),
            ("sep", "sept", "september"),
            ("oct", "october"),
            ("nov", "november"),
            ("dec", "december"),
        ),
        start=1,
    )
    for m in names
}

_MDY_RE = re.compile(r"(?<!\d)(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})(?!\d)")
_ISO_RE = re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)")
_MONTH_NAME_RE = re.compile(r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2}),?\s+(\d{4})\b")
_MONTH_DAY_RE = re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})(?![\d/])")


def _expand_year(yy: int, today: date) -> int:
    century = today.year // 100 * 100
    return century - 100 + yy if yy > _PIVOT else century + yy


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(
    raw: str | None,
    *,
    default_year: int | None = None,
    today: date | None = None,
) -> date | None:
    """Parse a statement date token.

    Formats are tried in order: ``MM/DD/YYYY`` or ``MM/DD/YY`` (``-`` also
    accepted; two-digit years above 50 belong to the previous century),
    ``YYYY-MM-DD``, ``DD/MM/YYYY`` when the month/day order is impossible,
    ``Mon DD, YYYY``, bare ``MM/DD`` when ``default_year`` is given, and
    finally a generic :mod:`dateutil` parse. Returns ``None`` on failure.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None
    today = today or date.today()

    m = _ISO_RE.search(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _MDY_RE.search(s)
    if m:
        first, second, year_s = int(m.group(1)), int(m.group(2)), m.group(3)
        year = int(year_s) if len(year_s) == 4 else _expand_year(int(year_s), today)
        parsed = _safe_date(year, first, second)
        if parsed is None and len(year_s) == 4:
            # DD/MM/YYYY
            parsed = _safe_date(year, second, first)
        return parsed

    m = _MONTH_NAME_RE.search(s)
    if m:
        month = _MONTHS.get(m.group(1).lower())
        if month is not None:
            return _safe_date(int(m.group(3)), month, int(m.group(2)))

    if default_year is not None:
        m = _MONTH_DAY_RE.fullmatch(s)
        if m:
            return _safe_date(default_year, int(m.group(1)), int(m.group(2)))

    try:
        return date_parser.parse(s, default=datetime(today.year, 1, 1)).date()
    except (ValueError, OverflowError):
        return None


_YEAR_IN_DATE_RE = re.compile(
    r"(?<!\d)\d{1,2}/\d{1,2}/(\d{4})(?!\d)"
    r"|(?<!\d)(\d{4})-\d{1,2}-\d{1,2}(?!\d)"
    r"|\b[A-Za-z]{3,9}\.?\s+\d{1,2},?\s+(\d{4})\b"
)


def infer_statement_year(text: str, today: date | None = None) -> int:
    """Return the most frequent plausible year among full dates in ``text``.

    Only years from 1990 through next year count; ties go to the latest year.
    Falls back to ``today.year`` when the text carries no full date.
    """

    today = today or date.today()
    counts: Counter[int] = Counter()
    for m in _YEAR_IN_DATE_RE.finditer(text):
        year = int(next(g for g in m.groups() if g))
        if 1990 <= year <= today.year + 1:
            counts[year] += 1
    if not counts:
        return today.year
    return max(counts.items(), key=lambda kv: (kv[1], kv[0]))[0]


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

_DESCRIPTION_PREFIXES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^POS\s+",
        r"^ATM\s+",
        r"^ACH\s+",
        r"^CHECK\s+\d+\s+",
        r"^DEBIT\s+",
        r"^CREDIT\s+",
        r"^ONLINE\s+",
        r"^RECURRING\s+",
        r"^\d{2}/\d{2}\s+",
        r"^\*+\s*",
        r"^-+\s*",
    )
)
_WORD_START_RE = re.compile(r"\b\w")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WS_RE = re.compile(r"\s+")


def clean_description(description: str) -> str:
    """Collapse whitespace, drop low-value prefixes and title-case the words."""

    s = _WS_RE.sub(" ", description).strip()
    for prefix in _DESCRIPTION_PREFIXES:
        s = prefix.sub("", s)
    s = _WORD_START_RE.sub(lambda m: m.group(0).upper(), s.lower())
    return s.strip()


def normalize_description(description: str) -> str:
    """Lowercase ``description`` and keep only letters, digits and single spaces."""

    s = _NON_ALNUM_RE.sub("", description.lower())
    return _WS_RE.sub(" ", s).strip()


__all__ = [
    "clean_description",
    "format_amount",
    "infer_statement_year",
    "normalize_description",
    "parse_amount",
    "parse_date",
]
