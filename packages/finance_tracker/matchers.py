"""Line matching strategies that turn cleaned statement lines into candidates.

Each strategy is a pure function ``(lines, profile) -> list[Candidate]``. The
pipeline runs all of them in ``STRATEGIES`` order and unions the results;
re-matches of the same line are collapsed later by
:func:`finance_tracker.duplicates.dedupe_parsed`.

Strategies, loosest last:

- ``tabular``: a header row naming date/description/amount columns, with rows
  split on the same column gaps.
- ``formatted_statement``: credit-card layouts
  ``TransDate PostDate Description RefNum AcctNum Amount`` and shorter forms.
- ``advanced``: full-date lines and ``CHECK``/``ACH``/``POS``/``ATM``/
  ``WIRE``/``DIRECT DEP`` prefixed lines.
- ``fallback``: loose date ... amount forms.
- ``numeric_scan``: any line carrying a date-shaped and an amount-shaped token.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from .banks import GENERIC, BankProfile
from .models import Candidate

type Strategy = Callable[[Sequence[str], BankProfile], list[Candidate]]

# ---------------------------------------------------------------------------
# Skippable lines
# ---------------------------------------------------------------------------

_SKIP_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        # headers and footers
        r"^\s*page\s+\d+",
        r"^\s*===\s*page\s+\d+\s*===\s*$",
        r"^\s*statement\s+period",
        r"^\s*account\s*(number|#)",
        r"^\s*(beginning|ending)\s+balance",
        r"^\s*total\s+(fees|charges|credits|debits)",
        r"^\s*customer\s+service",
        r"^\s*questions\s+about",
        r"^\s*www\.",
        r"^\s*\d{4}\s+[a-z]+\s+street",
        r"^\s*p\.?\s*o\.?\s+box",
        r"^\s*member\s+fdic",
        r"^\s*equal\s+housing",
        # balances and summaries
        r"^\s*new\s+balance",
        r"^\s*previous\s+balance",
        r"^\s*current\s+balance",
        r"^\s*available\s+balance",
        r"^\s*minimum\s+payment",
        r"^\s*(current\s+)?payment\s+due",
        r"^\s*amount\s+due",
        r"^\s*payments\s+and",
        r"^\s*total\s+credit",
        r"^\s*credit\s+line",
        r"^\s*cash\s+credit",
        r"^\s*portion\s+of\s+credit",
        r"^\s*total\s+purchases",
        r"^\s*total\s+adjustments",
        r"^\s*total\s+.*for\s+this\s+period",
        r"^\s*subtotal",
        r"^\s*purchases\s+and\s+adjustments",
        r"^\s*fees\s+charged",
        r"^\s*interest\s+charged",
        r"^\s*days\s+in\s+billing",
        r"^\s*statement\s+closing",
        r"late\s+payment\s+warning",
        # APR and rewards boilerplate
        r"annual\s+percentage\s+rate",
        r"^\s*(cash\s+back|rewards?)\s+(earned|redeemed|available|summary)",
        # cash advances are not spending
        r"^\s*for\s+cash",
        r"cash\s+advance",
        # dividers and bare numbers
        r"^[\s\-_=+*]{10,}$",
        r"^\s*\d+\s*$",
    )
)

HEADER_INDICATORS: tuple[str, ...] = (
    "date",
    "amount",
    "description",
    "transaction",
    "balance",
    "debit",
    "credit",
    "deposit",
    "withdrawal",
    "payment",
    "charge",
    "fee",
    "payee",
    "memo",
    "reference",
    "check",
    "pos",
    "atm",
    "ach",
    "wire",
    "transfer",
)

_MONEY_RE = re.compile(r"\d\.\d{2}(?!\d)")
_MIN_LINE_LEN = 10


def is_header_line(line: str) -> bool:
    """True for column-title rows and statement banners.

    A keyword combination (two or more indicators, or any indicator with
    ``date``) only counts on a line that carries no money amount, since real
    rows such as ``ATM WITHDRAWAL 100.00`` hit the same words.
    """

    lowered = line.lower()
    if "statement period" in lowered or "account summary" in lowered:
        return True
    if re.match(r"^\s*(account\s*#|page\s*\d+)", lowered):
        return True
    if _MONEY_RE.search(lowered):
        return False
    found = [i for i in HEADER_INDICATORS if i in lowered]
    return len(found) >= 2 or (len(found) >= 1 and "date" in lowered)


def is_skippable_line(line: str) -> bool:
    stripped = line.strip()
    if len(stripped) < _MIN_LINE_LEN or not any(c.isdigit() for c in stripped):
        return True
    if any(p.search(stripped) for p in _SKIP_PATTERNS):
        return True
    return is_header_line(stripped)


def _candidate(
    m: re.Match[str], line_no: int, strategy: str, *, description: str | None = None
) -> Candidate:
    groups = m.groupdict()
    return Candidate(
        description=(description if description is not None else groups["desc"]).strip(),
        amount_text=groups["amount"].strip(),
        date_text=(groups.get("date") or None),
        line_no=line_no,
        strategy=strategy,
    )


# ---------------------------------------------------------------------------
# Tabular
# ---------------------------------------------------------------------------

_COLUMN_SPLIT_RE = re.compile(r"\s{2,}|\t")
_HEADER_SEARCH_LINES = 20
_DESCRIPTION_LABELS: tuple[str, ...] = ("description", "memo", "payee")
_AMOUNT_LABELS: tuple[str, ...] = ("amount", "debit", "credit")


def _column_indices(header: str, profile: BankProfile) -> tuple[int, int, int] | None:
    columns = [c.strip() for c in _COLUMN_SPLIT_RE.split(header.lower())]
    desc_labels = _DESCRIPTION_LABELS + profile.description_columns
    amount_labels = _AMOUNT_LABELS + profile.amount_columns
    date_i = desc_i = amount_i = -1
    for i, col in enumerate(columns):
        if date_i == -1 and "date" in col:
            date_i = i
        elif desc_i == -1 and any(label in col for label in desc_labels):
            desc_i = i
        elif amount_i == -1 and any(label in col for label in amount_labels):
            amount_i = i
    if min(date_i, desc_i, amount_i) < 0:
        return None
    return date_i, desc_i, amount_i


def tabular(lines: Sequence[str], profile: BankProfile = GENERIC) -> list[Candidate]:
    amount_labels = _AMOUNT_LABELS + profile.amount_columns
    header_at = -1
    indices: tuple[int, int, int] | None = None
    for i, line in enumerate(lines[:_HEADER_SEARCH_LINES]):
        lowered = line.lower()
        if "date" in lowered and any(label in lowered for label in amount_labels):
            header_at, indices = i, _column_indices(line, profile)
            break
    if header_at < 0 or indices is None:
        return []

    date_i, desc_i, amount_i = indices
    out: list[Candidate] = []
    for line_no in range(header_at + 1, len(lines)):
        line = lines[line_no].strip()
        if not line or is_skippable_line(line):
            continue
        cells = [c.strip() for c in _COLUMN_SPLIT_RE.split(line)]
        if len(cells) <= max(indices):
            continue
        if not cells[amount_i]:
            continue
        out.append(
            Candidate(
                description=cells[desc_i],
                amount_text=cells[amount_i],
                date_text=cells[date_i] or None,
                line_no=line_no,
                strategy="tabular",
            )
        )
    return out


# ---------------------------------------------------------------------------
# Formatted statement
# ---------------------------------------------------------------------------

_SHORT_DATE = r"\d{2}/\d{2}(?:/\d{2,4})?"
_FORMATTED_AMOUNT = r"(?P<amount>-?\$?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})"
_FORMATTED_DESC = r"(?P<desc>[A-Za-z0-9\s*.\-#\"',/&]+?)"

FORMATTED_PATTERNS: tuple[re.Pattern[str], ...] = (
    # 06/03 06/04 IBI*FABLETICS.COM 844-3225384 CA 4343 7230 28.21
    re.compile(
        rf"^(?P<date>{_SHORT_DATE})\s+(?P<post>{_SHORT_DATE})\s+{_FORMATTED_DESC}"
        rf"\s+(?P<ref>\d{{3,4}})\s+(?P<acct>\d{{4}})\s+{_FORMATTED_AMOUNT}\s*$"
    ),
    re.compile(
        rf"^(?P<date>{_SHORT_DATE})\s+(?P<post>{_SHORT_DATE})\s+{_FORMATTED_DESC}"
        rf"\s+{_FORMATTED_AMOUNT}\s*$"
    ),
    re.compile(rf"^(?P<date>{_SHORT_DATE})\s+{_FORMATTED_DESC}\s+{_FORMATTED_AMOUNT}\s*$"),
)

_DESC_ONLY_PATTERN = re.compile(
    r"^(?P<desc>[A-Za-z0-9\s*.\-#\"',/&]{10,}?)\s+" + _FORMATTED_AMOUNT + r"\s*$"
)
_DATE_LED_RE = re.compile(r"^\s*\d{1,2}/\d{1,2}")


def match_formatted_line(
    line: str, line_no: int, strategy: str = "formatted_statement"
) -> Candidate | None:
    """Match one line against the formatted-statement layouts, longest first."""

    stripped = line.strip()
    for pattern in FORMATTED_PATTERNS:
        m = pattern.match(stripped)
        if m is not None:
            return _candidate(m, line_no, strategy)
    if _DATE_LED_RE.match(stripped):
        return None
    m = _DESC_ONLY_PATTERN.match(stripped)
    if m is not None:
        return _candidate(m, line_no, strategy)
    return None


def formatted_statement(lines: Sequence[str], profile: BankProfile = GENERIC) -> list[Candidate]:
    out: list[Candidate] = []
    for line_no, line in enumerate(lines):
        if not line.strip() or is_skippable_line(line):
            continue
        found = match_formatted_line(line, line_no)
        if found is not None:
            out.append(found)
    return out


# ---------------------------------------------------------------------------
# Advanced
# ---------------------------------------------------------------------------

_FULL_DATE = r"(?P<date>\d{1,2}/\d{1,2}/\d{2,4})"
_SIGNED_AMOUNT = r"(?P<amount>[+-]?\$?\d{1,3}(?:,\d{3})*\.\d{2})"

_CHECK_PATTERN = re.compile(
    rf"^{_FULL_DATE}\s+(?:CHECK|CK)\s+(?P<num>\d+)\s+(?P<payee>.+?)\s+{_SIGNED_AMOUNT}",
    re.IGNORECASE,
)

ADVANCED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"^(?P<date>\d{{2}}/\d{{2}}/\d{{4}})\s+(?P<desc>[A-Z0-9\s]+?)\s+{_SIGNED_AMOUNT}\s*$"),
    re.compile(
        r"^(?P<date>\d{4}-\d{2}-\d{2})\s+(?P<desc>.{10,}?)\s+"
        r"(?P<amount>[+-]?\d{1,3}(?:,\d{3})*\.\d{2})\s*$"
    ),
    re.compile(rf"^{_FULL_DATE}\s+(?P<desc>ACH\s+.+?)\s+{_SIGNED_AMOUNT}", re.IGNORECASE),
    re.compile(rf"^{_FULL_DATE}\s+(?P<desc>POS\s+.+?)\s+{_SIGNED_AMOUNT}", re.IGNORECASE),
    re.compile(rf"^{_FULL_DATE}\s+(?P<desc>ATM\s+.+?)\s+{_SIGNED_AMOUNT}", re.IGNORECASE),
    re.compile(rf"^{_FULL_DATE}\s+(?P<desc>WIRE\s+.+?)\s+{_SIGNED_AMOUNT}", re.IGNORECASE),
    re.compile(
        rf"^{_FULL_DATE}\s+(?P<desc>(?:DIRECT\s+DEP\w*|DD)\s+.+?)\s+{_SIGNED_AMOUNT}",
        re.IGNORECASE,
    ),
)


def advanced(lines: Sequence[str], profile: BankProfile = GENERIC) -> list[Candidate]:
    out: list[Candidate] = []
    for line_no, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or is_skippable_line(stripped):
            continue
        m = _CHECK_PATTERN.match(stripped)
        if m is not None:
            desc = f"CHECK {m.group('num')} {m.group('payee').strip()}"
            out.append(_candidate(m, line_no, "advanced", description=desc))
            continue
        for pattern in ADVANCED_PATTERNS:
            m = pattern.match(stripped)
            if m is not None:
                out.append(_candidate(m, line_no, "advanced"))
                break
    return out


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------

_LOOSE_AMOUNT = r"(?P<amount>[+-]?\$?\d+\.\d{2})"
_MONTH_DATE = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2},?\s+\d{4}"

_DATED_FALLBACKS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"(?P<date>\d{{1,2}}[/-]\d{{1,2}}[/-]\d{{2,4}})\s+(?P<desc>.+?)\s+{_LOOSE_AMOUNT}"),
    re.compile(rf"(?P<date>{_MONTH_DATE})\s+(?P<desc>.+?)\s+{_LOOSE_AMOUNT}", re.IGNORECASE),
    re.compile(rf"(?P<date>\d{{2}}/\d{{2}})\s+(?P<desc>.{{10,}}?)\s+{_LOOSE_AMOUNT}"),
)
_UNDATED_FALLBACKS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?P<desc>.{5,}?)\s+(?P<amount>[+-]?\$?\d{1,3}(?:,\d{3})*\.\d{2})\s*$"),
    re.compile(r"^(?P<desc>.+?)\s+(?P<amount>[+-]?\d+\.\d{2})$"),
)

_ANY_DATE_RE = re.compile(
    rf"(\d{{1,2}}[/-]\d{{1,2}}(?:[/-]\d{{2,4}})?|\d{{4}}-\d{{2}}-\d{{2}}|{_MONTH_DATE})",
    re.IGNORECASE,
)


def fallback(lines: Sequence[str], profile: BankProfile = GENERIC) -> list[Candidate]:
    out: list[Candidate] = []
    for line_no, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or is_skippable_line(stripped):
            continue
        patterns = _DATED_FALLBACKS if _ANY_DATE_RE.search(stripped) else _UNDATED_FALLBACKS
        for pattern in patterns:
            m = pattern.search(stripped)
            if m is not None:
                out.append(_candidate(m, line_no, "fallback"))
                break
    return out


# ---------------------------------------------------------------------------
# Numeric scan
# ---------------------------------------------------------------------------

_SCAN_DATE_RE = re.compile(
    rf"(\d{{1,2}}[/-]\d{{1,2}}[/-]\d{{2,4}}|{_MONTH_DATE})",
    re.IGNORECASE,
)
_SCAN_AMOUNT_RE = re.compile(r"(?<![\w/.,-])[+-]?\$?\d{1,3}(?:,\d{3})*(?:\.\d{2})?(?![\w/.,])")
_WS_RE = re.compile(r"\s+")


def numeric_scan(lines: Sequence[str], profile: BankProfile = GENERIC) -> list[Candidate]:
    """Last resort: a date token, the last amount token after it, the rest is text."""

    out: list[Candidate] = []
    for line_no, line in enumerate(lines):
        stripped = line.strip()
        if not stripped or is_skippable_line(stripped):
            continue
        dm = _SCAN_DATE_RE.search(stripped)
        if dm is None:
            continue
        tokens = [m for m in _SCAN_AMOUNT_RE.finditer(stripped) if m.start() >= dm.end()]
        if not tokens:
            continue
        decimals = [m for m in tokens if "." in m.group(0)]
        am = (decimals or tokens)[-1]
        rest = stripped[: dm.start()] + " " + stripped[dm.end() : am.start()] + " " + stripped[am.end() :]
        out.append(
            Candidate(
                description=_WS_RE.sub(" ", rest).strip(),
                amount_text=am.group(0),
                date_text=dm.group(0),
                line_no=line_no,
                strategy="numeric_scan",
            )
        )
    return out


STRATEGIES: tuple[tuple[str, Strategy], ...] = (
    ("tabular", tabular),
    ("formatted_statement", formatted_statement),
    ("advanced", advanced),
    ("fallback", fallback),
    ("numeric_scan", numeric_scan),
)


__all__ = [
    "ADVANCED_PATTERNS",
    "FORMATTED_PATTERNS",
    "HEADER_INDICATORS",
    "STRATEGIES",
    "Strategy",
    "advanced",
    "fallback",
    "formatted_statement",
    "is_header_line",
    "is_skippable_line",
    "match_formatted_line",
    "numeric_scan",
    "tabular",
]
