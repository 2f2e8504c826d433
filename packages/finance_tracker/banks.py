"""Bank-format detection, statement section tracking and bank line parsing.

``identify_bank`` picks a :class:`BankProfile` from the statement text. A
profile carries the column labels that bank prints and, for layouts that
split a statement into titled sections (credits vs. purchases), the header
phrases a :class:`SectionTracker` watches for.

``parse_bank_line`` is the token-level parser used for lines inside a
section that the regex sweep could not read: it tolerates OCR-corrupted
dates (``07106``) and amounts printed without a decimal point.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from .corrections import DEFAULT_CORRECTIONS, CorrectionTable
from .logging_setup import get_logger
from .models import Candidate

_logger = get_logger("finance_tracker.banks")


@dataclass(frozen=True, slots=True)
class BankProfile:
    """Per-bank layout hints. Labels are lowercase."""

    tag: str
    aliases: tuple[str, ...] = ()
    date_formats: tuple[str, ...] = ("MM/DD/YYYY",)
    amount_columns: tuple[str, ...] = ("amount", "debit", "credit")
    description_columns: tuple[str, ...] = ("description",)
    credit_section_headers: tuple[str, ...] = ()
    expense_section_headers: tuple[str, ...] = ()

    @property
    def has_sections(self) -> bool:
        return bool(self.credit_section_headers or self.expense_section_headers)

    def mentions_section(self, text: str) -> bool:
        lowered = text.lower()
        return any(h in lowered for h in self.credit_section_headers + self.expense_section_headers)


GENERIC = BankProfile(tag="GENERIC")

# Checked in order; the first alias hit wins.
BANK_PROFILES: tuple[BankProfile, ...] = (
    BankProfile(
        tag="BANK_OF_AMERICA",
        aliases=("bank of america", "bofa"),
        date_formats=("MM/DD/YYYY", "MM/DD/YY"),
        amount_columns=("amount", "withdrawal", "deposit"),
        description_columns=("description", "payee"),
        credit_section_headers=("payments and other credits",),
        expense_section_headers=("purchases and adjustments",),
    ),
    BankProfile(
        tag="CHASE",
        aliases=("chase", "jpmorgan"),
        date_formats=("MM/DD/YYYY", "MM/DD/YY"),
        amount_columns=("amount", "debit", "credit"),
        description_columns=("description", "transaction"),
    ),
    BankProfile(
        tag="WELLS_FARGO",
        aliases=("wells fargo", "wellsfargo"),
        amount_columns=("amount", "debit", "credit"),
        description_columns=("description", "memo"),
    ),
    BankProfile(
        tag="CITI",
        aliases=("citibank", "citi"),
        date_formats=("MM/DD/YYYY", "YYYY-MM-DD"),
        amount_columns=("amount", "debit", "credit"),
        description_columns=("description", "transaction description"),
    ),
    BankProfile(
        tag="CAPITAL_ONE",
        aliases=("capital one",),
        date_formats=("YYYY-MM-DD", "MM/DD/YYYY"),
        amount_columns=("amount", "debit", "credit"),
        description_columns=("description", "merchant"),
    ),
    BankProfile(
        tag="AMEX",
        aliases=("american express", "amex"),
        date_formats=("MM/DD/YY", "MM/DD/YYYY"),
        amount_columns=("amount", "charge", "payment"),
        description_columns=("description", "payee", "merchant"),
    ),
    BankProfile(
        tag="DISCOVER",
        aliases=("discover",),
        amount_columns=("amount", "trans. amount"),
        description_columns=("description", "merchant"),
    ),
    BankProfile(
        tag="PNC",
        aliases=("pnc",),
        amount_columns=("amount", "withdrawals", "deposits"),
        description_columns=("description", "transaction description"),
    ),
    BankProfile(
        tag="US_BANK",
        aliases=("u.s. bank", "us bank"),
        amount_columns=("amount", "debit", "credit"),
        description_columns=("description", "memo"),
    ),
)


def _alias_pattern(alias: str) -> re.Pattern[str]:
    # Word boundaries keep "citi" out of "city" and "pnc" out of longer tokens.
    return re.compile(r"(?<![a-z0-9])" + re.escape(alias) + r"(?![a-z0-9])")


_ALIAS_PATTERNS: tuple[tuple[BankProfile, tuple[re.Pattern[str], ...]], ...] = tuple(
    (p, tuple(_alias_pattern(a) for a in p.aliases)) for p in BANK_PROFILES
)


def identify_bank(text: str) -> BankProfile:
    """Return the first profile whose alias appears in ``text`` (case-insensitive)."""

    lowered = text.lower()
    for profile, patterns in _ALIAS_PATTERNS:
        if any(p.search(lowered) for p in patterns):
            _logger.debug("banks:identified tag=%s", profile.tag)
            return profile
    return GENERIC


def profile_by_tag(tag: str) -> BankProfile:
    for profile in BANK_PROFILES:
        if profile.tag == tag:
            return profile
    if tag == GENERIC.tag:
        return GENERIC
    raise ValueError(f"unknown bank tag: {tag!r}")


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class Section(StrEnum):
    NONE = "none"
    CREDITS = "credits"
    EXPENSES = "expenses"


class SectionTracker:
    """State machine over statement lines: ``none -> credits | expenses``.

    ``observe`` returns True when the line is itself a section header (the
    caller should not parse it as a transaction).
    """

    def __init__(self, profile: BankProfile) -> None:
        self._profile = profile
        self.section = Section.NONE

    def observe(self, line: str) -> bool:
        lowered = line.lower()
        if any(h in lowered for h in self._profile.credit_section_headers):
            self.section = Section.CREDITS
            return True
        if any(h in lowered for h in self._profile.expense_section_headers):
            self.section = Section.EXPENSES
            return True
        return False


def assign_sections(lines: list[str], profile: BankProfile) -> list[Section | None]:
    """Section of each line, or ``None`` for header lines themselves."""

    tracker = SectionTracker(profile)
    out: list[Section | None] = []
    for line in lines:
        out.append(None if tracker.observe(line) else tracker.section)
    return out


# ---------------------------------------------------------------------------
# Boilerplate
# ---------------------------------------------------------------------------

_BOILERPLATE_MARKERS: tuple[str, ...] = (
    "payments and other credits",
    "purchases and adjustments",
    "interest charged",
    "fees charged",
    "for this period",
    "year to date",
    "average daily",
    "billing cycle",
    "p.o. box",
    "customer service",
    "www.",
    "1.800.",
    "mail payment",
    "billing inqui",
    "visa signature",
    "account#",
    "new balance total",
    "payment due date",
    "late payment warning",
    "minimum payment",
    "copyright",
    "bank of america corporation",
    "member fdic",
    "equal housing",
    "interest charge calculation",
    "annual percentage rate",
    "promotional",
    "balance transfers",
    "cash advances",
    "variable rate",
    "apr type definitions",
    "type of annual",
    "reward summary",
    "cash back earned",
    "cash back redeemed",
    "cash back available",
    "make the most of your",
    "rewards program today",
    "important messages",
    "congratulations",
    "credit limit has been increased",
    "partner rewards program",
    "fuel rewards",
    "security meter",
    "mobile banking",
    "bofa.com",
    "cash credit line",
    "for cash",
    "portion of credit available",
    "total credit line",
    "total credit available",
)

_BOILERPLATE_PAIRS: tuple[tuple[str, str], ...] = (
    ("transaction", "date"),
    ("posting", "date"),
    ("reference", "number"),
    ("account", "number"),
)

_PAGE_RE = re.compile(r"\bpage\s+\d")
_DOC_ID_RE = re.compile(r"^[a-z0-9]{3,}-\d{2,}-\d{2,}")
_LONG_NUMBER_RE = re.compile(r"^\d{7,}$")


def is_bank_boilerplate_line(line: str) -> bool:
    """True for statement furniture inside or around sectioned statements."""

    stripped = line.strip()
    if len(stripped) < 5:
        return True
    lowered = stripped.lower()
    if lowered.startswith("total "):
        return True
    if any(m in lowered for m in _BOILERPLATE_MARKERS):
        return True
    if any(a in lowered and b in lowered for a, b in _BOILERPLATE_PAIRS):
        return True
    return bool(
        _PAGE_RE.search(lowered) or _DOC_ID_RE.match(lowered) or _LONG_NUMBER_RE.match(lowered)
    )


# ---------------------------------------------------------------------------
# Token-level line parser
# ---------------------------------------------------------------------------

_DATE_TOKEN_RE = re.compile(r"\d{2}/\d{2}")
_CORRUPT_DATE_TOKEN_RE = re.compile(r"\d{5}")
_DECIMAL_TOKEN_RE = re.compile(r"-?\$?\d+[.,]\d{2}")
_HUNDREDS_TOKEN_RE = re.compile(r"(-?)(\d{3,4})")
_SMALL_TOKEN_RE = re.compile(r"(-?)(\d{1,2})")
_ACCOUNT_TOKEN_RE = re.compile(r"\d{4}")

_AMOUNT_TAIL = r"(?P<amount>-?\$?\d+\.\d{2})\s*$"
_ALTERNATIVE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^(?P<date>\d{2}/\d{2})\s+\d{2}/\d{2}\s+(?P<desc>.+?)\s+" + _AMOUNT_TAIL),
    re.compile(r"^(?P<date>\d{2}/\d{2})\s+(?P<desc>.+?)\s+" + _AMOUNT_TAIL),
    re.compile(r"^(?P<desc>.+?)\s+" + _AMOUNT_TAIL),
)


def _leading_dates(parts: list[str]) -> tuple[str, int] | None:
    """Return ``(transaction date, index after the dates)`` for the leading tokens."""

    if len(parts) < 2:
        return None
    first, second = parts[0], parts[1]
    if not _DATE_TOKEN_RE.fullmatch(second):
        return None
    if _DATE_TOKEN_RE.fullmatch(first):
        return first, 2
    if _CORRUPT_DATE_TOKEN_RE.fullmatch(first):
        # "07106" is "07/06" with the slash read as a digit
        return f"{first[:2]}/{first[2:4]}", 2
    # Garbled first date ("o7no", "on"): reuse the posting date.
    return second, 2


def _amount_token(token: str, table: CorrectionTable) -> str | None:
    if _DECIMAL_TOKEN_RE.fullmatch(token):
        return token.replace(",", ".")
    garbled = table.garbled_amounts.get(token)
    if garbled is not None:
        return garbled
    m = _HUNDREDS_TOKEN_RE.fullmatch(token)
    if m and int(m.group(2)) > 99:
        sign, digits = m.groups()
        return f"{sign}{digits[:-2]}.{digits[-2:]}"
    m = _SMALL_TOKEN_RE.fullmatch(token)
    if m:
        # Short integers on these statements are whole dollars.
        return f"{m.group(1)}{m.group(2)}.00"
    return None


def _parse_tokens(line: str, table: CorrectionTable) -> tuple[str, str, str] | None:
    parts = line.split()
    if len(parts) < 4:
        return None
    lead = _leading_dates(parts)
    if lead is None:
        return None
    date_text, start = lead

    amount_index = -1
    amount_text = ""
    for i in range(len(parts) - 1, start - 1, -1):
        found = _amount_token(parts[i], table)
        if found is not None:
            amount_index, amount_text = i, found
            break
    if amount_index == -1:
        return None

    # Up to two 4-digit reference/account tokens sit before the amount.
    end = amount_index
    if end > start + 1 and _ACCOUNT_TOKEN_RE.fullmatch(parts[end - 1]):
        end -= 1
        if end > start + 1 and _ACCOUNT_TOKEN_RE.fullmatch(parts[end - 1]):
            end -= 1
    description = " ".join(parts[start:end])
    if len(description) < 3:
        return None
    return date_text, description, amount_text


def parse_bank_line(
    line: str,
    *,
    line_no: int | None = None,
    table: CorrectionTable = DEFAULT_CORRECTIONS,
) -> Candidate | None:
    """Read ``TransDate PostDate Description [Ref] [Acct] Amount`` from a cleaned line.

    Falls back to looser regexes when the token layout is not recognized.
    Returns ``None`` when nothing resembling a transaction is found.
    """

    stripped = line.strip()
    parsed = _parse_tokens(stripped, table)
    if parsed is not None:
        date_text, description, amount_text = parsed
        return Candidate(
            description=description,
            amount_text=amount_text,
            date_text=date_text,
            line_no=line_no,
            strategy="bank_line",
        )
    for pattern in _ALTERNATIVE_PATTERNS:
        m = pattern.match(stripped)
        if m is None:
            continue
        groups = m.groupdict()
        return Candidate(
            description=groups["desc"].strip(),
            amount_text=groups["amount"],
            date_text=groups.get("date"),
            line_no=line_no,
            strategy="bank_line_alt",
        )
    return None


__all__ = [
    "BANK_PROFILES",
    "GENERIC",
    "BankProfile",
    "Section",
    "SectionTracker",
    "assign_sections",
    "identify_bank",
    "is_bank_boilerplate_line",
    "parse_bank_line",
    "profile_by_tag",
]
