"""Duplicate detection for parse-time merging and store ingestion.

Public surface:
- ``ParsedTransaction``: a built transaction plus the source line and strategy
  that produced it.
- ``dedupe_parsed`` / ``dedupe``: collapse re-matches of the same statement
  line produced by several matching strategies. Idempotent.
- ``description_similarity`` / ``is_duplicate``: the looser comparison used
  when new uploads are added to a store that may already hold them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .logging_setup import get_logger
from .models import Transaction
from .normalizers import normalize_description

_logger = get_logger("finance_tracker.duplicates")

SIMILARITY_THRESHOLD: float = 0.8
_MAX_DAY_GAP = 1
_AMOUNT_TOLERANCE = Decimal("0.01")
_MIN_WORD_LEN = 3


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """A transaction built from one statement line."""

    transaction: Transaction
    line_no: int | None = None
    strategy: str = ""


type ExactKey = tuple[date, int, str]
type FuzzyKey = tuple[date, str]


def exact_key(tx: Transaction) -> ExactKey:
    cents = int(tx.amount * 100)
    return (tx.date, cents, normalize_description(tx.description))


def fuzzy_key(tx: Transaction) -> FuzzyKey:
    return (tx.date, normalize_description(tx.description))


def dedupe_parsed(items: Iterable[ParsedTransaction]) -> list[ParsedTransaction]:
    """Keep the first of each group of re-matches, preserving input order.

    An item is a re-match of an earlier one when
    - the exact key ``(date, cents, normalized description)`` repeats, or
    - the fuzzy key ``(date, normalized description)`` repeats on the same
      source line, or
    - the same source line yields the same date and amount again.

    Fuzzy matches from different lines are kept: two coffees at the same shop
    on the same day are two transactions.
    """

    seen_exact: set[ExactKey] = set()
    total = 0
    seen_fuzzy_line: set[tuple[FuzzyKey, int]] = set()
    seen_line_amount: set[tuple[int, date, int]] = set()
    out: list[ParsedTransaction] = []
    for item in items:
        total += 1
        tx = item.transaction
        ek = exact_key(tx)
        if ek in seen_exact:
            continue
        if item.line_no is not None:
            fk = (fuzzy_key(tx), item.line_no)
            lk = (item.line_no, tx.date, ek[1])
            if fk in seen_fuzzy_line or lk in seen_line_amount:
                continue
            seen_fuzzy_line.add(fk)
            seen_line_amount.add(lk)
        seen_exact.add(ek)
        out.append(item)
    _logger.debug("duplicates:parsed_done in=%d out=%d", total, len(out))
    return out


def dedupe(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Drop transactions whose exact key already appeared, preserving order."""

    items = [ParsedTransaction(transaction=tx) for tx in transactions]
    return [p.transaction for p in dedupe_parsed(items)]


def description_similarity(a: str, b: str) -> float:
    """Jaccard similarity of significant words (three or more characters).

    Identical normalized strings score 1.0. When neither side has a
    significant word the score is 1.0; when only one side has none it is 0.0.
    """

    na, nb = normalize_description(a), normalize_description(b)
    if na == nb:
        return 1.0
    words_a = {w for w in na.split(" ") if len(w) >= _MIN_WORD_LEN}
    words_b = {w for w in nb.split(" ") if len(w) >= _MIN_WORD_LEN}
    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def is_duplicate(new: Transaction, existing: Transaction) -> bool:
    """True when ``new`` looks like a re-import of ``existing``.

    Requires the same type, dates at most one day apart, amounts within one
    cent and description similarity of at least 0.8.
    """

    if new.type is not existing.type:
        return False
    if abs((new.date - existing.date).days) > _MAX_DAY_GAP:
        return False
    if abs(new.amount - existing.amount) > _AMOUNT_TOLERANCE:
        return False
    return description_similarity(new.description, existing.description) >= SIMILARITY_THRESHOLD


def find_duplicate(new: Transaction, existing: Iterable[Transaction]) -> Transaction | None:
    for candidate in existing:
        if is_duplicate(new, candidate):
            return candidate
    return None


__all__ = [
    "SIMILARITY_THRESHOLD",
    "ParsedTransaction",
    "dedupe",
    "dedupe_parsed",
    "description_similarity",
    "exact_key",
    "find_duplicate",
    "fuzzy_key",
    "is_duplicate",
]
