"""Repair OCR noise in statement text before pattern matching.

``clean_ocr_text`` is pure and total: it never raises and always returns the
same number of lines it was given, so line numbers stay valid for the
matchers downstream. Stages run in a fixed order:

1. corrupted date literals matched on the raw text, then digit/letter
   confusion next to digits (``O→0``, ``l/I→1``, ``S→5``, ``B→8``, ``Z→2``)
2. date literals again on the repaired text, then line-leading noise in
   front of a date
3. merchant-name canonicalization
4. amount symbols: dash variants, stray ``= + * # @`` before digits,
   European decimal commas, trailing minus signs
5. garbled amount tokens at the end of a transaction line
6. decimal-point reconstruction for a trailing bare integer
7. whitespace, quotes and control characters
"""

from __future__ import annotations

import re
from functools import lru_cache

from .corrections import DEFAULT_CORRECTIONS, CorrectionTable
from .logging_setup import get_logger

_logger = get_logger("finance_tracker.ocr_cleaner")

_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")

_CHAR_CONFUSION: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(p), r)
    for p, r in (
        (r"O(?=\d)", "0"),
        (r"(?<=\d)O", "0"),
        (r"[lI](?=\d)", "1"),
        (r"(?<=\d)[lI]", "1"),
        (r"S(?=\d)", "5"),
        (r"(?<=\d)S", "5"),
        (r"(?<=\d)B", "8"),
        (r"Z(?=\d)", "2"),
        (r"(?<=\d)Z", "2"),
    )
)

_DASHES_RE = re.compile(r"[\u2010-\u2015\u2212]")
_STRAY_SYMBOL_RE = re.compile(r"(?<![\w.])[=+*#@](?=\d)")
_EURO_THOUSANDS_RE = re.compile(r"(?<![\d,.])(\d{1,3}),(\d{3}),(\d{2})(?=\s|$)")
_EURO_DECIMAL_RE = re.compile(r"(?<![\d,.])(\d+),(\d{2})(?=\s|$)")
_TRAILING_MINUS_RE = re.compile(r"(?<!\S)(\$?\d[\d,]*\.\d{2})-\s*$")

_DATE_LED_RE = re.compile(r"^\s*\d{1,2}/\d{1,2}(?:/\d{2,4})?(?!\d)")
_MONEY_TOKEN_RE = re.compile(r"\d\.\d{2}(?!\d)")
_LAST_TOKEN_RE = re.compile(r"(\S+)\s*$")
_BARE_INT_RE = re.compile(r"(-?)(\d{2,5})")
_MONTH_WORD_RE = re.compile(
    r"^(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?$", re.IGNORECASE
)

_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_SINGLE_QUOTES_RE = re.compile(r"[\u2018\u2019`\u00b4]")
_DOUBLE_QUOTES_RE = re.compile(r"[\u201c\u201d]")
_WIDE_GAP_RE = re.compile(r" {3,}")
_NBSP_RE = re.compile(r"\u00a0")


@lru_cache(maxsize=16)
def _compile_date_literals(
    pairs: tuple[tuple[str, str], ...],
) -> tuple[tuple[re.Pattern[str], str], ...]:
    return tuple(
        (re.compile(r"(?<![\w/.])" + re.escape(bad) + r"(?![\w/.])"), good) for bad, good in pairs
    )


@lru_cache(maxsize=16)
def _compile_prefix_noise(words: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))
    return re.compile(rf"^\s*(?:{alternatives})\s+(?=\d{{1,2}}/)")


@lru_cache(maxsize=16)
def _compile_rewrites(
    pairs: tuple[tuple[str, str], ...],
) -> tuple[tuple[re.Pattern[str], str], ...]:
    return tuple((re.compile(p), r) for p, r in pairs)


@lru_cache(maxsize=16)
def _compile_merchants(
    pairs: tuple[tuple[str, str], ...],
) -> tuple[tuple[re.Pattern[str], str], ...]:
    return tuple((re.compile(p, re.IGNORECASE), r) for p, r in pairs)


def _fix_date_literals(line: str, table: CorrectionTable) -> str:
    # Keys use both the raw OCR spelling ("O77") and the digit-repaired one
    # ("07106"), so this runs before and after the character stage.
    for pattern, good in _compile_date_literals(table.date_literals):
        line = pattern.sub(good, line)
    return line


def _fix_characters(line: str) -> str:
    for pattern, repl in _CHAR_CONFUSION:
        line = pattern.sub(repl, line)
    return line


def _fix_date_prefix(line: str, table: CorrectionTable) -> str:
    for pattern, repl in _compile_rewrites(table.date_prefix_rewrites):
        line = pattern.sub(repl, line)
    return _compile_prefix_noise(table.date_prefix_noise).sub("", line)


def _fix_merchants(line: str, table: CorrectionTable) -> str:
    for pattern, repl in _compile_merchants(table.merchant_patterns):
        line = pattern.sub(repl, line)
    return line


def _fix_amount_symbols(line: str) -> str:
    line = _DASHES_RE.sub("-", line)
    line = _STRAY_SYMBOL_RE.sub("", line)
    line = _EURO_THOUSANDS_RE.sub(r"\1\2.\3", line)
    line = _EURO_DECIMAL_RE.sub(r"\1.\2", line)
    line = _TRAILING_MINUS_RE.sub(r"-\1", line)
    return line


def _is_year_token(token: str, previous: str | None) -> bool:
    if len(token) != 4 or not 1900 <= int(token) <= 2099 or previous is None:
        return False
    return previous.endswith(",") or bool(_MONTH_WORD_RE.match(previous))


def _fix_trailing_amount(line: str, table: CorrectionTable) -> str:
    """Repair the amount position of a date-led line lacking a money token."""

    if not _DATE_LED_RE.match(line) or _MONEY_TOKEN_RE.search(line):
        return line
    m = _LAST_TOKEN_RE.search(line)
    if m is None:
        return line
    token = m.group(1)
    head = line[: m.start(1)]

    replacement = table.garbled_amounts.get(token)
    if replacement is not None:
        return head + replacement

    bare = _BARE_INT_RE.fullmatch(token)
    if bare is None:
        return line
    sign, digits = bare.groups()
    # The leading date itself is never the amount.
    if not head.strip():
        return line
    prev_tokens = head.split()
    if _is_year_token(digits, prev_tokens[-1] if prev_tokens else None):
        return line
    cents = digits[-2:]
    if cents not in table.common_cents:
        return line
    dollars = digits[:-2] or "0"
    return f"{head}{sign}{dollars}.{cents}"


def _normalize_spacing(line: str) -> str:
    line = _CONTROL_RE.sub("", line.replace("\t", "  "))
    line = _SINGLE_QUOTES_RE.sub("'", line)
    line = _DOUBLE_QUOTES_RE.sub('"', line)
    line = _NBSP_RE.sub(" ", line)
    line = _WIDE_GAP_RE.sub("  ", line)
    return line.strip()


def clean_ocr_line(line: str, table: CorrectionTable = DEFAULT_CORRECTIONS) -> str:
    """Run every cleaning stage over a single line."""

    line = _fix_date_literals(line, table)
    line = _fix_characters(line)
    line = _fix_date_literals(line, table)
    line = _fix_date_prefix(line, table)
    line = _fix_merchants(line, table)
    line = _fix_amount_symbols(line)
    line = _fix_trailing_amount(line, table)
    return _normalize_spacing(line)


def clean_ocr_text(text: str, table: CorrectionTable = DEFAULT_CORRECTIONS) -> str:
    """Return ``text`` with OCR noise repaired, one output line per input line.

    Column gaps (two or more spaces, or a tab) survive as exactly two spaces so
    tabular layouts can still be split into cells.
    """

    lines = _LINE_SPLIT_RE.split(text)
    cleaned = [clean_ocr_line(line, table) for line in lines]
    changed = sum(1 for before, after in zip(lines, cleaned, strict=True) if before != after)
    _logger.debug("ocr_cleaner:done lines=%d changed=%d", len(lines), changed)
    return "\n".join(cleaned)


__all__ = ["clean_ocr_line", "clean_ocr_text"]
