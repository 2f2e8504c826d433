"""Statement text to transactions.

``extract_transactions`` cleans the text, detects the bank layout and then
takes one of two paths:

- generic: every strategy in :data:`finance_tracker.matchers.STRATEGIES` runs
  over the cleaned lines, the candidates are unioned and each source line
  keeps one transaction (:func:`one_per_line`);
- sectioned: for layouts that split purchases from credits, a sweep with the
  formatted-statement patterns is mapped onto sections, and lines it missed
  inside a section are retried with the token-level bank line parser.

Either way each candidate goes through :func:`build_transaction` and the
results are collapsed with :func:`finance_tracker.duplicates.dedupe_parsed`.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from .banks import (
    BankProfile,
    Section,
    assign_sections,
    identify_bank,
    is_bank_boilerplate_line,
    parse_bank_line,
)
from .categorize import Categorizer, calculate_confidence
from .classifier import classify_type, is_credit_card_bill_payment, is_non_spending_artifact
from .corrections import DEFAULT_CORRECTIONS, CorrectionTable
from .duplicates import ParsedTransaction, dedupe_parsed
from .logging_setup import get_logger
from .matchers import STRATEGIES, match_formatted_line
from .models import Candidate, Transaction, TransactionSource, TransactionType, new_transaction_id
from .normalizers import clean_description, infer_statement_year, parse_amount, parse_date
from .ocr_cleaner import clean_ocr_text

_logger = get_logger("finance_tracker.pipeline")

_MIN_DESCRIPTION_LEN = 3
_MIN_SWEEP_LINE_LEN = 15
_CREDITS_CATEGORY = "Refunds"
_TRAILING_AMOUNT_RE = re.compile(r"(?:^|\s)[-$]*\d[\d,]*\.\d{2}$")


@dataclass(frozen=True, slots=True)
class ParseContext:
    """Per-statement settings shared by every candidate."""

    statement_year: int
    today: date = field(default_factory=date.today)
    corrections: CorrectionTable = DEFAULT_CORRECTIONS
    # Spreadsheet exports print whole-dollar integers; OCR text loses decimal points.
    reconstruct_decimal: bool = True

    @classmethod
    def for_text(
        cls,
        text: str,
        *,
        today: date | None = None,
        corrections: CorrectionTable = DEFAULT_CORRECTIONS,
    ) -> ParseContext:
        today = today or date.today()
        return cls(
            statement_year=infer_statement_year(text, today),
            today=today,
            corrections=corrections,
        )


def build_transaction(
    candidate: Candidate,
    ctx: ParseContext,
    categorizer: Categorizer,
    *,
    forced_type: TransactionType | None = None,
    forced_category: str | None = None,
) -> ParsedTransaction | None:
    """Normalize, filter, classify and categorize one candidate.

    Returns ``None`` (and logs at DEBUG) for anything that does not make a
    valid transaction: unreadable amount or date, too-short description, or
    a statement artifact such as a summary line or a payment received.
    """

    raw_desc = candidate.description.strip()
    try:
        amount = parse_amount(
            candidate.amount_text,
            ctx.corrections,
            reconstruct_decimal=ctx.reconstruct_decimal,
        )
        if amount is None:
            _logger.debug("pipeline:drop reason=amount raw=%r", candidate.amount_text)
            return None
        if candidate.date_text is None:
            tx_date = ctx.today
        else:
            tx_date = parse_date(
                candidate.date_text, default_year=ctx.statement_year, today=ctx.today
            )
        if tx_date is None:
            _logger.debug("pipeline:drop reason=date raw=%r", candidate.date_text)
            return None
        description = clean_description(raw_desc)
        if len(description) < _MIN_DESCRIPTION_LEN:
            _logger.debug("pipeline:drop reason=description raw=%r", raw_desc)
            return None
        if is_non_spending_artifact(raw_desc):
            _logger.debug("pipeline:drop reason=artifact raw=%r", raw_desc)
            return None

        tx_type = forced_type or classify_type(amount, raw_desc)
        category = forced_category or categorizer.categorize(raw_desc, amount, tx_type)
        tx = Transaction(
            id=new_transaction_id(),
            date=tx_date,
            description=description,
            amount=abs(amount),
            type=tx_type,
            category=category,
            source=TransactionSource.UPLOAD,
            original_amount=amount,
            confidence=calculate_confidence(description, category),
        )
    except (ValueError, ArithmeticError) as e:
        _logger.debug("pipeline:drop reason=invalid raw=%r error=%s", raw_desc, e)
        return None
    return ParsedTransaction(transaction=tx, line_no=candidate.line_no, strategy=candidate.strategy)


def run_strategies(lines: Sequence[str], profile: BankProfile) -> list[Candidate]:
    """Run every matching strategy and return the union of their candidates."""

    out: list[Candidate] = []
    for name, strategy in STRATEGIES:
        found = strategy(lines, profile)
        _logger.debug("pipeline:strategy_done strategy=%s candidates=%d", name, len(found))
        out.extend(found)
    return out


def _ends_in_amount(description: str) -> bool:
    return bool(_TRAILING_AMOUNT_RE.search(description))


def one_per_line(parsed: Sequence[ParsedTransaction]) -> list[ParsedTransaction]:
    """Keep a single transaction for each source line.

    Strategies disagree on lines with more than one money column (amount plus
    running balance): one reads the amount, another folds the amount into the
    description and reads the balance. The first transaction whose description
    does not end in an amount wins; otherwise the first one seen for the line.
    Items without a line number pass through untouched.
    """

    chosen: dict[int, ParsedTransaction] = {}
    order: list[int | ParsedTransaction] = []
    for item in parsed:
        line_no = item.line_no
        if line_no is None:
            order.append(item)
            continue
        current = chosen.get(line_no)
        if current is None:
            chosen[line_no] = item
            order.append(line_no)
        elif _ends_in_amount(current.transaction.description) and not _ends_in_amount(
            item.transaction.description
        ):
            chosen[line_no] = item
    return [chosen[k] if isinstance(k, int) else k for k in order]


def _build_for_section(
    candidate: Candidate,
    section: Section,
    ctx: ParseContext,
    categorizer: Categorizer,
) -> ParsedTransaction | None:
    if section is Section.CREDITS:
        # Payments toward the card are not refunds.
        if is_credit_card_bill_payment(candidate.description):
            _logger.debug("pipeline:drop reason=bill_payment raw=%r", candidate.description)
            return None
        return build_transaction(
            candidate,
            ctx,
            categorizer,
            forced_type=TransactionType.INCOME,
            forced_category=_CREDITS_CATEGORY,
        )
    return build_transaction(candidate, ctx, categorizer, forced_type=TransactionType.EXPENSE)


def _extract_sectioned(
    lines: Sequence[str],
    profile: BankProfile,
    ctx: ParseContext,
    categorizer: Categorizer,
) -> list[ParsedTransaction]:
    sections = assign_sections(list(lines), profile)
    out: list[ParsedTransaction] = []
    matched: set[int] = set()

    for line_no, line in enumerate(lines):
        section = sections[line_no]
        if section is None or section is Section.NONE:
            continue
        if len(line.strip()) < _MIN_SWEEP_LINE_LEN:
            continue
        if is_bank_boilerplate_line(line) or is_non_spending_artifact(line):
            continue
        candidate = match_formatted_line(line, line_no, "section_sweep")
        if candidate is None:
            continue
        built = _build_for_section(candidate, section, ctx, categorizer)
        if built is not None:
            matched.add(line_no)
            out.append(built)
    swept = len(out)

    for line_no, line in enumerate(lines):
        section = sections[line_no]
        if section is None or section is Section.NONE or line_no in matched:
            continue
        if is_bank_boilerplate_line(line):
            continue
        candidate = parse_bank_line(line, line_no=line_no, table=ctx.corrections)
        if candidate is None:
            continue
        built = _build_for_section(candidate, section, ctx, categorizer)
        if built is not None:
            out.append(built)

    _logger.debug(
        "pipeline:sections_done bank=%s swept=%d backup=%d",
        profile.tag,
        swept,
        len(out) - swept,
    )
    return out


def extract_transactions(
    text: str,
    *,
    context: ParseContext | None = None,
    categorizer: Categorizer | None = None,
    today: date | None = None,
) -> list[Transaction]:
    """Return the deduplicated transactions found in raw statement ``text``.

    Never raises for unparseable content: an empty list means nothing
    matched. Callers at the file boundary turn that into
    :class:`finance_tracker.errors.NoTransactionsFoundError`.
    """

    corrections = context.corrections if context is not None else DEFAULT_CORRECTIONS
    cleaned = clean_ocr_text(text, corrections)
    ctx = context or ParseContext.for_text(cleaned, today=today)
    categorizer = categorizer or Categorizer()
    lines = cleaned.split("\n")
    profile = identify_bank(cleaned)

    if profile.has_sections and profile.mentions_section(cleaned):
        parsed = _extract_sectioned(lines, profile, ctx, categorizer)
    else:
        built_all = []
        for candidate in run_strategies(lines, profile):
            built = build_transaction(candidate, ctx, categorizer)
            if built is not None:
                built_all.append(built)
        parsed = one_per_line(built_all)

    unique = dedupe_parsed(parsed)
    _logger.info(
        "pipeline:done bank=%s lines=%d parsed=%d unique=%d",
        profile.tag,
        len(lines),
        len(parsed),
        len(unique),
    )
    return [p.transaction for p in unique]


__all__ = [
    "ParseContext",
    "build_transaction",
    "extract_transactions",
    "one_per_line",
    "run_strategies",
]
