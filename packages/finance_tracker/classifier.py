"""Direction classification and non-spending filters.

All predicates work on lowercased descriptions with plain substring tests, so
they behave the same for raw statement text and for cleaned, title-cased
descriptions.
"""

from __future__ import annotations

import re
from decimal import Decimal

from .models import TransactionType

STRONG_INCOME_KEYWORDS: tuple[str, ...] = (
    "payment from",
    "deposit from",
    "transfer from",
    "refund from",
    "payment received",
    "direct deposit",
    "salary",
    "payroll",
    "wage",
    "bonus",
    "commission",
    "dividend",
    "interest earned",
    "cashback",
    "reward",
    "freelance payment",
    "contract payment",
    "invoice payment",
    "reimbursement",
)

MODERATE_INCOME_KEYWORDS: tuple[str, ...] = (
    "refund",
    "return",
    "credit adjustment",
    "promotional credit",
    "statement credit",
    "fee waiver",
    "adjustment credit",
    "deposit",
    "credit",
)

STRONG_EXPENSE_KEYWORDS: tuple[str, ...] = (
    "payment to",
    "transfer to",
    "payment for",
    "purchase at",
    "purchase from",
    "bill payment",
    "automatic payment",
    "online payment",
    "debit purchase",
    "pos purchase",
    "atm withdrawal",
    "check payment",
)

# Negative amounts carrying these words are money coming back, not spend.
_NEGATIVE_REFUND_MARKERS: tuple[str, ...] = ("refund", "cashback", "return")

# Statement summaries, internal transfers and payments received by the issuer.
_ARTIFACT_KEYWORDS: tuple[str, ...] = (
    "payment received",
    "payment from",
    "transfer from",
    "balance transfer",
    "internal transfer",
    "total purchases",
    "total payments",
    "previous balance",
    "new balance",
    "minimum payment",
    "account summary",
)

# Matched as the whole description, its first words or its last words.
_ARTIFACT_PHRASES: tuple[str, ...] = (
    "payments and other credits",
    "purchases and adjustments",
    "fees charged this period",
    "interest charged this period",
    "total minimum payment",
    "total payments and other credits",
    "total purchases and adjustments",
    "days in billing period",
    "average daily balance",
    "total credit limit",
    "available credit",
    "credit line increase",
    "minimum payment due",
    "current balance",
    "new balance",
    "previous balance",
    "payment due date",
    "late payment warning",
    "statement closing date",
    "billing cycle",
    "account summary",
    "customer service",
    "contact us",
    "for cash advance",
    "cash credit line",
    "portion of credit line",
    "year-to-date totals",
    "confirmation number",
    "reference number",
    "conf#",
    "ref#",
    "payment from chk",
    "payment - thank you",
    "payment thank you",
    "autopay payment",
    "online payment received",
    "check payment received",
    "electronic payment received",
    "bill payment received",
)

_SUMMARY_PREFIX_RE = re.compile(r"^(total|subtotal|balance|amount)\s")
_HEADER_PREFIX_RE = re.compile(r"^\s*(date|description|amount|transaction|account)\s")
_DIGITS_ONLY_RE = re.compile(r"^\d+\s*$")

CARD_PAYMENT_KEYWORDS: tuple[str, ...] = (
    "payment from chk",
    "conf#",
    "online payment",
    "autopay",
    "payment - thank you",
    "payment thank you",
    "electronic payment",
    "bill payment",
)

RETURN_KEYWORDS: tuple[str, ...] = (
    "refund",
    "return",
    "credit memo",
    "credit adjustment",
    "cashback",
    "cash back",
    "reward",
    "rebate",
    "reversal",
    "void",
    "chargeback",
    "dispute credit",
    "promotional credit",
    "statement credit",
    "merchant credit",
    "store credit",
    "purchase return",
)

PAYMENT_TO_YOU_KEYWORDS: tuple[str, ...] = (
    "payment from",
    "direct deposit",
    "salary",
    "payroll",
    "refund received",
    "cashback",
    "transfer from",
)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def classify_type(amount: Decimal | float, description: str) -> TransactionType:
    """Decide whether a signed amount with ``description`` is income or expense.

    Order of evidence: strong income phrases, strong expense phrases, then the
    sign (negative is expense unless it reads like a refund), then moderate
    income words on positive amounts. Anything left is an expense, since many
    statements print charges as positive numbers.
    """

    desc = description.lower()
    if _contains_any(desc, STRONG_INCOME_KEYWORDS):
        return TransactionType.INCOME
    if _contains_any(desc, STRONG_EXPENSE_KEYWORDS):
        return TransactionType.EXPENSE
    if amount > 0 and _contains_any(desc, MODERATE_INCOME_KEYWORDS):
        return TransactionType.INCOME
    if amount < 0:
        if _contains_any(desc, _NEGATIVE_REFUND_MARKERS):
            return TransactionType.INCOME
        return TransactionType.EXPENSE
    return TransactionType.EXPENSE


def _matches_phrase(desc: str, phrase: str) -> bool:
    return desc == phrase or desc.startswith(phrase + " ") or desc.endswith(" " + phrase)


def is_non_spending_artifact(description: str) -> bool:
    """Return True for lines that look like transactions but are not spending.

    Covers statement summary and header lines, internal transfers, payments
    received by the card issuer, generic placeholders and bare numbers. Refunds
    and salary are deliberately absent so they can still classify as income.
    """

    desc = description.lower().strip()
    if len(desc) < 3 or _DIGITS_ONLY_RE.match(desc) or desc == "transaction":
        return True
    if _contains_any(desc, _ARTIFACT_KEYWORDS):
        return True
    if any(_matches_phrase(desc, p) for p in _ARTIFACT_PHRASES):
        return True
    if _SUMMARY_PREFIX_RE.match(desc) or _HEADER_PREFIX_RE.match(desc):
        return True
    return desc.count("$") > 1


def is_credit_card_bill_payment(description: str) -> bool:
    """True when the description is a payment toward a card balance."""

    desc = description.lower()
    if _contains_any(desc, CARD_PAYMENT_KEYWORDS):
        return True
    return "payment" in desc and "thank you" in desc


def is_return_or_refund(description: str) -> bool:
    return _contains_any(description.lower(), RETURN_KEYWORDS)


def is_payment_to_you(description: str) -> bool:
    """True for inbound payments (payroll, transfers in, refunds received)."""

    return _contains_any(description.lower(), PAYMENT_TO_YOU_KEYWORDS)


__all__ = [
    "CARD_PAYMENT_KEYWORDS",
    "MODERATE_INCOME_KEYWORDS",
    "PAYMENT_TO_YOU_KEYWORDS",
    "RETURN_KEYWORDS",
    "STRONG_EXPENSE_KEYWORDS",
    "STRONG_INCOME_KEYWORDS",
    "classify_type",
    "is_credit_card_bill_payment",
    "is_non_spending_artifact",
    "is_payment_to_you",
    "is_return_or_refund",
]
