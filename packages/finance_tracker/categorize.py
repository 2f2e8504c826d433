"""Keyword-rule categorization.

Public API:
    - :class:`Categorizer` (``categorize``, ``add_custom_rule``, ``rules_for``)
    - :func:`calculate_confidence`
    - ``EXPENSE_RULES`` / ``INCOME_RULES`` (the built-in tables)

Scoring: for every rule of the transaction's type, each keyword found as a
whole word scores 3 and each keyword found only inside a longer word scores
1. The rule with the largest ``score * priority`` wins; on a tie the rule that
comes first in table order keeps the win. No hit at all falls back to
``Other`` / ``Other Income``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from decimal import Decimal
from functools import lru_cache

from .categories import default_category
from .logging_setup import get_logger
from .models import CategoryRule, TransactionType

_logger = get_logger("finance_tracker.categorize")

_E = TransactionType.EXPENSE
_I = TransactionType.INCOME

EXPENSE_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        keywords=(
            "restaurant", "cafe", "coffee", "pizza", "burger", "taco", "sushi", "deli",
            "mcdonald", "burger king", "kfc", "subway", "chipotle", "panera", "starbucks",
            "dunkin", "dominos", "papa john", "taco bell", "wendy", "chick-fil-a",
            "olive garden", "applebee", "chili", "outback", "red lobster", "ihop",
            "denny", "food truck", "dining", "lunch", "dinner", "breakfast", "brunch",
            "takeout", "delivery", "uber eats", "doordash", "grubhub", "postmates",
            "bistro", "grill", "pub", "bar", "tavern", "bakery", "ice cream", "yogurt",
        ),
        category="Food & Dining",
        priority=9,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "gas", "fuel", "gasoline", "shell", "exxon", "bp", "chevron", "mobil",
            "uber", "lyft", "taxi", "cab", "parking", "park", "metro", "bus", "train",
            "subway", "transit", "toll", "bridge", "rental car", "car rental",
            "hertz", "enterprise", "avis", "budget", "airline", "flight", "airport",
            "delta", "american airlines", "united", "southwest", "jetblue",
            "auto repair", "mechanic", "oil change", "tire", "car wash", "inspection",
        ),
        category="Transportation",
        priority=9,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "amazon", "walmart", "target", "costco", "sam club", "bj wholesale",
            "grocery", "supermarket", "safeway", "kroger", "publix", "whole foods",
            "trader joe", "aldi", "food lion", "giant", "stop shop", "wegmans",
            "shopping", "store", "mall", "outlet", "department store", "retail",
            "macy", "nordstrom", "sears", "jcpenney", "kohl", "tj maxx", "marshall",
            "best buy", "home depot", "lowe", "menards", "ace hardware",
            "pharmacy", "cvs", "walgreens", "rite aid", "drugstore",
        ),
        category="Shopping",
        priority=8,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "electric", "electricity", "power", "utility", "water", "sewer",
            "gas bill", "natural gas", "internet", "cable", "phone", "cell",
            "mobile", "verizon", "att", "t-mobile", "sprint", "comcast", "xfinity",
            "spectrum", "cox", "directv", "dish", "satellite", "broadband",
            "insurance", "auto insurance", "car insurance", "home insurance",
            "health insurance", "life insurance", "geico", "state farm",
            "allstate", "progressive", "usaa", "liberty mutual",
        ),
        category="Bills & Utilities",
        priority=9,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "netflix", "hulu", "disney", "amazon prime", "spotify", "apple music",
            "youtube", "movie", "theater", "cinema", "amc", "regal", "concert",
            "ticketmaster", "stubhub", "game", "gaming", "steam", "playstation",
            "xbox", "nintendo", "entertainment", "music", "streaming", "subscription",
            "gym", "fitness", "planet fitness", "la fitness", "24 hour fitness",
            "ymca", "crossfit", "yoga", "pilates", "spa", "massage",
        ),
        category="Entertainment",
        priority=7,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "doctor", "physician", "hospital", "clinic", "medical", "health",
            "dental", "dentist", "orthodontist", "vision", "optometrist",
            "prescription", "pharmacy", "medicine", "drug", "co-pay", "copay",
            "deductible", "lab", "x-ray", "mri", "ct scan", "surgery",
            "emergency room", "urgent care", "physical therapy", "chiropractor",
            "mental health", "therapy", "counseling", "psychiatrist",
        ),
        category="Healthcare",
        priority=8,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "hotel", "motel", "resort", "inn", "lodge", "airbnb", "vrbo",
            "marriott", "hilton", "hyatt", "sheraton", "holiday inn",
            "travel", "vacation", "trip", "booking", "expedia", "kayak",
            "priceline", "orbitz", "travelocity", "cruise", "carnival",
            "royal caribbean", "norwegian", "disney cruise",
        ),
        category="Travel",
        priority=7,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "school", "university", "college", "tuition", "education",
            "student loan", "books", "textbook", "supplies", "course",
            "class", "training", "certification", "workshop", "seminar",
            "online course", "udemy", "coursera", "masterclass",
        ),
        category="Education",
        priority=7,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "haircut", "salon", "barber", "nail", "manicure", "pedicure",
            "beauty", "cosmetics", "makeup", "skincare", "personal care",
            "dry cleaning", "laundry", "tailor", "alteration",
        ),
        category="Personal Care",
        priority=6,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "home improvement", "furniture", "appliance", "garden", "lawn",
            "landscaping", "hardware", "paint", "tools", "renovation",
            "repair", "maintenance", "cleaning", "pest control", "security",
            "rent", "mortgage", "property tax", "hoa", "homeowners association",
        ),
        category="Home & Garden",
        priority=6,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "fee", "charge", "penalty", "fine", "atm", "overdraft", "nsf",
            "maintenance", "service charge", "late fee", "interest charge",
            "annual fee", "monthly fee", "transaction fee", "foreign transaction",
            "cash advance", "balance transfer", "wire fee", "stop payment",
        ),
        category="Fees & Charges",
        priority=10,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "office", "supplies", "business", "conference", "meeting",
            "software", "subscription", "professional", "consulting",
            "accounting", "legal", "marketing", "advertising", "printing",
        ),
        category="Business",
        priority=6,
        type=_E,
    ),
    CategoryRule(
        keywords=(
            "gift", "present", "donation", "charity", "nonprofit",
            "church", "religious", "contribution", "fundraiser",
            "wedding", "birthday", "anniversary", "holiday",
        ),
        category="Gifts & Donations",
        priority=5,
        type=_E,
    ),
)  # fmt: skip

INCOME_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        keywords=(
            "salary", "payroll", "wage", "pay", "direct deposit", "dd",
            "employer", "work", "job", "income", "earnings", "compensation",
            "bonus", "commission", "overtime", "tips", "gratuity",
        ),
        category="Salary",
        priority=10,
        type=_I,
    ),
    CategoryRule(
        keywords=(
            "freelance", "contract", "consulting", "gig", "project",
            "client", "invoice", "payment", "professional services",
            "independent contractor", "1099", "self employed",
        ),
        category="Freelance",
        priority=9,
        type=_I,
    ),
    CategoryRule(
        keywords=(
            "dividend", "interest", "investment", "stock", "bond",
            "mutual fund", "etf", "capital gains", "portfolio",
            "brokerage", "trading", "crypto", "cryptocurrency",
            "bitcoin", "ethereum", "retirement", "401k", "ira",
        ),
        category="Investment Returns",
        priority=8,
        type=_I,
    ),
    CategoryRule(
        keywords=(
            "business income", "sales", "revenue", "customer payment",
            "business deposit", "merchant", "stripe", "paypal business",
            "square", "invoice payment", "business transfer",
        ),
        category="Business Income",
        priority=7,
        type=_I,
    ),
    CategoryRule(
        keywords=(
            "refund", "return", "credit", "reimbursement", "rebate",
            "cashback", "cash back", "reward", "points redemption",
            "adjustment", "reversal", "chargeback", "dispute resolution",
        ),
        category="Refunds",
        priority=6,
        type=_I,
    ),
    CategoryRule(
        keywords=(
            "rent", "rental", "tenant", "property income", "lease",
            "airbnb host", "vrbo host", "property management",
        ),
        category="Rental Income",
        priority=6,
        type=_I,
    ),
)  # fmt: skip


@lru_cache(maxsize=2048)
def _word_pattern(keyword: str) -> re.Pattern[str]:
    return re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?![a-z0-9])")


def match_score(description: str, keywords: Iterable[str]) -> int:
    """Score ``keywords`` against an already-lowercased ``description``."""

    score = 0
    for keyword in keywords:
        if keyword not in description:
            continue
        score += 3 if _word_pattern(keyword).search(description) else 1
    return score


class Categorizer:
    """Pick a category for a description from keyword rules.

    The built-in tables are immutable. Custom rules go into a per-instance
    overlay; after each insertion the effective rule list for that type is
    the built-ins plus the overlay, stably sorted by descending priority.
    """

    def __init__(
        self,
        *,
        expense_rules: Sequence[CategoryRule] = EXPENSE_RULES,
        income_rules: Sequence[CategoryRule] = INCOME_RULES,
    ) -> None:
        self._base: dict[TransactionType, tuple[CategoryRule, ...]] = {
            TransactionType.EXPENSE: tuple(expense_rules),
            TransactionType.INCOME: tuple(income_rules),
        }
        self._custom: dict[TransactionType, list[CategoryRule]] = {
            TransactionType.EXPENSE: [],
            TransactionType.INCOME: [],
        }
        self._effective: dict[TransactionType, tuple[CategoryRule, ...]] = dict(self._base)

    def rules_for(self, tx_type: TransactionType) -> tuple[CategoryRule, ...]:
        return self._effective[TransactionType(tx_type)]

    @property
    def custom_rules(self) -> tuple[CategoryRule, ...]:
        return tuple(self._custom[TransactionType.EXPENSE]) + tuple(
            self._custom[TransactionType.INCOME]
        )

    def add_custom_rule(self, rule: CategoryRule) -> None:
        """Append ``rule`` to the overlay and re-sort its type by priority."""

        tx_type = rule.type
        self._custom[tx_type].append(rule)
        merged = list(self._base[tx_type]) + self._custom[tx_type]
        self._effective[tx_type] = tuple(sorted(merged, key=lambda r: -r.priority))
        _logger.info(
            "categorize:custom_rule_added type=%s category=%s priority=%d keywords=%d",
            tx_type.value,
            rule.category,
            rule.priority,
            len(rule.keywords),
        )

    def categorize(
        self,
        description: str,
        amount: Decimal | float,
        tx_type: TransactionType | None = None,
    ) -> str:
        """Return the best category for ``description``.

        When ``tx_type`` is omitted a positive ``amount`` means income.
        """

        if tx_type is None:
            tx_type = TransactionType.INCOME if amount > 0 else TransactionType.EXPENSE
        tx_type = TransactionType(tx_type)
        desc = description.lower().strip()

        best: CategoryRule | None = None
        best_total = 0
        for rule in self._effective[tx_type]:
            score = match_score(desc, rule.keywords)
            if score <= 0:
                continue
            total = score * rule.priority
            if best is None or total > best_total:
                best, best_total = rule, total
        if best is None:
            return default_category(tx_type)
        return best.category


_GENERIC_TERMS: tuple[str, ...] = ("transaction", "payment", "purchase", "debit", "credit")


def calculate_confidence(description: str, category: str) -> float:
    """Heuristic confidence for an automatically built transaction.

    Starts at 0.5, rewards longer descriptions and a non-default category,
    penalizes generic wording, and clamps to ``[0.1, 1.0]``.
    """

    confidence = 0.5
    if len(description) > 10:
        confidence += 0.1
    if len(description) > 20:
        confidence += 0.1
    if category not in ("Other", "Other Income"):
        confidence += 0.2
    lowered = description.lower()
    if any(term in lowered for term in _GENERIC_TERMS):
        confidence -= 0.1
    return round(max(0.1, min(1.0, confidence)), 2)


__all__ = [
    "EXPENSE_RULES",
    "INCOME_RULES",
    "Categorizer",
    "calculate_confidence",
    "match_score",
]
