"""Data models for ``finance_tracker``.

``Transaction`` and ``StoreDocument`` are pydantic models because they cross
a persistence boundary (JSON file or a JSON column) and must validate on load.
Everything that only lives inside a parse run (``Candidate``) or is derived on
demand (``FinancialSummary``) is a frozen dataclass.
"""

from __future__ import annotations

import datetime as _dt
import math
import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import StrEnum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .categories import categories_for, is_valid_category

_CENTS = Decimal("0.01")


def quantize_cents(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def new_transaction_id() -> str:
    return uuid.uuid4().hex


class TransactionType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionSource(StrEnum):
    UPLOAD = "upload"
    MANUAL = "manual"


# Decimals stay exact in Python and are written as JSON numbers.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# ---------------------------------------------------------------------------
# Persisted records
# ---------------------------------------------------------------------------


class Transaction(BaseModel):
    """A normalized, categorized money movement.

    Invariants
    ----------
    - ``amount`` is quantized to cents and strictly positive.
    - ``original_amount`` (the signed figure read from the source) satisfies
      ``amount == abs(original_amount)`` when present.
    - ``category`` belongs to the category list of ``type``.
    - ``confidence`` lies in ``[0, 1]`` when present.

    Field names serialize as camelCase (``originalAmount``) for the JSON
    document layout.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    date: _dt.date
    description: str
    amount: Money
    type: TransactionType
    category: str
    source: TransactionSource = TransactionSource.UPLOAD
    original_amount: Money | None = None
    confidence: float | None = None

    @field_validator("id", "description")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @field_validator("amount")
    @classmethod
    def _positive_cents(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be finite")
        q = quantize_cents(v)
        if q <= 0:
            raise ValueError("amount must be greater than zero")
        return q

    @field_validator("original_amount")
    @classmethod
    def _signed_cents(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return None
        if not v.is_finite():
            raise ValueError("original_amount must be finite")
        return quantize_cents(v)

    @field_validator("confidence")
    @classmethod
    def _unit_interval(cls, v: float | None) -> float | None:
        if v is None:
            return None
        fv = float(v)
        if math.isfinite(fv) and 0.0 <= fv <= 1.0:
            return fv
        raise ValueError("confidence must be within [0,1]")

    @model_validator(mode="after")
    def _check_consistency(self) -> Transaction:
        if self.original_amount is not None and abs(self.original_amount) != self.amount:
            raise ValueError(
                f"amount {self.amount} does not match original_amount {self.original_amount}"
            )
        if not is_valid_category(self.category, self.type):
            allowed = ", ".join(categories_for(self.type))
            raise ValueError(
                f"category {self.category!r} is not a {self.type.value} category ({allowed})"
            )
        return self

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expenses negative."""

        return self.amount if self.type is TransactionType.INCOME else -self.amount

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class StoreDocument(BaseModel):
    """Persisted store layout: ``{"transactions": [...], "debitCardBalance": n}``."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    transactions: list[Transaction] = []
    debit_card_balance: Money = Decimal("0")

    @field_validator("debit_card_balance")
    @classmethod
    def _balance_cents(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("debit_card_balance must be finite")
        return quantize_cents(v)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Parse-time and derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Candidate:
    """A tentative (date, description, amount) triple pulled from one line.

    ``date_text`` is ``None`` for description+amount-only matches; the
    pipeline dates those with the parse context's ``today``. ``line_no`` is
    the 0-based index of the source line in the cleaned text, when known.
    """

    description: str
    amount_text: str
    date_text: str | None = None
    line_no: int | None = None
    strategy: str = ""


@dataclass(frozen=True, slots=True)
class CategoryRule:
    """Keyword rule used by :class:`finance_tracker.categorize.Categorizer`."""

    keywords: tuple[str, ...]
    category: str
    priority: int
    type: TransactionType

    def __post_init__(self) -> None:
        if not self.keywords:
            raise ValueError("a category rule needs at least one keyword")
        if any(not k or k != k.lower() or k != k.strip() for k in self.keywords):
            raise ValueError("rule keywords must be non-empty, trimmed, lowercase strings")
        if not 1 <= self.priority <= 10:
            raise ValueError(f"rule priority must be within 1..10, got {self.priority}")
        if not is_valid_category(self.category, self.type):
            raise ValueError(
                f"category {self.category!r} is not a {self.type.value} category"
            )


@dataclass(frozen=True, slots=True)
class CategorySummary:
    category: str
    amount: Decimal
    percentage: float
    count: int


@dataclass(frozen=True, slots=True)
class MonthlyTrend:
    month: str
    income: Decimal
    expenses: Decimal
    net: Decimal


@dataclass(frozen=True, slots=True)
class FinancialSummary:
    """Aggregate view over the store, computed on demand and never persisted.

    ``total_expenses`` is net of returns and excludes credit-card bill
    payments; ``total_spending`` is the gross figure (actual expenses plus
    returns). ``credit_card_balance`` covers the 19th-to-19th billing window.
    """

    total_income: Decimal
    total_expenses: Decimal
    total_spending: Decimal
    net_income: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    last_month_expenses: Decimal
    debit_card_balance: Decimal
    this_month_spending: Decimal
    last_month_spending: Decimal
    credit_card_balance: Decimal
    top_categories: tuple[CategorySummary, ...] = field(default_factory=tuple)
    monthly_trends: tuple[MonthlyTrend, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class MonthlyBudget:
    """This month's spending measured against a target.

    ``actual_spending`` counts the month's expenses minus anything that reads
    like money paid to the user; ``category_breakdown`` splits that figure by
    category, largest first, with percentages of ``actual_spending``.
    """

    total_budget: Decimal
    actual_spending: Decimal
    remaining: Decimal
    percentage_spent: float
    is_over_budget: bool
    category_breakdown: tuple[CategorySummary, ...] = field(default_factory=tuple)


__all__ = [
    "Candidate",
    "CategoryRule",
    "CategorySummary",
    "FinancialSummary",
    "Money",
    "MonthlyBudget",
    "MonthlyTrend",
    "StoreDocument",
    "Transaction",
    "TransactionSource",
    "TransactionType",
    "new_transaction_id",
    "quantize_cents",
]
