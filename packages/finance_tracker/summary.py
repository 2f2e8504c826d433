"""Aggregate a list of transactions into a :class:`FinancialSummary`.

Pure functions over an iterable of transactions and a reference date, so
the store and the CLI can share them and tests can pin ``today``.

Definitions
-----------
- actual expenses: ``expense`` transactions that are not credit-card bill
  payments (paying the card is moving money, not spending it);
- returns: ``income`` transactions that read like a refund or return;
- income: every other ``income`` transaction.

``total_expenses`` is actual expenses net of returns; ``total_spending`` is
the gross figure (actual expenses plus returns).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation

from .classifier import is_credit_card_bill_payment, is_payment_to_you, is_return_or_refund
from .models import (
    CategorySummary,
    FinancialSummary,
    MonthlyBudget,
    MonthlyTrend,
    Transaction,
    TransactionType,
    quantize_cents,
)

_ZERO = Decimal("0")
_TOP_CATEGORIES = 5
_TREND_MONTHS = 6
_BILLING_DAY = 19


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return quantize_cents(sum((t.amount for t in transactions), _ZERO))


def _add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_bounds(today: date, offset: int = 0) -> tuple[date, date]:
    """First and last day of the month ``offset`` months from ``today``'s month."""

    year, month = _add_months(today.year, today.month, offset)
    start = date(year, month, 1)
    next_year, next_month = _add_months(year, month, 1)
    return start, date(next_year, next_month, 1) - timedelta(days=1)


def billing_cycle(today: date) -> tuple[date, date]:
    """The 19th of last month through the 19th of this month, both inclusive."""

    year, month = _add_months(today.year, today.month, -1)
    return date(year, month, _BILLING_DAY), date(today.year, today.month, _BILLING_DAY)


def in_range(transactions: Iterable[Transaction], start: date, end: date) -> list[Transaction]:
    return [t for t in transactions if start <= t.date <= end]


def _expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type is TransactionType.EXPENSE]


def _actual_expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in _expenses(transactions) if not is_credit_card_bill_payment(t.description)]


def _returns(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [
        t
        for t in transactions
        if t.type is TransactionType.INCOME and is_return_or_refund(t.description)
    ]


def _income(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [
        t
        for t in transactions
        if t.type is TransactionType.INCOME and not is_return_or_refund(t.description)
    ]


def actual_spending(
    transactions: Iterable[Transaction],
    start: date | None = None,
    end: date | None = None,
) -> Decimal:
    """Sum expenses, optionally within ``[start, end]``, skipping inbound payments.

    Expense rows that read like money paid to the user (payroll, transfers
    in, refunds received) are left out even when mis-typed as expenses.
    """

    expenses = _expenses(transactions)
    if start is not None and end is not None:
        expenses = in_range(expenses, start, end)
    return _total(t for t in expenses if not is_payment_to_you(t.description))


def top_categories(
    actual_expenses: Sequence[Transaction], limit: int | None = _TOP_CATEGORIES
) -> tuple[CategorySummary, ...]:
    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for t in actual_expenses:
        totals[t.category] = totals.get(t.category, _ZERO) + t.amount
        counts[t.category] = counts.get(t.category, 0) + 1
    grand = sum(totals.values(), _ZERO)
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return tuple(
        CategorySummary(
            category=category,
            amount=quantize_cents(amount),
            percentage=round(float(amount / grand * 100), 2) if grand > 0 else 0.0,
            count=counts[category],
        )
        for category, amount in ranked
    )


def monthly_trends(
    transactions: Sequence[Transaction], today: date, months: int = _TREND_MONTHS
) -> tuple[MonthlyTrend, ...]:
    """Income, expenses and net per month for the last ``months`` months, oldest first."""

    trends: list[MonthlyTrend] = []
    for offset in range(-(months - 1), 1):
        start, end = month_bounds(today, offset)
        month_txs = in_range(transactions, start, end)
        income = _total(t for t in month_txs if t.type is TransactionType.INCOME)
        expenses = _total(_expenses(month_txs))
        trends.append(
            MonthlyTrend(
                month=start.strftime("%b %Y"),
                income=income,
                expenses=expenses,
                net=income - expenses,
            )
        )
    return tuple(trends)


def compute_financial_summary(
    transactions: Iterable[Transaction],
    *,
    debit_card_balance: Decimal = _ZERO,
    today: date | None = None,
) -> FinancialSummary:
    today = today or date.today()
    txs = list(transactions)

    this_start, this_end = month_bounds(today)
    last_start, last_end = month_bounds(today, -1)
    this_month = in_range(txs, this_start, this_end)
    last_month = in_range(txs, last_start, last_end)
    cycle_start, cycle_end = billing_cycle(today)

    actual = _actual_expenses(txs)
    gross_expenses = _total(actual)
    total_returns = _total(_returns(txs))
    total_income = _total(_income(txs))
    net_expenses = gross_expenses - total_returns

    return FinancialSummary(
        total_income=total_income,
        total_expenses=net_expenses,
        total_spending=gross_expenses + total_returns,
        net_income=total_income - net_expenses,
        monthly_income=_total(_income(this_month)),
        monthly_expenses=_total(_actual_expenses(this_month)),
        last_month_expenses=_total(_actual_expenses(last_month)) - _total(_returns(last_month)),
        debit_card_balance=quantize_cents(Decimal(debit_card_balance)),
        this_month_spending=_total(_expenses(this_month)),
        last_month_spending=_total(_expenses(last_month)),
        credit_card_balance=_total(_expenses(in_range(txs, cycle_start, cycle_end))),
        top_categories=top_categories(actual),
        monthly_trends=monthly_trends(txs, today),
    )



def monthly_budget(
    transactions: Iterable[Transaction],
    target: Decimal | float | str,
    *,
    today: date | None = None,
) -> MonthlyBudget:
    """Measure this month's actual spending against ``target``.

    Raises
    ------
    ValueError
        ``target`` is not a positive amount.
    """

    try:
        raw = Decimal(str(target))
    except InvalidOperation as e:
        raise ValueError(f"not a valid budget target: {target!r}") from e
    budget = quantize_cents(raw) if raw.is_finite() else _ZERO
    if budget <= 0:
        raise ValueError(f"budget target must be greater than zero, got {target!r}")
    start, end = month_bounds(today or date.today())
    spent = [
        t
        for t in _expenses(in_range(transactions, start, end))
        if not is_payment_to_you(t.description)
    ]
    total = _total(spent)
    return MonthlyBudget(
        total_budget=budget,
        actual_spending=total,
        remaining=budget - total,
        percentage_spent=round(float(total / budget * 100), 2),
        is_over_budget=total > budget,
        category_breakdown=top_categories(spent, limit=None),
    )


__all__ = [
    "actual_spending",
    "billing_cycle",
    "compute_financial_summary",
    "in_range",
    "month_bounds",
    "monthly_budget",
    "monthly_trends",
    "top_categories",
]
