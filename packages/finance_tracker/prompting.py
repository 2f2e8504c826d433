"""Prompt construction for the finance chat assistant.

The assistant sees a plain-text rendering of the current
:class:`~finance_tracker.models.FinancialSummary` plus the most recent
transactions. Rendering is deterministic so identical data yields an
identical prompt.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from .models import FinancialSummary, Transaction

RECENT_LIMIT = 10

NO_DATA_CONTEXT = (
    "The user hasn't uploaded any financial data yet. Provide general financial advice "
    "and suggest they upload their bank statements to get personalized insights."
)


def _usd(value: Decimal) -> str:
    return f"${value:,.2f}"


def build_system_instructions() -> str:
    """Return the system instructions for the finance assistant."""

    return (
        "You are a personal finance assistant. Answer using the user's actual transaction "
        "data from the context provided. Be specific and reference their real spending "
        "patterns, categories and amounts when relevant. Keep answers conversational and "
        "practical. When you calculate something, show your work."
    )


def build_financial_context(
    summary: FinancialSummary | None,
    recent_transactions: Sequence[Transaction] = (),
) -> str:
    """Render the summary payload the assistant answers from.

    Sections, in order: overall summary, top spending categories, up to
    ``RECENT_LIMIT`` recent transactions, then the monthly trends. Returns
    :data:`NO_DATA_CONTEXT` when there is no summary.
    """

    if summary is None:
        return NO_DATA_CONTEXT

    lines: list[str] = [
        "FINANCIAL CONTEXT FOR USER:",
        "",
        "OVERALL FINANCIAL SUMMARY:",
        f"- Total Income: {_usd(summary.total_income)}",
        f"- Total Expenses: {_usd(summary.total_expenses)}",
        f"- Net Income: {_usd(summary.net_income)}",
        f"- Current Month Income: {_usd(summary.monthly_income)}",
        f"- Current Month Expenses: {_usd(summary.monthly_expenses)}",
        f"- Debit Card Balance: {_usd(summary.debit_card_balance)}",
        f"- Credit Card Balance (billing cycle): {_usd(summary.credit_card_balance)}",
        "",
        "TOP SPENDING CATEGORIES:",
    ]
    if summary.top_categories:
        for i, cat in enumerate(summary.top_categories, start=1):
            lines.append(
                f"{i}. {cat.category}: {_usd(cat.amount)} "
                f"({cat.percentage:.1f}% of total expenses, {cat.count} transactions)"
            )
    else:
        lines.append("No spending categories available yet.")

    lines += ["", "RECENT TRANSACTIONS:"]
    recent = list(recent_transactions)[:RECENT_LIMIT]
    if recent:
        for i, tx in enumerate(recent, start=1):
            lines.append(
                f"{i}. {tx.date.isoformat()}: {tx.description} - {_usd(tx.amount)} "
                f"({tx.type.value}, {tx.category})"
            )
    else:
        lines.append("No recent transactions available.")

    lines += ["", f"MONTHLY TRENDS (Last {len(summary.monthly_trends)} months):"]
    if summary.monthly_trends:
        for trend in summary.monthly_trends:
            lines.append(
                f"{trend.month}: Income {_usd(trend.income)}, "
                f"Expenses {_usd(trend.expenses)}, Net {_usd(trend.net)}"
            )
    else:
        lines.append("No monthly trend data available.")

    return "\n".join(lines)


def build_user_content(context: str, question: str) -> str:
    return f"{context}\n\nUser Question: {question.strip()}\n"


__all__ = [
    "NO_DATA_CONTEXT",
    "RECENT_LIMIT",
    "build_financial_context",
    "build_system_instructions",
    "build_user_content",
]
