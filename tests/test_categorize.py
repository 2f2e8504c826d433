from decimal import Decimal

import pytest

from finance_tracker.categorize import (
    EXPENSE_RULES,
    INCOME_RULES,
    Categorizer,
    calculate_confidence,
    match_score,
)
from finance_tracker.models import CategoryRule, TransactionType

E = TransactionType.EXPENSE
I = TransactionType.INCOME  # noqa: E741


@pytest.mark.parametrize(
    ("description", "tx_type", "expected"),
    [
        ("Starbucks Coffee", E, "Food & Dining"),
        ("SHELL OIL 57442", E, "Transportation"),
        ("NETFLIX.COM", E, "Entertainment"),
        ("Electric Company", E, "Bills & Utilities"),
        ("ATM fee", E, "Fees & Charges"),
        ("Zzyzx Qqq", E, "Other"),
        ("Direct Deposit Payroll ACME", I, "Salary"),
        ("Zzyzx Qqq", I, "Other Income"),
    ],
)
def test_builtin_rules(description: str, tx_type: TransactionType, expected: str) -> None:
    assert Categorizer().categorize(description, Decimal("10.00"), tx_type) == expected


def test_type_defaults_from_amount_sign() -> None:
    c = Categorizer()
    assert c.categorize("Acme payroll", Decimal("1500")) == "Salary"
    assert c.categorize("Starbucks", Decimal("-4.50")) == "Food & Dining"


def test_categorization_is_deterministic() -> None:
    results = {Categorizer().categorize("Uber trip downtown", 12, E) for _ in range(5)}
    assert results == {"Transportation"}


def test_whole_word_hits_outscore_substrings() -> None:
    assert match_score("coffee shop", ("coffee", "offee")) == 4
    assert match_score("coffee shop", ("tea",)) == 0


def test_tie_keeps_earliest_rule() -> None:
    rules = (
        CategoryRule(keywords=("widget",), category="Shopping", priority=5, type=E),
        CategoryRule(keywords=("widget",), category="Travel", priority=5, type=E),
    )
    assert Categorizer(expense_rules=rules).categorize("widget", 1, E) == "Shopping"


def test_custom_rule_applies_only_to_its_categorizer() -> None:
    c = Categorizer()
    c.add_custom_rule(
        CategoryRule(keywords=("acme widgets",), category="Business", priority=10, type=E)
    )
    assert c.categorize("ACME WIDGETS LLC", 99, E) == "Business"
    assert len(c.custom_rules) == 1
    assert c.rules_for(E)[0].priority == 10
    assert Categorizer().categorize("ACME WIDGETS LLC", 99, E) == "Other"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"keywords": ("gym",), "category": "Entertainment", "priority": 11, "type": E},
        {"keywords": ("gym",), "category": "Salary", "priority": 5, "type": E},
        {"keywords": ("Gym",), "category": "Entertainment", "priority": 5, "type": E},
        {"keywords": (), "category": "Entertainment", "priority": 5, "type": E},
    ],
)
def test_invalid_rules_are_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        CategoryRule(**kwargs)


def test_builtin_tables_are_typed() -> None:
    assert all(r.type is E for r in EXPENSE_RULES)
    assert all(r.type is I for r in INCOME_RULES)


def test_calculate_confidence() -> None:
    assert calculate_confidence("Starbucks Coffee", "Food & Dining") == 0.8
    assert calculate_confidence("Payment", "Other") == 0.4
    assert calculate_confidence("A very long merchant description here", "Shopping") == 0.9
