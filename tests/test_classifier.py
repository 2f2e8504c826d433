from decimal import Decimal

import pytest

from finance_tracker.classifier import (
    classify_type,
    is_credit_card_bill_payment,
    is_non_spending_artifact,
    is_payment_to_you,
    is_return_or_refund,
)
from finance_tracker.models import TransactionType

E = TransactionType.EXPENSE
I = TransactionType.INCOME  # noqa: E741


@pytest.mark.parametrize(
    ("amount", "description", "expected"),
    [
        (-50, "Grocery Store", E),
        (200, "Direct Deposit Payroll", I),
        (-30, "Merchant Refund", I),
        (Decimal("100.00"), "Statement credit", I),
        (25, "Transfer to savings", E),
        (40, "Target", E),
        (-12, "Cashback bonus", I),
        (15, "Payment received thank you", I),
    ],
)
def test_classify_type(amount, description: str, expected: TransactionType) -> None:
    assert classify_type(amount, description) is expected


@pytest.mark.parametrize(
    "description",
    [
        "Payment From CHK 9192 Conf#9LUCGW20Z",
        "Total purchases",
        "PAYMENTS AND OTHER CREDITS",
        "New Balance",
        "12345",
        "ok",
        "transaction",
        "Balance transfer to card",
        "$10.00 $20.00",
    ],
)
def test_non_spending_artifacts(description: str) -> None:
    assert is_non_spending_artifact(description)


@pytest.mark.parametrize(
    "description",
    ["Starbucks Coffee", "Refund Amazon", "Payroll Acme Inc", "Shell Oil 57442"],
)
def test_real_transactions_are_not_artifacts(description: str) -> None:
    assert not is_non_spending_artifact(description)


def test_bill_payment_detection() -> None:
    assert is_credit_card_bill_payment("Online Payment Thank You")
    assert is_credit_card_bill_payment("PAYMENT - THANK YOU")
    assert is_credit_card_bill_payment("Autopay 06/15")
    assert not is_credit_card_bill_payment("Starbucks Coffee")


def test_returns_and_inbound_payments() -> None:
    assert is_return_or_refund("Amazon.com Return")
    assert is_return_or_refund("Statement credit adjustment")
    assert not is_return_or_refund("Amazon.com")
    assert is_payment_to_you("DIRECT DEPOSIT ACME")
    assert is_payment_to_you("Transfer from savings")
    assert not is_payment_to_you("Transfer to savings")
