import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError

from finance_tracker.models import StoreDocument, Transaction, TransactionType


def _tx(**overrides) -> Transaction:
    data = {
        "id": "t1",
        "date": dt.date(2024, 3, 15),
        "description": "Starbucks Coffee",
        "amount": Decimal("5.75"),
        "type": TransactionType.EXPENSE,
        "category": "Food & Dining",
    }
    data.update(overrides)
    return Transaction(**data)


def test_amount_is_quantized_and_positive() -> None:
    assert _tx(amount=Decimal("5.755")).amount == Decimal("5.76")
    with pytest.raises(ValidationError):
        _tx(amount=Decimal("0"))
    with pytest.raises(ValidationError):
        _tx(amount=Decimal("-5.75"))


def test_amount_must_match_original_amount() -> None:
    assert _tx(original_amount=Decimal("-5.75")).original_amount == Decimal("-5.75")
    with pytest.raises(ValidationError):
        _tx(original_amount=Decimal("-6.00"))


def test_category_must_fit_type() -> None:
    with pytest.raises(ValidationError):
        _tx(category="Salary")
    assert _tx(type=TransactionType.INCOME, category="Salary").signed_amount == Decimal("5.75")
    assert _tx().signed_amount == Decimal("-5.75")


def test_confidence_bounds() -> None:
    assert _tx(confidence=0.8).confidence == 0.8
    with pytest.raises(ValidationError):
        _tx(confidence=1.5)


def test_json_layout_is_camel_case() -> None:
    doc = StoreDocument(
        transactions=[_tx(original_amount=Decimal("-5.75"))], debit_card_balance=Decimal("12.5")
    )
    data = doc.to_json_dict()
    assert data["debitCardBalance"] == 12.5
    (tx,) = data["transactions"]
    assert tx["date"] == "2024-03-15"
    assert tx["originalAmount"] == -5.75
    assert tx["amount"] == 5.75
    assert tx["type"] == "expense"
    assert tx["source"] == "upload"
    assert StoreDocument.model_validate(data) == doc


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValidationError):
        _tx(merchant="x")
