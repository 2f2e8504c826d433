import datetime as dt
import json
from decimal import Decimal

import pytest

from finance_tracker.errors import TransactionNotFoundError
from finance_tracker.models import StoreDocument, Transaction, TransactionSource, TransactionType
from finance_tracker.persistence import JsonFileStorage, StorageError
from finance_tracker.store import TransactionStore
from tests.helpers.transactions import make_tx


class RecordingStorage:
    """In-memory backend that counts saves."""

    def __init__(self, doc: StoreDocument | None = None) -> None:
        self.doc = doc
        self.saves = 0

    def load(self) -> StoreDocument | None:
        return self.doc

    def save(self, doc: StoreDocument) -> None:
        self.saves += 1
        self.doc = doc


@pytest.fixture()
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture()
def store(storage: RecordingStorage) -> TransactionStore:
    s = TransactionStore(storage)
    s.load()
    return s


def test_load_of_empty_backend_gives_empty_store(store: TransactionStore) -> None:
    assert len(store) == 0
    assert store.get_debit_card_balance() == Decimal("0")


def test_add_transactions_skips_reimports(store, storage) -> None:
    first = [make_tx("Whole Foods Market", "52.10"), make_tx("Shell Oil", "40.00")]
    result = store.add_transactions(first)
    assert len(result.added) == 2 and result.skipped == ()
    assert storage.saves == 1

    again = [
        make_tx("WHOLE FOODS MARKET", "52.10", on=dt.date(2024, 6, 6)),
        make_tx("Shell Oil", "40.00"),
    ]
    result = store.add_transactions(again)
    assert result.added == ()
    assert len(result.skipped) == 2
    assert storage.saves == 1
    assert len(store) == 2


def test_rows_in_one_batch_do_not_knock_each_other_out(store) -> None:
    result = store.add_transactions([make_tx("Coffee Shop", "4.50"), make_tx("Coffee Shop", "4.50")])
    assert len(result.added) == 2


def test_mismatched_category_is_recomputed(store) -> None:
    bogus = Transaction.model_construct(
        id="t1",
        date=dt.date(2024, 6, 5),
        description="Starbucks Coffee",
        amount=Decimal("5.75"),
        type=TransactionType.EXPENSE,
        category="Salary",
        source=TransactionSource.UPLOAD,
        original_amount=None,
        confidence=None,
    )
    (added,) = store.add_transactions([bogus]).added
    assert added.category == "Food & Dining"
    assert store.get_transaction("t1").category == "Food & Dining"


def test_add_manual_transaction(store, storage) -> None:
    tx = store.add_manual_transaction(
        date=dt.date(2024, 6, 7), description="Corner Cafe", amount="-12.5", type="expense"
    )
    assert tx.amount == Decimal("12.50")
    assert tx.source is TransactionSource.MANUAL
    assert tx.category == "Food & Dining"
    assert tx.original_amount is None
    assert storage.saves == 1


def test_manual_transaction_with_invalid_category_is_rejected(store) -> None:
    with pytest.raises(ValueError):
        store.add_manual_transaction(
            date=dt.date(2024, 6, 7),
            description="Paycheck",
            amount=100,
            type="income",
            category="Shopping",
        )
    assert len(store) == 0


def test_update_recategorizes_and_keeps_sign(store) -> None:
    original = make_tx(
        "Starbucks", "5.00", category="Food & Dining", original_amount=Decimal("-5.00")
    )
    store.add_transactions([original])

    updated = store.update_transaction(original.id, description="Shell Oil", amount="40")
    assert updated.id == original.id
    assert updated.category == "Transportation"
    assert updated.amount == Decimal("40.00")
    assert updated.original_amount == Decimal("-40.00")

    pinned = store.update_transaction(original.id, category="Travel")
    assert pinned.category == "Travel"
    assert pinned.description == "Shell Oil"


def test_update_type_switches_category_list(store) -> None:
    tx = store.add_manual_transaction(
        date=dt.date(2024, 6, 7), description="Acme Payroll", amount=900, type="expense"
    )
    updated = store.update_transaction(tx.id, type=TransactionType.INCOME)
    assert updated.type is TransactionType.INCOME
    assert updated.category == "Salary"


def test_unknown_ids_raise(store) -> None:
    with pytest.raises(TransactionNotFoundError):
        store.delete_transaction("missing")
    with pytest.raises(KeyError):
        store.update_transaction("missing", description="x")
    with pytest.raises(TransactionNotFoundError, match="missing"):
        store.get_transaction("missing")


def test_delete_transaction(store) -> None:
    tx = store.add_manual_transaction(
        date=dt.date(2024, 6, 7), description="Gym", amount=30, type="expense"
    )
    store.delete_transaction(tx.id)
    assert len(store) == 0


def test_subscribers_are_notified_until_unsubscribed(storage) -> None:
    store = TransactionStore(storage)
    calls: list[int] = []
    unsubscribe = store.subscribe(lambda: calls.append(len(store)))
    store.load()
    store.add_manual_transaction(
        date=dt.date(2024, 6, 7), description="Gym", amount=30, type="expense"
    )
    assert calls == [0, 1]
    unsubscribe()
    unsubscribe()
    store.clear_all()
    assert calls == [0, 1]


def test_debit_card_balance(store) -> None:
    store.set_debit_card_balance("1234.567")
    assert store.get_debit_card_balance() == Decimal("1234.57")
    with pytest.raises(ValueError):
        store.set_debit_card_balance("NaN")
    with pytest.raises(ValueError):
        store.set_debit_card_balance(float("inf"))


def test_clear_all_resets_everything(store) -> None:
    store.add_transactions([make_tx("Shell Oil", "40.00")])
    store.set_debit_card_balance(10)
    store.clear_all()
    assert len(store) == 0
    assert store.get_debit_card_balance() == Decimal("0")


def test_queries(store) -> None:
    store.add_transactions(
        [
            make_tx("Coffee", "4.00", on=dt.date(2024, 5, 30), category="Food & Dining"),
            make_tx("Rent", "1200.00", on=dt.date(2024, 6, 1), category="Home & Garden"),
            make_tx(
                "Payroll",
                "2000.00",
                on=dt.date(2024, 6, 1),
                type=TransactionType.INCOME,
                category="Salary",
            ),
            make_tx("Bagel", "3.00", on=dt.date(2024, 6, 2), category="Food & Dining"),
        ]
    )
    assert [t.description for t in store.get_all_transactions()] == [
        "Bagel",
        "Rent",
        "Payroll",
        "Coffee",
    ]
    assert len(store.get_transactions_by_category("Food & Dining")) == 2
    assert [t.description for t in store.get_transactions_by_type("income")] == ["Payroll"]
    june = store.get_transactions_by_date_range(dt.date(2024, 6, 1), dt.date(2024, 6, 30))
    assert {t.description for t in june} == {"Rent", "Payroll", "Bagel"}
    assert store.actual_spending() == Decimal("1207.00")
    assert store.actual_spending(dt.date(2024, 6, 1), dt.date(2024, 6, 30)) == Decimal("1203.00")


def test_monthly_budget_uses_env_target(store, monkeypatch: pytest.MonkeyPatch) -> None:
    store.add_transactions([make_tx("Shell Oil", "40.00", on=dt.date(2024, 6, 10))])
    today = dt.date(2024, 6, 25)

    default = store.get_monthly_budget(today=today)
    assert default.total_budget == Decimal("375.20")
    assert default.actual_spending == Decimal("40.00")

    monkeypatch.setenv("FT_MONTHLY_BUDGET", "30")
    assert store.get_monthly_budget(today=today).is_over_budget is True
    assert store.get_monthly_budget("100", today=today).remaining == Decimal("60.00")


# ---- JSON file backend -------------------------------------------------------


def test_json_round_trip(tmp_path) -> None:
    path = tmp_path / "nested" / "store.json"
    store = TransactionStore(JsonFileStorage(path))
    store.load()
    tx = make_tx("Shell Oil", "40.00", original_amount=Decimal("-40.00"), category="Transportation")
    store.add_transactions([tx])
    store.set_debit_card_balance("250.10")

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["debitCardBalance"] == 250.1
    assert raw["transactions"][0]["originalAmount"] == -40.0
    assert not path.with_suffix(".json.tmp").exists()

    reopened = TransactionStore(JsonFileStorage(path))
    reopened.load()
    assert reopened.get_all_transactions() == [tx]
    assert reopened.get_debit_card_balance() == Decimal("250.10")


def test_json_missing_file_loads_as_none(tmp_path) -> None:
    assert JsonFileStorage(tmp_path / "absent.json").load() is None


def test_json_corrupt_file_raises(tmp_path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStorage(path).load()
    path.write_text('{"transactions": [{"id": "x"}]}', encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStorage(path).load()
