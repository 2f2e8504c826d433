from __future__ import annotations

import datetime as dt
from decimal import Decimal
from pathlib import Path

from finance_tracker.ingest import UploadedFile, parse_file
from finance_tracker.models import TransactionType
from finance_tracker.persistence import SqlStorage
from finance_tracker.store import TransactionStore

from tests.helpers.db import bootstrap_sqlite_db, read_ledger_document

_DATA = Path(__file__).resolve().parents[1] / "data"


def test_e2e_statement_upload_into_sql_store_is_idempotent(tmp_path: Path) -> None:
    # -------------------------
    # Input (fixture file path)
    # -------------------------
    upload = UploadedFile.from_path(_DATA / "boa_june_statement.txt")

    # -------------------------
    # DB bootstrap
    # -------------------------
    db_url = bootstrap_sqlite_db(tmp_path / "ft-e2e.db")
    store = TransactionStore(SqlStorage(database_url=db_url, owner_id="e2e"))
    store.load()

    # -------------------------
    # Parse and import twice
    # -------------------------
    first = store.add_transactions(parse_file(upload, today=dt.date(2024, 7, 1)))
    second = store.add_transactions(parse_file(upload, today=dt.date(2024, 7, 1)))
    assert len(first.added) == 3
    assert second.added == ()
    assert len(second.skipped) == 3

    # -------------------------
    # Expected rows (card payment dropped, credits become refunds)
    # -------------------------
    got = {(t.date, t.type, t.amount, t.category) for t in store.get_all_transactions()}
    assert (dt.date(2024, 6, 12), TransactionType.INCOME, Decimal("25.99"), "Refunds") in got
    assert (
        dt.date(2024, 6, 5),
        TransactionType.EXPENSE,
        Decimal("6.45"),
        "Food & Dining",
    ) in got
    assert {t.amount for t in store.get_all_transactions()} == {
        Decimal("25.99"),
        Decimal("28.21"),
        Decimal("6.45"),
    }

    # -------------------------
    # Persisted document and summary
    # -------------------------
    raw = read_ledger_document(database_url=db_url, owner_id="e2e")
    assert raw is not None and len(raw["transactions"]) == 3

    reopened = TransactionStore(SqlStorage(database_url=db_url, owner_id="e2e"))
    reopened.load()
    summary = reopened.get_financial_summary(today=dt.date(2024, 6, 25))
    assert summary.total_expenses == Decimal("8.67")
    assert summary.total_spending == Decimal("60.65")
    assert summary.total_income == Decimal("0.00")
    assert summary.credit_card_balance == Decimal("34.66")
