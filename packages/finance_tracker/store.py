"""Transaction store: the single owner of the user's transaction set.

The store is constructed explicitly and handed a :class:`Storage` backend.
Call :meth:`TransactionStore.load` once at startup. After that every mutation
writes the full document back through the backend and then notifies
subscribers. There is no locking; the last write wins.
"""

from __future__ import annotations

import datetime as _dt
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .categories import is_valid_category
from .categorize import Categorizer
from .config import get_monthly_budget
from .duplicates import find_duplicate
from .errors import TransactionNotFoundError
from .logging_setup import get_logger
from .models import (
    FinancialSummary,
    MonthlyBudget,
    StoreDocument,
    Transaction,
    TransactionSource,
    TransactionType,
    new_transaction_id,
    quantize_cents,
)
from .persistence import Storage
from .summary import actual_spending as _actual_spending
from .summary import compute_financial_summary, in_range, monthly_budget

_logger = get_logger("finance_tracker.store")

type Listener = Callable[[], None]
type Unsubscribe = Callable[[], None]


@dataclass(frozen=True, slots=True)
class IngestResult:
    """Outcome of :meth:`TransactionStore.add_transactions`."""

    added: tuple[Transaction, ...]
    skipped: tuple[Transaction, ...]


class TransactionStore:
    """Owns the transaction list and the declared debit-card balance."""

    def __init__(self, storage: Storage, *, categorizer: Categorizer | None = None) -> None:
        self._storage = storage
        self._categorizer = categorizer or Categorizer()
        self._transactions: list[Transaction] = []
        self._debit_card_balance = Decimal("0")
        self._listeners: list[Listener] = []

    @property
    def categorizer(self) -> Categorizer:
        return self._categorizer

    # ------------------------------------------------------------------
    # Lifecycle and observers
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace in-memory state with what the backend holds (empty when nothing is stored)."""

        doc = self._storage.load() or StoreDocument()
        self._transactions = list(doc.transactions)
        self._debit_card_balance = doc.debit_card_balance
        _logger.info("store:loaded transactions=%d", len(self._transactions))
        self._notify()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register ``listener``; the returned callable removes it again."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _commit(self) -> None:
        self._storage.save(
            StoreDocument(
                transactions=list(self._transactions),
                debit_card_balance=self._debit_card_balance,
            )
        )
        self._notify()

    def _index_of(self, transaction_id: str) -> int:
        for idx, tx in enumerate(self._transactions):
            if tx.id == transaction_id:
                return idx
        raise TransactionNotFoundError(transaction_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_transactions(self, transactions: Iterable[Transaction]) -> IngestResult:
        """Append parsed transactions, skipping ones that duplicate stored rows.

        Each incoming row is compared only with what the store already held
        before this call; rows in one batch never knock each other out. A row
        whose category does not fit its type is re-categorized first.
        """

        existing = list(self._transactions)
        added: list[Transaction] = []
        skipped: list[Transaction] = []
        for tx in transactions:
            if not is_valid_category(tx.category, tx.type):
                tx = self._with_fields(
                    tx,
                    category=self._categorizer.categorize(tx.description, tx.amount, tx.type),
                )
            if find_duplicate(tx, existing) is not None:
                skipped.append(tx)
                continue
            added.append(tx)

        if added:
            self._transactions.extend(added)
            self._commit()
        _logger.info("store:ingested added=%d skipped=%d", len(added), len(skipped))
        return IngestResult(added=tuple(added), skipped=tuple(skipped))

    def add_manual_transaction(
        self,
        *,
        date: _dt.date,
        description: str,
        amount: Decimal | float | str,
        type: TransactionType | str,
        category: str | None = None,
    ) -> Transaction:
        """Record a user-entered transaction; ``amount`` is a magnitude."""

        tx_type = TransactionType(type)
        magnitude = quantize_cents(abs(Decimal(str(amount))))
        tx = Transaction(
            id=new_transaction_id(),
            date=date,
            description=description,
            amount=magnitude,
            type=tx_type,
            category=category or self._categorizer.categorize(description, magnitude, tx_type),
            source=TransactionSource.MANUAL,
        )
        self._transactions.append(tx)
        self._commit()
        _logger.info("store:manual_added id=%s category=%s", tx.id, tx.category)
        return tx

    def update_transaction(
        self,
        transaction_id: str,
        *,
        date: _dt.date | None = None,
        description: str | None = None,
        amount: Decimal | float | str | None = None,
        type: TransactionType | str | None = None,
        category: str | None = None,
    ) -> Transaction:
        """Apply edits to one transaction and re-run categorization.

        The category is recomputed from the edited description, amount and
        type unless ``category`` is given explicitly. A new ``amount`` is a
        magnitude; ``original_amount`` keeps its previous sign.
        """

        idx = self._index_of(transaction_id)
        current = self._transactions[idx]
        changes: dict[str, Any] = {}
        if date is not None:
            changes["date"] = date
        if description is not None:
            changes["description"] = description
        if type is not None:
            changes["type"] = TransactionType(type)
        if amount is not None:
            magnitude = quantize_cents(abs(Decimal(str(amount))))
            changes["amount"] = magnitude
            if current.original_amount is not None:
                changes["original_amount"] = (
                    -magnitude if current.original_amount < 0 else magnitude
                )

        new_type = changes.get("type", current.type)
        changes["category"] = category or self._categorizer.categorize(
            changes.get("description", current.description),
            changes.get("amount", current.amount),
            new_type,
        )

        updated = self._with_fields(current, **changes)
        self._transactions[idx] = updated
        self._commit()
        _logger.info("store:updated id=%s fields=%s", transaction_id, ",".join(sorted(changes)))
        return updated

    def delete_transaction(self, transaction_id: str) -> None:
        idx = self._index_of(transaction_id)
        del self._transactions[idx]
        self._commit()
        _logger.info("store:deleted id=%s", transaction_id)

    def set_debit_card_balance(self, balance: Decimal | float | str) -> None:
        value = Decimal(str(balance))
        if not value.is_finite():
            raise ValueError("debit card balance must be a finite number")
        self._debit_card_balance = quantize_cents(value)
        self._commit()

    def clear_all(self) -> None:
        """Drop every transaction and reset the debit-card balance."""

        self._transactions = []
        self._debit_card_balance = Decimal("0")
        self._commit()
        _logger.info("store:cleared")

    @staticmethod
    def _with_fields(tx: Transaction, **changes: Any) -> Transaction:
        # model_copy skips validation, so rebuild through the validators
        data = tx.model_dump()
        data.update(changes)
        return Transaction.model_validate(data)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_transactions(self) -> list[Transaction]:
        """All transactions, newest first (stable for equal dates)."""

        return sorted(self._transactions, key=lambda t: t.date, reverse=True)

    def get_transaction(self, transaction_id: str) -> Transaction:
        return self._transactions[self._index_of(transaction_id)]

    def get_transactions_by_date_range(self, start: _dt.date, end: _dt.date) -> list[Transaction]:
        return in_range(self._transactions, start, end)

    def get_transactions_by_category(self, category: str) -> list[Transaction]:
        return [t for t in self._transactions if t.category == category]

    def get_transactions_by_type(self, tx_type: TransactionType | str) -> list[Transaction]:
        wanted = TransactionType(tx_type)
        return [t for t in self._transactions if t.type is wanted]

    def get_debit_card_balance(self) -> Decimal:
        return self._debit_card_balance

    def actual_spending(
        self, start: _dt.date | None = None, end: _dt.date | None = None
    ) -> Decimal:
        return _actual_spending(self._transactions, start, end)

    def get_financial_summary(self, *, today: _dt.date | None = None) -> FinancialSummary:
        return compute_financial_summary(
            self._transactions,
            debit_card_balance=self._debit_card_balance,
            today=today,
        )

    def get_monthly_budget(
        self, target: Decimal | float | str | None = None, *, today: _dt.date | None = None
    ) -> MonthlyBudget:
        """Budget view for the current month; ``target`` defaults to ``FT_MONTHLY_BUDGET``."""

        return monthly_budget(
            self._transactions,
            get_monthly_budget() if target is None else target,
            today=today,
        )

    def __len__(self) -> int:
        return len(self._transactions)


__all__ = [
    "IngestResult",
    "Listener",
    "TransactionStore",
    "Unsubscribe",
]
