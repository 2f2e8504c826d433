"""Exception types raised at the ``finance_tracker`` boundaries.

Per-line parse failures never surface as exceptions; they are logged at DEBUG
and the line is dropped. Only whole-request failures use these types.
"""

from __future__ import annotations


class StatementError(ValueError):
    """Base class for failures while turning a statement file into transactions."""


class InputError(StatementError):
    """The uploaded file was rejected before any parsing ran.

    Covers empty files, files over the size limit, unsupported types and text
    that cannot be decoded.
    """


class ExtractionError(StatementError):
    """Text could not be obtained from a document (PDF/OCR stage)."""


class NoTransactionsFoundError(StatementError):
    """Parsing completed but no transaction survived filtering."""

    def __init__(self, kind: str = "file") -> None:
        super().__init__(
            f"No valid transactions found in {kind}. Please check that this is a bank "
            "statement with transaction data."
        )
        self.kind = kind


class TransactionNotFoundError(KeyError):
    """A store operation referenced an unknown transaction id."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__(transaction_id)
        self.transaction_id = transaction_id

    def __str__(self) -> str:
        return f"transaction not found: {self.transaction_id!r}"


__all__ = [
    "ExtractionError",
    "InputError",
    "NoTransactionsFoundError",
    "StatementError",
    "TransactionNotFoundError",
]
