"""Public interface for the ``finance_tracker`` package.

This module exposes the package's entry points and public models as the
stable import surface. There is no runtime logic here, only re-exports.
"""

from .assistant import ask_assistant
from .categorize import Categorizer, calculate_confidence
from .classifier import classify_type
from .errors import (
    ExtractionError,
    InputError,
    NoTransactionsFoundError,
    StatementError,
    TransactionNotFoundError,
)
from .ingest import PdfPlumberExtractor, TextExtractor, UploadedFile, parse_file
from .models import (
    Candidate,
    CategoryRule,
    CategorySummary,
    FinancialSummary,
    MonthlyTrend,
    StoreDocument,
    Transaction,
    TransactionSource,
    TransactionType,
)
from .normalizers import parse_amount, parse_date
from .ocr_cleaner import clean_ocr_text
from .persistence import JsonFileStorage, SqlStorage, Storage, open_storage
from .pipeline import extract_transactions
from .prompting import build_financial_context
from .store import IngestResult, TransactionStore
from .summary import compute_financial_summary

__all__ = [
    # Entry points
    "parse_file",
    "extract_transactions",
    "clean_ocr_text",
    "parse_amount",
    "parse_date",
    "classify_type",
    "calculate_confidence",
    "compute_financial_summary",
    "build_financial_context",
    "ask_assistant",
    "open_storage",
    # Components
    "Categorizer",
    "PdfPlumberExtractor",
    "TextExtractor",
    "UploadedFile",
    "TransactionStore",
    "IngestResult",
    "Storage",
    "JsonFileStorage",
    "SqlStorage",
    # Models / types
    "Transaction",
    "TransactionType",
    "TransactionSource",
    "Candidate",
    "CategoryRule",
    "CategorySummary",
    "MonthlyTrend",
    "FinancialSummary",
    "StoreDocument",
    # Errors
    "StatementError",
    "InputError",
    "ExtractionError",
    "NoTransactionsFoundError",
    "TransactionNotFoundError",
]
