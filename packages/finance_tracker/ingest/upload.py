"""File boundary: validate an uploaded statement and turn it into transactions.

Validation order is fixed and runs before any parsing: empty file, size
limit, supported type, then legacy ``.xls`` rejection. After parsing, zero
surviving transactions is an error rather than an empty result.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from pathlib import Path, PurePath

from ..categorize import Categorizer
from ..config import MAX_UPLOAD_BYTES, MIN_EXTRACTED_CHARS, SUPPORTED_EXTENSIONS
from ..errors import ExtractionError, InputError, NoTransactionsFoundError
from ..logging_setup import get_logger
from ..models import Candidate, Transaction
from ..pipeline import ParseContext, build_transaction, extract_transactions
from .adapters import csv_rows, xlsx_rows
from .pdf import PdfPlumberExtractor, TextExtractor

_logger = get_logger("finance_tracker.ingest")

_KIND_BY_CONTENT_TYPE: dict[str, str] = {
    "text/csv": "csv",
    "application/csv": "csv",
    "application/pdf": "pdf",
    "text/plain": "txt",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
}


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """An uploaded statement: original file name, raw bytes and optional MIME type."""

    name: str
    content: bytes
    content_type: str | None = None

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> UploadedFile:
        p = Path(path)
        return cls(name=p.name, content=p.read_bytes(), content_type=content_type)

    @property
    def size(self) -> int:
        return len(self.content)


def detect_kind(upload: UploadedFile) -> str:
    """Return ``csv``/``pdf``/``txt``/``xls``/``xlsx`` or raise :class:`InputError`."""

    suffix = PurePath(upload.name).suffix.lower()
    if suffix in SUPPORTED_EXTENSIONS:
        return suffix.lstrip(".")
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    kind = _KIND_BY_CONTENT_TYPE.get(content_type)
    if kind is None:
        raise InputError("Unsupported file type. Please upload CSV, XLSX, TXT, or PDF files.")
    return kind


def validate_upload(upload: UploadedFile) -> str:
    if upload.size == 0:
        raise InputError("File is empty. Please upload a file with transaction data.")
    if upload.size > MAX_UPLOAD_BYTES:
        raise InputError("File size too large. Maximum 10MB allowed.")
    kind = detect_kind(upload)
    if kind == "xls":
        raise InputError(
            "Legacy .xls workbooks are not supported. Please save the file as CSV or "
            "XLSX and upload again."
        )
    return kind


def _decode_text(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InputError("File is not valid UTF-8 text. Please upload a UTF-8 encoded file.") from e


def _build_rows(
    candidates: Iterable[Candidate], categorizer: Categorizer, today: date
) -> list[Transaction]:
    # Each spreadsheet row is its own transaction: no parse-time merging.
    ctx = ParseContext(statement_year=today.year, today=today, reconstruct_decimal=False)
    out: list[Transaction] = []
    for candidate in candidates:
        built = build_transaction(candidate, ctx, categorizer)
        if built is not None:
            out.append(built.transaction)
    return out


def parse_file(
    upload: UploadedFile,
    *,
    extractor: TextExtractor | None = None,
    categorizer: Categorizer | None = None,
    today: date | None = None,
) -> list[Transaction]:
    """Validate ``upload`` and return the transactions it contains.

    Raises
    ------
    InputError
        Empty, oversized, unsupported or undecodable input.
    ExtractionError
        PDF text could not be obtained, or too little text came back.
    NoTransactionsFoundError
        Parsing succeeded but nothing survived filtering.
    """

    kind = validate_upload(upload)
    categorizer = categorizer or Categorizer()
    today = today or date.today()
    _logger.info("ingest:start name=%s kind=%s bytes=%d", upload.name, kind, upload.size)

    if kind == "csv":
        transactions = _build_rows(
            csv_rows.to_candidates(_decode_text(upload.content)), categorizer, today
        )
    elif kind == "xlsx":
        transactions = _build_rows(xlsx_rows.to_candidates(upload.content), categorizer, today)
    elif kind == "txt":
        transactions = extract_transactions(
            _decode_text(upload.content), categorizer=categorizer, today=today
        )
    else:
        text = (extractor or PdfPlumberExtractor())(upload.content)
        if len(text.strip()) < MIN_EXTRACTED_CHARS:
            raise ExtractionError(
                "Could not extract enough text from the PDF. The file may be image-based or "
                "have an unusual format."
            )
        transactions = extract_transactions(text, categorizer=categorizer, today=today)

    if not transactions:
        raise NoTransactionsFoundError("the PDF" if kind == "pdf" else "the file")
    _logger.info("ingest:done name=%s transactions=%d", upload.name, len(transactions))
    return transactions


__all__ = ["UploadedFile", "detect_kind", "parse_file", "validate_upload"]
