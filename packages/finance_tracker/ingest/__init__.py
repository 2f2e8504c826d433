"""Statement file ingestion (CSV, XLSX, TXT, PDF)."""

from .pdf import PAGE_MARKER, PdfPlumberExtractor, TextExtractor
from .upload import UploadedFile, detect_kind, parse_file, validate_upload

__all__ = [
    "PAGE_MARKER",
    "PdfPlumberExtractor",
    "TextExtractor",
    "UploadedFile",
    "detect_kind",
    "parse_file",
    "validate_upload",
]
