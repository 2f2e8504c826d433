"""Runtime settings read from the environment.

Values are read lazily on each call so tests can ``monkeypatch.setenv`` without
reloading modules. The CLI loads a local ``.env`` before any of these run.
"""

from __future__ import annotations

import os
from pathlib import Path

# Upload boundary
MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
MIN_EXTRACTED_CHARS: int = 100
SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".pdf", ".txt", ".xls", ".xlsx")
SUPPORTED_CONTENT_TYPES: tuple[str, ...] = (
    "text/csv",
    "application/csv",
    "application/pdf",
    "text/plain",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)

_DEFAULT_MAX_PDF_PAGES = 50
_DEFAULT_PAGE_TIMEOUT_SEC = 30.0
_DEFAULT_OWNER_ID = "default"
_DEFAULT_ASSISTANT_MODEL = "gpt-5"
_DEFAULT_MONTHLY_BUDGET = "375.20"


def _env_str(name: str) -> str | None:
    val = os.getenv(name)
    if val is None or not val.strip():
        return None
    return val.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def get_store_path() -> Path:
    """Return the JSON store location.

    Default: ``./.finance_tracker/store.json`` under the current directory.
    Override: ``FT_STORE_PATH``.
    """

    raw = _env_str("FT_STORE_PATH")
    if raw:
        return Path(raw).expanduser().resolve()
    return (Path.cwd() / ".finance_tracker" / "store.json").resolve()


def get_database_url() -> str | None:
    return _env_str("DATABASE_URL")


def get_owner_id() -> str:
    return _env_str("FT_OWNER_ID") or _DEFAULT_OWNER_ID


def get_max_pdf_pages() -> int:
    return _env_int("FT_MAX_PDF_PAGES", _DEFAULT_MAX_PDF_PAGES)


def get_pdf_page_timeout() -> float:
    return _env_float("FT_PDF_PAGE_TIMEOUT_SEC", _DEFAULT_PAGE_TIMEOUT_SEC)


def get_assistant_model() -> str:
    return _env_str("FT_ASSISTANT_MODEL") or _DEFAULT_ASSISTANT_MODEL


def get_monthly_budget() -> str:
    """Return the monthly spending target as text (``FT_MONTHLY_BUDGET``, default 375.20).

    Validation happens where the target is used, in
    :func:`finance_tracker.summary.monthly_budget`.
    """

    return _env_str("FT_MONTHLY_BUDGET") or _DEFAULT_MONTHLY_BUDGET


__all__ = [
    "MAX_UPLOAD_BYTES",
    "MIN_EXTRACTED_CHARS",
    "SUPPORTED_CONTENT_TYPES",
    "SUPPORTED_EXTENSIONS",
    "get_assistant_model",
    "get_database_url",
    "get_max_pdf_pages",
    "get_monthly_budget",
    "get_owner_id",
    "get_pdf_page_timeout",
    "get_store_path",
]
