# ruff: noqa: I001
"""Durable storage backends for the transaction store.

A backend stores one :class:`StoreDocument` (all transactions plus the
declared debit-card balance) and hands it back on load:

- :class:`JsonFileStorage` writes a JSON file. Writes target ``.tmp`` first
  and then ``os.replace`` into place, so a crash never leaves a torn file.
- :class:`SqlStorage` keeps one row per owner in ``ft_ledger_documents``
  (see ``db.models.ledger``) through the shared ``db.client`` session helpers.
"""

from __future__ import annotations

import contextlib
import json
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from db.client import session_scope
from db.models.ledger import LedgerDocument

from .config import get_database_url, get_owner_id, get_store_path
from .errors import StatementError
from .logging_setup import get_logger
from .models import StoreDocument

_logger = get_logger("finance_tracker.persistence")


class StorageError(StatementError):
    """A stored document exists but could not be read back."""


@runtime_checkable
class Storage(Protocol):
    def load(self) -> StoreDocument | None: ...

    def save(self, doc: StoreDocument) -> None: ...


class JsonFileStorage:
    """Store the ledger as a single JSON file at ``path``."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> StoreDocument | None:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return StoreDocument.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageError(f"Could not read transaction store at {self.path}: {e}") from e

    def save(self, doc: StoreDocument) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        # Write atomically, cleaning up the temp file on failure
        try:
            tmp.write_text(
                json.dumps(doc.to_json_dict(), ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp, self.path)
        except Exception:
            with contextlib.suppress(FileNotFoundError):
                tmp.unlink()
            raise
        _logger.debug(
            "persistence:saved backend=json path=%s transactions=%d",
            self.path,
            len(doc.transactions),
        )


class SqlStorage:
    """Store the ledger as one JSON row per owner via SQLAlchemy."""

    def __init__(self, *, database_url: str | None = None, owner_id: str | None = None) -> None:
        self.database_url = database_url
        self.owner_id = owner_id or get_owner_id()

    def load(self) -> StoreDocument | None:
        with session_scope(database_url=self.database_url) as session:
            row = session.get(LedgerDocument, self.owner_id)
            if row is None:
                return None
            raw = row.document
        try:
            return StoreDocument.model_validate(raw)
        except ValidationError as e:
            raise StorageError(
                f"Could not read transaction store for owner {self.owner_id!r}: {e}"
            ) from e

    def save(self, doc: StoreDocument) -> None:
        payload = doc.to_json_dict()
        with session_scope(database_url=self.database_url) as session:
            row = session.get(LedgerDocument, self.owner_id)
            if row is None:
                session.add(LedgerDocument(owner_id=self.owner_id, document=payload))
            else:
                row.document = payload
                row.updated_at = datetime.now(UTC)
        _logger.debug(
            "persistence:saved backend=sql owner=%s transactions=%d",
            self.owner_id,
            len(doc.transactions),
        )


def open_storage(
    *,
    database_url: str | None = None,
    store_path: str | os.PathLike[str] | None = None,
    owner_id: str | None = None,
) -> Storage:
    """Pick a backend: SQL when a database URL is configured, else the JSON file."""

    url = database_url or get_database_url()
    if url:
        return SqlStorage(database_url=url, owner_id=owner_id)
    return JsonFileStorage(store_path or get_store_path())


__all__ = [
    "JsonFileStorage",
    "SqlStorage",
    "Storage",
    "StorageError",
    "open_storage",
]
