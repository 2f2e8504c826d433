from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Ledger: ft_ledger_documents
# ---------------------------


class LedgerDocument(Base):
    """One transaction ledger per owner, stored as a single JSON document.

    ``document`` holds ``{"transactions": [...], "debitCardBalance": n}`` in
    the same camelCase layout as the JSON file backend.
    """

    __tablename__ = "ft_ledger_documents"

    owner_id: Mapped[str] = mapped_column(String, primary_key=True)
    document: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )
