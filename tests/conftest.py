"""Pytest configuration for test isolation.

The transaction store writes to ``FT_STORE_PATH`` (default
``./.finance_tracker/store.json``) unless ``DATABASE_URL`` selects the SQL
backend. A developer's own ``.env`` or shell may set either one, so tests
could read or overwrite real data.

To keep tests hermetic, an autouse fixture points the store at the test's own
temporary directory and removes ``DATABASE_URL`` from the environment.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Make the workspace packages importable without an editable install
_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in (str(_ROOT / "packages"), str(_ROOT / "libs/db/src"), str(_ROOT))
    if p not in sys.path
]


@pytest.fixture(autouse=True)
def _isolate_store(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Force a per-test JSON store and disable the SQL backend."""

    store_root = tmp_path / "store"
    store_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("FT_STORE_PATH", os.fspath(store_root / "store.json"))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("FT_OWNER_ID", raising=False)
    monkeypatch.delenv("FT_MONTHLY_BUDGET", raising=False)


@pytest.fixture(autouse=True)
def _dispose_engines():
    """Close pooled SQLite connections opened by a test."""

    yield
    from db.client import dispose_engines

    dispose_engines()
