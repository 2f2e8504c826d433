"""Fixed category lists and small name helpers.

Every transaction carries a category from the list that matches its type.
Lists are keyed by the plain type value (``"income"`` / ``"expense"``) so this
module stays importable from :mod:`finance_tracker.models` without a cycle.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Shopping",
    "Transportation",
    "Bills & Utilities",
    "Entertainment",
    "Healthcare",
    "Travel",
    "Education",
    "Business",
    "Personal Care",
    "Home & Garden",
    "Gifts & Donations",
    "Fees & Charges",
    "Other",
)

INCOME_CATEGORIES: tuple[str, ...] = (
    "Salary",
    "Freelance",
    "Business Income",
    "Investment Returns",
    "Rental Income",
    "Refunds",
    "Other Income",
)

_BY_TYPE: dict[str, tuple[str, ...]] = {
    "expense": EXPENSE_CATEGORIES,
    "income": INCOME_CATEGORIES,
}

_DEFAULTS: dict[str, str] = {"expense": "Other", "income": "Other Income"}


def categories_for(tx_type: str) -> tuple[str, ...]:
    """Return the allowed categories for ``tx_type`` (``income``/``expense``)."""

    try:
        return _BY_TYPE[str(tx_type)]
    except KeyError:
        raise ValueError(f"unknown transaction type: {tx_type!r}") from None


def default_category(tx_type: str) -> str:
    categories_for(tx_type)
    return _DEFAULTS[str(tx_type)]


def is_valid_category(category: str, tx_type: str) -> bool:
    return category in categories_for(tx_type)


# ---------------------------
# Name normalization/validation
# ---------------------------

_ALLOWED_RE = re.compile(r"^[A-Za-z0-9 &\-/]+$")


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``."""

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str, *, min_len: int = 1, max_len: int = 64) -> NameValidation:
    """Validate a keyword or category label supplied by a user.

    Rules
    -----
    - Trim whitespace; enforce length bounds ``min_len..max_len``.
    - Allowed characters: letters, numbers, spaces, and ``& - /``.
    """

    s = normalize_name(name)
    if len(s) < min_len:
        return NameValidation(False, "must not be empty")
    if len(s) > max_len:
        return NameValidation(False, f"must be at most {max_len} characters")
    if not _ALLOWED_RE.match(s):
        return NameValidation(False, "may only contain letters, numbers, spaces, and & - /")
    return NameValidation(True)


def resolve_category(name: str, tx_type: str) -> str:
    """Map a user-typed category name to its canonical spelling.

    Matching ignores case and extra whitespace. Raises ``ValueError`` when the
    name is not one of the categories for ``tx_type``.
    """

    wanted = normalize_name(name).casefold()
    for candidate in categories_for(tx_type):
        if candidate.casefold() == wanted:
            return candidate
    allowed = ", ".join(categories_for(tx_type))
    raise ValueError(f"unknown {tx_type} category {name!r}; expected one of: {allowed}")


__all__ = [
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "NameValidation",
    "categories_for",
    "default_category",
    "is_valid_category",
    "normalize_name",
    "resolve_category",
    "validate_name",
]
