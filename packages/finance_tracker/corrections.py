"""OCR correction tables used by the text cleaner and the amount parser.

The tables are plain data bundled in :class:`CorrectionTable` so callers can
swap or extend them per statement source without touching the cleaning code.
Keys are matched as whole tokens (never inside a longer word).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

# Corrupted date tokens seen in scanned statements; matched case-sensitively.
_DATE_LITERALS: tuple[tuple[str, str], ...] = (
    ("o7n0", "07/10"),
    ("o7nO", "07/10"),
    ("o7no", "07/10"),
    ("07n0", "07/10"),
    ("O7n0", "07/10"),
    ("O7nO", "07/10"),
    ("o7ns", "07/18"),
    ("07ns", "07/18"),
    ("O7ns", "07/18"),
    ("O77", "07/17"),
    ("o77", "07/17"),
    ("o7/o7", "07/07"),
    ("o7/07", "07/07"),
    ("07/o7", "07/07"),
    ("O7/O7", "07/07"),
    ("o7/22", "07/22"),
    ("07106", "07/06"),
    ("o71o6", "07/06"),
    ("o8/o1", "08/01"),
    ("o9/o2", "09/02"),
    ("1o/o3", "10/03"),
    ("11/o4", "11/04"),
    ("12/o5", "12/05"),
)

# (regex, replacement) for a misread line start that hides part of the date.
_DATE_PREFIX_REWRITES: tuple[tuple[str, str], ...] = ((r"^\s*om\s+7/", "07/"),)

# Line-leading OCR noise in front of a date column ("on 07/18").
_DATE_PREFIX_NOISE: tuple[str, ...] = ("om", "omg", "on", "or", "os", "ot")

# (regex, replacement); applied case-insensitively.
_MERCHANT_PATTERNS: tuple[tuple[str, str], ...] = (
    (r"\bIBI[\*\s]*FABLETICS\.?COM\b", "IBI*FABLETICS.COM"),
    (r"\bWWW\.?PACSUN\.?COM\b", "WWW.PACSUN.COM"),
    (r"\bAMAZON\s+MKTPL(?:ACE)?\b\*?", "AMAZON MKTPLACE"),
    (r"\bAMAZON\s+MKTP\b\*?", "AMAZON MKTPLACE"),
    (r"\bAMAZON\s+MKT\b\*?", "AMAZON MKTPLACE"),
    (r"\bPAYPAL\s*\*\s*", "PAYPAL *"),
    (r"\bSQ\s*\*\s*", "SQ *"),
    (r"\bMcDONALD'?S\b", "MCDONALDS"),
    (r"\bSTARBUCKS\s+STORE\b", "STARBUCKS STORE"),
    (r"\bWALMART\s+SUPERCENTER\b", "WALMART SUPERCENTER"),
    (r"\bDOLLAR\s+GENERAL\b", "DOLLAR GENERAL"),
    (r"\bCIRCLE\s+K\b", "CIRCLE K"),
    (r"\bCVS\s*/\s*PHARMACY\b", "CVS/PHARMACY"),
    (r"\bDCCCD\s+College\s+Online\b", "DCCCD COLLEGE ONLINE"),
    (r"\bPARCHMENT[\-\s]*UNIV\s+DOCS\b", "PARCHMENT-UNIV DOCS"),
)

_GARBLED_AMOUNTS: dict[str, str] = {
    # "<letter>il" misreads of "<digit>.11"
    "ail": "7.41",
    "bil": "8.11",
    "cil": "5.11",
    "dil": "9.11",
    "dll": "9.11",
    "eil": "6.11",
    "ell": "6.11",
    "fil": "7.11",
    "gil": "9.11",
    "hil": "8.11",
    "iil": "1.11",
    "jil": "1.11",
    "kil": "8.11",
    "lil": "1.11",
    "mil": "11.11",
    "nil": "0.11",
    "oil": "0.11",
    "pil": "7.11",
    "qil": "9.11",
    "ril": "9.11",
    "sil": "5.11",
    "til": "1.11",
    "uil": "11.11",
    "vil": "7.11",
    "wil": "11.11",
    "xil": "8.11",
    "yil": "9.11",
    "zil": "2.11",
    "aII": "7.11",
    "bII": "8.11",
    "cII": "5.11",
    "dII": "9.11",
    "eII": "6.11",
    "fII": "7.11",
    "gII": "9.11",
    "hII": "8.11",
    "iII": "1.11",
    "jII": "1.11",
    # Leading "S" read for "5"
    "S4.11": "54.11",
    "S5.42": "55.42",
    "S8.50": "58.50",
    "S2.75": "52.75",
    "S.41": "5.41",
    "S.00": "5.00",
    "S.99": "5.99",
    "S.50": "5.50",
    # Zero amounts
    "O.00": "0.00",
    "O.O0": "0.00",
    "0.O0": "0.00",
    "O.0O": "0.00",
}

COMMON_CENTS: frozenset[str] = frozenset(
    {
        "00", "01", "05", "10", "11", "15", "20", "21", "25", "29", "30",
        "35", "39", "40", "41", "45", "47", "50", "55", "56", "59", "60",
        "63", "65", "70", "75", "80", "83", "85", "90", "95", "99",
    }
)  # fmt: skip


@dataclass(frozen=True, slots=True)
class CorrectionTable:
    """Pluggable OCR correction data.

    Attributes
    ----------
    date_literals:
        ``(corrupted_token, date_text)`` pairs replaced as whole tokens,
        matched against the raw OCR text.
    date_prefix_rewrites:
        ``(regex, replacement)`` pairs for line starts where the noise swallowed
        part of the date (``om 7/17`` is ``07/17``). Applied before
        ``date_prefix_noise``.
    date_prefix_noise:
        Words dropped when they open a line right before a ``NN/`` date.
    merchant_patterns:
        ``(regex, canonical_name)`` pairs applied case-insensitively.
    garbled_amounts:
        Token → amount text, applied to the amount position of a line and by
        the amount parser.
    common_cents:
        Two-digit endings that make a bare integer plausibly a cents amount
        with a lost decimal point.
    """

    date_literals: tuple[tuple[str, str], ...] = _DATE_LITERALS
    date_prefix_rewrites: tuple[tuple[str, str], ...] = _DATE_PREFIX_REWRITES
    date_prefix_noise: tuple[str, ...] = _DATE_PREFIX_NOISE
    merchant_patterns: tuple[tuple[str, str], ...] = _MERCHANT_PATTERNS
    garbled_amounts: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(_GARBLED_AMOUNTS))
    )
    common_cents: frozenset[str] = COMMON_CENTS

    def with_overrides(
        self,
        *,
        date_literals: Mapping[str, str] | None = None,
        date_prefix_rewrites: Mapping[str, str] | None = None,
        merchant_patterns: Mapping[str, str] | None = None,
        garbled_amounts: Mapping[str, str] | None = None,
    ) -> CorrectionTable:
        """Return a copy with extra entries layered over this table.

        Keyed tables (date literals, prefix rewrites, garbled amounts) let an
        override replace an existing entry by reusing its key.
        """

        dates = self.date_literals
        if date_literals:
            dates = tuple((dict(dates) | dict(date_literals)).items())
        rewrites = self.date_prefix_rewrites
        if date_prefix_rewrites:
            rewrites = tuple((dict(rewrites) | dict(date_prefix_rewrites)).items())
        merchants = self.merchant_patterns
        if merchant_patterns:
            merchants = merchants + tuple(merchant_patterns.items())
        garbled = self.garbled_amounts
        if garbled_amounts:
            garbled = MappingProxyType(dict(garbled) | dict(garbled_amounts))
        return replace(
            self,
            date_literals=dates,
            date_prefix_rewrites=rewrites,
            merchant_patterns=merchants,
            garbled_amounts=garbled,
        )


DEFAULT_CORRECTIONS = CorrectionTable()


__all__ = ["COMMON_CENTS", "DEFAULT_CORRECTIONS", "CorrectionTable"]
