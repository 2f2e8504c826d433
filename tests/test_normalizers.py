from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.corrections import DEFAULT_CORRECTIONS
from finance_tracker.normalizers import (
    clean_description,
    format_amount,
    infer_statement_year,
    normalize_description,
    parse_amount,
    parse_date,
)

# ---- Amounts -----------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("$1,234.56", Decimal("1234.56")),
        ("1234", Decimal("12.34")),
        ("-5.75", Decimal("-5.75")),
        ("(12.50)", Decimal("-12.50")),
        ("25.00-", Decimal("-25.00")),
        ("−42.10", Decimal("-42.10")),
        ("+ 19.99", Decimal("19.99")),
        ("1.234,56", Decimal("1234.56")),
        ("741,25", Decimal("741.25")),
        ("1,234", Decimal("1234.00")),
        ("5", Decimal("5.00")),
        ("ail", Decimal("7.41")),
        ("S4.11", Decimal("54.11")),
    ],
)
def test_parse_amount_reads_statement_formats(raw: str, expected: Decimal) -> None:
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "0.00", "O.00", "$", "1.2.3"])
def test_parse_amount_rejects_unreadable_or_zero(raw: str | None) -> None:
    assert parse_amount(raw) is None


def test_parse_amount_keeps_integers_whole_without_reconstruction() -> None:
    assert parse_amount("1234", reconstruct_decimal=False) == Decimal("1234.00")
    assert parse_amount("-45", reconstruct_decimal=False) == Decimal("-45.00")


def test_parse_amount_uses_overridden_garbled_tokens() -> None:
    table = DEFAULT_CORRECTIONS.with_overrides(garbled_amounts={"zzl": "3.33"})
    assert parse_amount("zzl", table) == Decimal("3.33")
    assert parse_amount("zzl") is None


def test_parse_amount_rounds_half_up_to_cents() -> None:
    assert parse_amount("2.345") == Decimal("2.35")


def test_format_amount() -> None:
    assert format_amount(Decimal("5")) == "5.00"
    assert format_amount(Decimal("-1234.5")) == "-1234.50"


# ---- Dates -------------------------------------------------------------------


def test_iso_and_us_dates_agree() -> None:
    assert parse_date("2024-03-05") == parse_date("03/05/2024") == date(2024, 3, 5)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("03/05/24", date(2024, 3, 5)),
        ("03-05-2024", date(2024, 3, 5)),
        ("12/31/99", date(1999, 12, 31)),
        ("31/12/2024", date(2024, 12, 31)),
        ("Mar 5, 2024", date(2024, 3, 5)),
        ("September 14 2023", date(2023, 9, 14)),
    ],
)
def test_parse_date_formats(raw: str, expected: date) -> None:
    assert parse_date(raw, today=date(2025, 1, 1)) == expected


def test_parse_date_short_form_uses_default_year() -> None:
    assert parse_date("06/03", default_year=2023) == date(2023, 6, 3)


@pytest.mark.parametrize("raw", [None, "", "not a date", "02/30/2024"])
def test_parse_date_returns_none_for_invalid(raw: str | None) -> None:
    assert parse_date(raw) is None


def test_infer_statement_year_prefers_most_frequent() -> None:
    text = "Statement 01/31/2023\n01/02/2023 A 1.00\n01/03/2023 B 2.00\nPrinted 02/01/2024"
    assert infer_statement_year(text, today=date(2024, 6, 1)) == 2023


def test_infer_statement_year_ignores_future_years_and_falls_back() -> None:
    today = date(2024, 6, 1)
    assert infer_statement_year("Expires 01/01/2031", today=today) == 2024
    assert infer_statement_year("06/03 06/04 COFFEE 4.50", today=today) == 2024


# ---- Descriptions ------------------------------------------------------------


def test_clean_description_drops_prefixes_and_title_cases() -> None:
    assert clean_description("POS  STARBUCKS   STORE") == "Starbucks Store"
    assert clean_description("CHECK 1042 JOHN SMITH") == "John Smith"
    assert clean_description("*** amazon mktplace") == "Amazon Mktplace"


def test_normalize_description() -> None:
    assert normalize_description("  Starbucks #123 - Store!  ") == "starbucks 123 store"
