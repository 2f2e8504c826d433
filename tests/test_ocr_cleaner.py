from dataclasses import replace

import pytest

from finance_tracker.corrections import DEFAULT_CORRECTIONS
from finance_tracker.ocr_cleaner import clean_ocr_line, clean_ocr_text


def test_line_count_is_preserved() -> None:
    text = "06/03 COFFEE 4.50\r\n\r\nnoise\rmore\n"
    assert len(clean_ocr_text(text).split("\n")) == 5


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        # digit/letter confusion
        ("07/15 AMAZON 12.5O", "07/15 AMAZON 12.50"),
        ("07/15 TARGET l2.99", "07/15 TARGET 12.99"),
        # corrupted date literals and leading noise
        ("o7n0 STARBUCKS STORE 5.75", "07/10 STARBUCKS STORE 5.75"),
        ("07106 07/07 SHELL OIL 40.00", "07/06 07/07 SHELL OIL 40.00"),
        ("om 7/17 CVS PHARMACY 9.99", "07/17 CVS PHARMACY 9.99"),
        ("O77 CVS 9.99", "07/17 CVS 9.99"),
        ("O7nO STARBUCKS 5.75", "07/10 STARBUCKS 5.75"),
        ("O7106 SHELL OIL 40.00", "07/06 SHELL OIL 40.00"),
        ("on 07/18 07/19 TARGET 22.10", "07/18 07/19 TARGET 22.10"),
        # merchant canonicalization
        ("06/03 IBI FABLETICS.COM 28.21", "06/03 IBI*FABLETICS.COM 28.21"),
        ("06/05 Amazon Mktp* 12.00", "06/05 AMAZON MKTPLACE 12.00"),
        # amount symbols
        ("07/15 REFUND 25.00-", "07/15 REFUND -25.00"),
        ("07/15 GROCERY =42.10", "07/15 GROCERY 42.10"),
        ("07/15 CAFE 741,25", "07/15 CAFE 741.25"),
        ("07/15 HOTEL 1,234,56", "07/15 HOTEL 1234.56"),
        ("07/15 GAS −40.00", "07/15 GAS -40.00"),
        # garbled amount tokens and lost decimal points
        ("07/15 GROCERY ail", "07/15 GROCERY 7.41"),
        ("07/15 COFFEE 575", "07/15 COFFEE 5.75"),
        # whitespace and quotes
        ("07/15     JOE’S    DINER     8.00", "07/15  JOE'S  DINER  8.00"),
    ],
)
def test_clean_ocr_line(raw: str, expected: str) -> None:
    assert clean_ocr_line(raw) == expected


def test_bare_integer_left_alone_when_not_plausible_cents() -> None:
    # "12" is not a common cents ending, so "1012" is not rewritten
    assert clean_ocr_line("07/15 ORDER 1012") == "07/15 ORDER 1012"


def test_year_after_month_name_is_not_an_amount() -> None:
    line = "07/15 Statement closing Jan 15, 2000"
    assert clean_ocr_line(line) == line


def test_lines_without_leading_date_keep_integers() -> None:
    assert clean_ocr_line("Reference 575") == "Reference 575"


def test_custom_correction_table_is_used() -> None:
    table = DEFAULT_CORRECTIONS.with_overrides(date_literals={"x7x9": "07/09"})
    assert clean_ocr_text("x7x9 COFFEE 4.50", table) == "07/09 COFFEE 4.50"
    assert clean_ocr_text("x7x9 COFFEE 4.50") == "x7x9 COFFEE 4.50"


def test_never_raises_on_odd_input() -> None:
    assert clean_ocr_text("") == ""
    assert clean_ocr_text("\x00\x07\t") == ""


def test_date_prefix_rewrites_come_from_the_table() -> None:
    line = "om 7/17 CVS PHARMACY 9.99"
    no_rewrites = replace(DEFAULT_CORRECTIONS, date_prefix_rewrites=())
    # Without the rewrite only the leading noise word is dropped.
    assert clean_ocr_line(line, no_rewrites) == "7/17 CVS PHARMACY 9.99"

    table = DEFAULT_CORRECTIONS.with_overrides(date_prefix_rewrites={r"^\s*om\s+7/": "08/"})
    assert clean_ocr_line(line, table) == "08/17 CVS PHARMACY 9.99"
    assert len(table.date_prefix_rewrites) == 1
