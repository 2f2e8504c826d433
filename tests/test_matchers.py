import pytest

from finance_tracker.banks import profile_by_tag
from finance_tracker.matchers import (
    STRATEGIES,
    advanced,
    fallback,
    formatted_statement,
    is_header_line,
    is_skippable_line,
    match_formatted_line,
    numeric_scan,
    tabular,
)

# ---- Skipping ----------------------------------------------------------------


@pytest.mark.parametrize(
    "line",
    [
        "short 1",
        "no digits on this line at all",
        "=== PAGE 2 ===",
        "Page 3 of 7",
        "Statement Period 06/01/2024 - 06/30/2024",
        "New Balance $1,234.56",
        "Minimum Payment Due 35.00",
        "Total fees for this period 0.00",
        "Annual Percentage Rate (APR) 24.99%",
        "Cash Advance fee 10.00 applied",
        "------------------------------",
        "Date   Description   Amount   2024",
    ],
)
def test_skippable_lines(line: str) -> None:
    assert is_skippable_line(line)


@pytest.mark.parametrize(
    "line",
    [
        "03/15/2024 STARBUCKS COFFEE 5.75",
        "06/12/2024 ATM WITHDRAWAL MAIN ST 100.00",
        "06/14/2024 ACH TRANSFER SAVINGS 250.00",
    ],
)
def test_transaction_lines_are_not_skipped(line: str) -> None:
    assert not is_skippable_line(line)


def test_header_line_needs_no_money_for_keyword_rule() -> None:
    assert is_header_line("Transaction Date  Description  Amount")
    assert not is_header_line("06/12/2024 ATM WITHDRAWAL 100.00")
    assert is_header_line("Account # ending 4343")


# ---- Tabular -----------------------------------------------------------------


def test_tabular_reads_columns_after_header() -> None:
    lines = [
        "Checking statement",
        "Date  Description  Amount",
        "03/15/2024  STARBUCKS COFFEE  -5.75",
        "03/16/2024  PAYROLL ACME INC  2,000.00",
        "",
    ]
    found = tabular(lines)
    assert [(c.date_text, c.description, c.amount_text) for c in found] == [
        ("03/15/2024", "STARBUCKS COFFEE", "-5.75"),
        ("03/16/2024", "PAYROLL ACME INC", "2,000.00"),
    ]
    assert [c.line_no for c in found] == [2, 3]
    assert {c.strategy for c in found} == {"tabular"}


def test_tabular_uses_profile_column_labels() -> None:
    lines = ["Date  Payee  Withdrawal", "03/15/2024  CITY WATER DEPT  45.10"]
    assert tabular(lines) == []
    found = tabular(lines, profile_by_tag("BANK_OF_AMERICA"))
    assert len(found) == 1
    assert found[0].amount_text == "45.10"


# ---- Formatted statement -----------------------------------------------------


def test_formatted_line_with_reference_and_account() -> None:
    found = match_formatted_line(
        "06/03 06/04 IBI*FABLETICS.COM 844-3225384 CA 4343 7230 28.21", 7
    )
    assert found is not None
    assert found.date_text == "06/03"
    assert found.description == "IBI*FABLETICS.COM 844-3225384 CA"
    assert found.amount_text == "28.21"
    assert found.line_no == 7
    assert found.strategy == "formatted_statement"


def test_formatted_line_short_forms() -> None:
    two_dates = match_formatted_line("06/05 06/06 SHELL OIL 57442 40.00", 0)
    assert two_dates is not None and two_dates.description == "SHELL OIL 57442"
    one_date = match_formatted_line("06/05 TARGET STORE 1,204.99", 0)
    assert one_date is not None and one_date.amount_text == "1,204.99"
    undated = match_formatted_line("AMAZON MARKETPLACE ORDER 19.99", 0)
    assert undated is not None and undated.date_text is None


def test_formatted_line_desc_only_form_not_used_for_dated_lines() -> None:
    assert match_formatted_line("06/05 06/06 ???? 12.00", 0) is None


def test_formatted_statement_skips_summary_lines() -> None:
    lines = ["New Balance Total 1,234.56", "06/05 TARGET STORE 19.99"]
    found = formatted_statement(lines)
    assert [c.line_no for c in found] == [1]


# ---- Advanced ----------------------------------------------------------------


def test_advanced_check_line_puts_number_in_description() -> None:
    found = advanced(["06/07/2024 CHECK 1042 JOHN SMITH 150.00"])
    assert len(found) == 1
    assert found[0].description == "CHECK 1042 JOHN SMITH"
    assert found[0].amount_text == "150.00"
    assert found[0].date_text == "06/07/2024"


def test_advanced_prefixed_lines_keep_prefix() -> None:
    found = advanced(["06/08/2024 pos Corner Market #12 -23.40"])
    assert len(found) == 1
    assert found[0].description == "pos Corner Market #12"
    assert found[0].amount_text == "-23.40"


def test_advanced_iso_date_line() -> None:
    found = advanced(["2024-06-09 Electric Company Online 88.12"])
    assert len(found) == 1
    assert found[0].date_text == "2024-06-09"


# ---- Fallback and numeric scan -----------------------------------------------


def test_fallback_month_name_dates() -> None:
    found = fallback(["Jun 10, 2024 Bookstore purchase 18.75"])
    assert len(found) == 1
    assert found[0].date_text == "Jun 10, 2024"
    assert found[0].description == "Bookstore purchase"


def test_fallback_undated_line() -> None:
    found = fallback(["Gym membership monthly 45.00"])
    assert len(found) == 1
    assert found[0].date_text is None
    assert found[0].amount_text == "45.00"


def test_numeric_scan_takes_last_decimal_after_date() -> None:
    found = numeric_scan(["Ref 88 on 06/11/2024 Hardware 3 items 42.17 bal"])
    assert len(found) == 1
    assert found[0].date_text == "06/11/2024"
    assert found[0].amount_text == "42.17"
    assert found[0].description == "Ref 88 on Hardware 3 items bal"


def test_strategies_order() -> None:
    assert [name for name, _ in STRATEGIES] == [
        "tabular",
        "formatted_statement",
        "advanced",
        "fallback",
        "numeric_scan",
    ]
