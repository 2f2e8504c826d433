# ruff: noqa: I001
"""CLI for the ``finance_tracker`` package.

Plain ``cmd_*`` handlers hold the command logic and return a process exit
code; the Typer commands below are thin wrappers around them. The root
callback loads a local ``.env`` with ``python-dotenv`` and configures logging
before any subcommand runs.
"""

from __future__ import annotations

import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging
from .models import FinancialSummary, MonthlyBudget, Transaction


# ---- Small module-level helpers used by CLI commands -------------------------


def _open_store(*, database_url: str | None, store_path: Path | None):
    # Deferred imports keep `--help` fast and free of DB side effects
    from .persistence import open_storage
    from .store import TransactionStore

    store = TransactionStore(open_storage(database_url=database_url, store_path=store_path))
    store.load()
    return store


def _format_row(tx: Transaction) -> str:
    return "\t".join(
        (
            tx.date.isoformat(),
            tx.type.value,
            f"{tx.amount:.2f}",
            tx.category,
            tx.description,
        )
    )


def _parse_money(raw: str) -> Decimal:
    try:
        value = Decimal(raw.replace("$", "").replace(",", "").strip())
    except InvalidOperation as e:
        raise ValueError(f"not a valid amount: {raw!r}") from e
    if not value.is_finite():
        raise ValueError(f"not a valid amount: {raw!r}")
    return value


def _render_summary(summary: FinancialSummary) -> list[str]:
    lines = [
        f"Total income:          {summary.total_income:>12.2f}",
        f"Total expenses (net):  {summary.total_expenses:>12.2f}",
        f"Total spending:        {summary.total_spending:>12.2f}",
        f"Net income:            {summary.net_income:>12.2f}",
        f"This month income:     {summary.monthly_income:>12.2f}",
        f"This month expenses:   {summary.monthly_expenses:>12.2f}",
        f"Last month expenses:   {summary.last_month_expenses:>12.2f}",
        f"Debit card balance:    {summary.debit_card_balance:>12.2f}",
        f"Credit card balance:   {summary.credit_card_balance:>12.2f}",
    ]
    if summary.top_categories:
        lines.append("Top categories:")
        for cat in summary.top_categories:
            lines.append(
                f"  {cat.category}\t{cat.amount:.2f}\t{cat.percentage:.1f}%\t{cat.count}"
            )
    lines.append("Monthly trends:")
    for trend in summary.monthly_trends:
        lines.append(
            f"  {trend.month}\t{trend.income:.2f}\t{trend.expenses:.2f}\t{trend.net:.2f}"
        )
    return lines


def _render_budget(budget: MonthlyBudget) -> list[str]:
    status = "OVER BUDGET" if budget.is_over_budget else "within budget"
    lines = [
        f"Monthly budget:        {budget.total_budget:>12.2f}",
        f"Actual spending:       {budget.actual_spending:>12.2f}",
        f"Remaining:             {budget.remaining:>12.2f}",
        f"Spent:                 {budget.percentage_spent:>11.1f}% ({status})",
    ]
    if budget.category_breakdown:
        lines.append("By category:")
        for cat in budget.category_breakdown:
            lines.append(
                f"  {cat.category}\t{cat.amount:.2f}\t{cat.percentage:.1f}%\t{cat.count}"
            )
    return lines


# ---- Command handlers --------------------------------------------------------


def cmd_parse(file_path: str) -> int:
    """Parse a statement file and print one tab-separated row per transaction.

    Columns: ``date, type, amount, category, description``. Nothing is stored.
    """

    from .errors import StatementError
    from .ingest import UploadedFile, parse_file

    try:
        transactions = parse_file(UploadedFile.from_path(file_path))
    except FileNotFoundError:
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        return 1
    except StatementError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for tx in transactions:
        print(_format_row(tx))
    return 0


def cmd_import(
    file_path: str, *, database_url: str | None = None, store_path: Path | None = None
) -> int:
    """Parse a statement file and add its transactions to the store."""

    from .errors import StatementError
    from .ingest import UploadedFile, parse_file

    try:
        transactions = parse_file(UploadedFile.from_path(file_path))
    except FileNotFoundError:
        print(f"Error: File not found: {file_path}", file=sys.stderr)
        return 1
    except StatementError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        store = _open_store(database_url=database_url, store_path=store_path)
        result = store.add_transactions(transactions)
    except Exception as e:
        print(f"Error: failed to update the transaction store: {e}", file=sys.stderr)
        return 1

    print(f"Imported {len(result.added)} transactions ({len(result.skipped)} duplicates skipped).")
    return 0


def cmd_add(
    *,
    on: str,
    description: str,
    amount: str,
    tx_type: str,
    category: str | None = None,
    database_url: str | None = None,
    store_path: Path | None = None,
) -> int:
    """Record a manual transaction and print its row."""

    from .normalizers import parse_date

    when = parse_date(on)
    if when is None:
        print(f"Error: not a valid date: {on!r}", file=sys.stderr)
        return 1
    try:
        value = _parse_money(amount)
        store = _open_store(database_url=database_url, store_path=store_path)
        tx = store.add_manual_transaction(
            date=when,
            description=description,
            amount=value,
            type=tx_type,
            category=category,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: failed to update the transaction store: {e}", file=sys.stderr)
        return 1

    print(f"{tx.id}\t{_format_row(tx)}")
    return 0


def cmd_summary(
    *,
    today: date | None = None,
    database_url: str | None = None,
    store_path: Path | None = None,
) -> int:
    """Print the financial summary over everything in the store."""

    try:
        store = _open_store(database_url=database_url, store_path=store_path)
        summary = store.get_financial_summary(today=today)
    except Exception as e:
        print(f"Error: failed to load the transaction store: {e}", file=sys.stderr)
        return 1

    for line in _render_summary(summary):
        print(line)
    return 0


def cmd_budget(
    *,
    target: str | None = None,
    today: date | None = None,
    database_url: str | None = None,
    store_path: Path | None = None,
) -> int:
    """Print this month's spending against the budget target."""

    try:
        value = _parse_money(target) if target is not None else None
        store = _open_store(database_url=database_url, store_path=store_path)
        budget = store.get_monthly_budget(value, today=today)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: failed to load the transaction store: {e}", file=sys.stderr)
        return 1

    for line in _render_budget(budget):
        print(line)
    return 0


def cmd_set_balance(
    amount: str, *, database_url: str | None = None, store_path: Path | None = None
) -> int:
    try:
        value = _parse_money(amount)
        store = _open_store(database_url=database_url, store_path=store_path)
        store.set_debit_card_balance(value)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: failed to update the transaction store: {e}", file=sys.stderr)
        return 1
    print(f"Debit card balance set to {store.get_debit_card_balance():.2f}")
    return 0


def cmd_ask(
    question: str, *, database_url: str | None = None, store_path: Path | None = None
) -> int:
    """Ask the finance assistant a question about the stored transactions."""

    import os

    from .assistant import ask_assistant

    if not os.getenv("OPENAI_API_KEY"):
        print("Error: OPENAI_API_KEY is not set in the environment.", file=sys.stderr)
        return 1

    try:
        store = _open_store(database_url=database_url, store_path=store_path)
        recent = store.get_all_transactions()
        summary = store.get_financial_summary() if recent else None
        answer = ask_assistant(question, summary=summary, recent_transactions=recent)
    except Exception as e:
        print(f"Error: assistant request failed: {e}", file=sys.stderr)
        return 1

    print(answer)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Extract transactions from bank statements (CSV, XLSX, TXT, PDF), keep them in a "
        "local store and summarize spending. Loads settings from a local .env."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter defaults).
FILE_ARGUMENT = typer.Argument(
    ...,
    help="Statement file (.csv, .xlsx, .txt or .pdf)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
STORE_PATH_OPTION: OptionInfo = typer.Option(
    "--store-path", help="Override FT_STORE_PATH for the JSON store."
)


def _parse_as_of(as_of: str | None) -> date | None:
    if as_of is None:
        return None
    from .normalizers import parse_date

    today = parse_date(as_of)
    if today is None:
        print(f"Error: not a valid date: {as_of!r}", file=sys.stderr)
        raise typer.Exit(1)
    return today


@app.command("parse")
def parse_cmd(file_path: Annotated[Path, FILE_ARGUMENT]) -> None:
    """Print the transactions found in a statement file."""

    raise typer.Exit(cmd_parse(str(file_path)))


@app.command("import")
def import_cmd(
    file_path: Annotated[Path, FILE_ARGUMENT],
    *,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
) -> None:
    """Parse a statement file and add new transactions to the store."""

    raise typer.Exit(
        cmd_import(str(file_path), database_url=database_url, store_path=store_path)
    )


@app.command("add")
def add_cmd(
    *,
    on: Annotated[str, typer.Option("--date", help="Transaction date, e.g. 2024-03-15")],
    description: Annotated[str, typer.Option("--description", help="Merchant or memo")],
    amount: Annotated[str, typer.Option("--amount", help="Amount (magnitude)")],
    tx_type: Annotated[str, typer.Option("--type", help="income or expense")] = "expense",
    category: Annotated[
        str | None, typer.Option("--category", help="Category (auto-detected when omitted)")
    ] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
) -> None:
    """Add a manual transaction."""

    raise typer.Exit(
        cmd_add(
            on=on,
            description=description,
            amount=amount,
            tx_type=tx_type,
            category=category,
            database_url=database_url,
            store_path=store_path,
        )
    )


@app.command("summary")
def summary_cmd(
    *,
    as_of: Annotated[
        str | None, typer.Option("--as-of", help="Reference date (defaults to today)")
    ] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
) -> None:
    """Print the financial summary."""

    today = _parse_as_of(as_of)
    raise typer.Exit(cmd_summary(today=today, database_url=database_url, store_path=store_path))


@app.command("budget")
def budget_cmd(
    *,
    target: Annotated[
        str | None,
        typer.Option("--target", help="Monthly target (falls back to FT_MONTHLY_BUDGET)."),
    ] = None,
    as_of: Annotated[
        str | None, typer.Option("--as-of", help="Reference date (defaults to today)")
    ] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
) -> None:
    """Compare this month's spending with the budget target."""

    today = _parse_as_of(as_of)
    raise typer.Exit(
        cmd_budget(target=target, today=today, database_url=database_url, store_path=store_path)
    )


@app.command("set-balance")
def set_balance_cmd(
    amount: Annotated[str, typer.Argument(help="Current debit card balance")],
    *,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
) -> None:
    """Record the current debit card balance."""

    raise typer.Exit(cmd_set_balance(amount, database_url=database_url, store_path=store_path))


@app.command("ask")
def ask_cmd(
    question: Annotated[str, typer.Argument(help="Question about your finances")],
    *,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    store_path: Annotated[Path | None, STORE_PATH_OPTION] = None,
) -> None:
    """Ask the finance assistant (OpenAI Responses API)."""

    raise typer.Exit(cmd_ask(question, database_url=database_url, store_path=store_path))


@app.callback()
def _root(
    *,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override FINANCE_TRACKER_LOG_LEVEL."),
    ] = None,
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps variables already set in the environment
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    app()
