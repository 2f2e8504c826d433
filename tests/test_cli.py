from pathlib import Path

import pytest
from typer.testing import CliRunner

import finance_tracker.assistant as assistant_mod
from finance_tracker.cli import app
from tests.helpers.openai_stub import OpenAIStub

runner = CliRunner()

CSV_TEXT = "Date,Description,Amount\n03/15/2024,Starbucks Coffee,-5.75\n"


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # The root callback reads ./.env; keep it pointed at an empty directory.
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def statement_csv(tmp_path: Path) -> Path:
    path = tmp_path / "statement.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path


def test_parse_prints_rows(statement_csv: Path) -> None:
    result = runner.invoke(app, ["parse", str(statement_csv)])
    assert result.exit_code == 0, result.output
    assert "2024-03-15\texpense\t5.75\tFood & Dining\tStarbucks Coffee" in result.output


def test_parse_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["parse", str(tmp_path / "nope.csv")])
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_parse_rejects_unsupported_file(tmp_path: Path) -> None:
    path = tmp_path / "notes.docx"
    path.write_bytes(b"hello")
    result = runner.invoke(app, ["parse", str(path)])
    assert result.exit_code == 1
    assert "Error: Unsupported file type" in result.output


def test_import_twice_skips_duplicates(statement_csv: Path) -> None:
    first = runner.invoke(app, ["import", str(statement_csv)])
    assert first.exit_code == 0, first.output
    assert "Imported 1 transactions (0 duplicates skipped)." in first.output

    second = runner.invoke(app, ["import", str(statement_csv)])
    assert second.exit_code == 0, second.output
    assert "Imported 0 transactions (1 duplicates skipped)." in second.output


def test_import_into_explicit_store_path(statement_csv: Path, tmp_path: Path) -> None:
    target = tmp_path / "elsewhere" / "ledger.json"
    result = runner.invoke(app, ["import", str(statement_csv), "--store-path", str(target)])
    assert result.exit_code == 0, result.output
    assert target.exists()


def test_add_and_summary() -> None:
    added = runner.invoke(
        app,
        ["add", "--date", "2024-06-07", "--description", "Corner Cafe", "--amount", "12.50"],
    )
    assert added.exit_code == 0, added.output
    assert "2024-06-07\texpense\t12.50\tFood & Dining\tCorner Cafe" in added.output

    summary = runner.invoke(app, ["summary", "--as-of", "2024-06-25"])
    assert summary.exit_code == 0, summary.output
    assert "Total expenses (net):" in summary.output
    assert "Food & Dining\t12.50\t100.0%\t1" in summary.output
    assert "Jun 2024" in summary.output


@pytest.mark.parametrize(
    "args",
    [
        ["--date", "not-a-date", "--description", "Cafe", "--amount", "1"],
        ["--date", "2024-06-07", "--description", "Cafe", "--amount", "abc"],
        ["--date", "2024-06-07", "--description", "Cafe", "--amount", "1", "--type", "gift"],
        [
            "--date",
            "2024-06-07",
            "--description",
            "Cafe",
            "--amount",
            "1",
            "--category",
            "Salary",
        ],
    ],
)
def test_add_rejects_bad_input(args: list[str]) -> None:
    result = runner.invoke(app, ["add", *args])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_summary_rejects_bad_date() -> None:
    result = runner.invoke(app, ["summary", "--as-of", "someday"])
    assert result.exit_code == 1
    assert "Error: not a valid date" in result.output


def test_set_balance() -> None:
    result = runner.invoke(app, ["set-balance", "1,234.50"])
    assert result.exit_code == 0, result.output
    assert "Debit card balance set to 1234.50" in result.output

    bad = runner.invoke(app, ["set-balance", "lots"])
    assert bad.exit_code == 1


def test_ask_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    result = runner.invoke(app, ["ask", "How much did I spend?"])
    assert result.exit_code == 1
    assert "OPENAI_API_KEY" in result.output


def test_ask_prints_answer(monkeypatch: pytest.MonkeyPatch, statement_csv: Path) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    stub = OpenAIStub()
    monkeypatch.setattr(assistant_mod, "_create_client", lambda: stub)

    assert runner.invoke(app, ["import", str(statement_csv)]).exit_code == 0
    result = runner.invoke(app, ["ask", "Where does my money go?"])
    assert result.exit_code == 0, result.output
    assert "You spent the most on Food & Dining." in result.output
    assert "Starbucks Coffee" in stub.calls[0]["input"]


def test_budget_reports_spending_against_target() -> None:
    added = runner.invoke(
        app,
        ["add", "--date", "2024-06-07", "--description", "Corner Cafe", "--amount", "12.50"],
    )
    assert added.exit_code == 0, added.output

    under = runner.invoke(app, ["budget", "--as-of", "2024-06-25", "--target", "$100"])
    assert under.exit_code == 0, under.output
    assert "within budget" in under.output
    assert "Food & Dining\t12.50\t100.0%\t1" in under.output

    over = runner.invoke(app, ["budget", "--as-of", "2024-06-25", "--target", "10"])
    assert over.exit_code == 0, over.output
    assert "OVER BUDGET" in over.output


def test_budget_defaults_to_env_target(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FT_MONTHLY_BUDGET", "250")
    result = runner.invoke(app, ["budget"])
    assert result.exit_code == 0, result.output
    assert "250.00" in result.output
    assert "By category:" not in result.output


@pytest.mark.parametrize("target", ["abc", "0"])
def test_budget_rejects_bad_target(target: str) -> None:
    result = runner.invoke(app, ["budget", "--target", target])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_store_write_failures_exit_cleanly(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    target = str(blocker / "ledger.json")

    added = runner.invoke(
        app,
        [
            "add",
            "--date",
            "2024-06-07",
            "--description",
            "Corner Cafe",
            "--amount",
            "12.50",
            "--store-path",
            target,
        ],
    )
    assert added.exit_code == 1
    assert "Error: failed to update the transaction store" in added.output

    balance = runner.invoke(app, ["set-balance", "100", "--store-path", target])
    assert balance.exit_code == 1
    assert "Error: failed to update the transaction store" in balance.output


def test_corrupt_store_is_reported(tmp_path: Path) -> None:
    store_file = tmp_path / "ledger.json"
    store_file.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["set-balance", "100", "--store-path", str(store_file)])
    assert result.exit_code == 1
    assert "Error: Could not read transaction store" in result.output
