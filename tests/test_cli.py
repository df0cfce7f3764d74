import json
from decimal import Decimal

import finance_tracker.main as cli
from finance_tracker.main import build_parser, main, run_command
from finance_tracker.validators import ValidationError

CSV_TEXT = (
    "Date,Title,Category,Type,Amount\n"
    '"11/5/2025","Salary","Salary","income","1000"\n'
    '"11/7/2025","Swiggy","Food","expense","400"\n'
)


def _run(storage, *argv):
    return run_command(build_parser().parse_args(list(argv)), storage)


def test_parse_dry_run(storage, store, capsys):
    assert _run(storage, "parse", "--dry-run", "Rs. 500 debited for Coffee at Starbucks on 05-11-2025") == 0
    assert "2025-11-05  Starbucks  Other  -500.00" in capsys.readouterr().out
    assert len(store) == 0


def test_parse_failure(storage, capsys):
    assert _run(storage, "parse", "no money here") == 1
    assert "Could not parse" in capsys.readouterr().out


def test_import_list_and_export(storage, tmp_path, capsys):
    path = tmp_path / "statement.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    assert _run(storage, "import", str(path)) == 0

    assert _run(storage, "list", "--type", "expense") == 0
    out = capsys.readouterr().out
    assert "Swiggy" in out
    assert "1 of 2 transactions" in out

    assert _run(storage, "list", "--json", "--sort", "amount", "--direction", "asc") == 0
    listed = json.loads(capsys.readouterr().out)
    assert [(row["title"], Decimal(row["amount"]), row["type"]) for row in listed] == [
        ("Swiggy", 400, "expense"),
        ("Salary", 1000, "income"),
    ]

    assert _run(storage, "export", "--format", "json", "--output-dir", str(tmp_path)) == 0
    assert (tmp_path / "finance_report.json").exists()


def test_import_missing_file(storage, tmp_path, capsys):
    assert _run(storage, "import", str(tmp_path / "nope.csv")) == 1
    assert "File not found" in capsys.readouterr().out


def test_summary_all_time(storage, tmp_path, capsys):
    path = tmp_path / "statement.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    _run(storage, "import", str(path))
    capsys.readouterr()

    assert _run(storage, "summary", "--period", "all") == 0
    out = capsys.readouterr().out
    assert "Balance:  600.00" in out
    assert "Food" in out


def test_goal_without_savings(storage, capsys):
    assert _run(storage, "goal", "1000") == 1
    assert "positive savings" in capsys.readouterr().out


def test_delete_unknown_id(storage, capsys):
    assert _run(storage, "delete", "does-not-exist") == 1
    assert "not found" in capsys.readouterr().out


def test_add_warns_when_balance_goes_negative(storage, store, capsys):
    assert _run(storage, "add", "Coffee", "150", "--date", "2025-11-05") == 0
    out = capsys.readouterr().out
    assert "Balance: 0.00 -> -150.00" in out
    assert "Insufficient funds for this expense!" in out
    [doc] = store.list()
    assert (doc["text"], doc["amount"], doc["category"], doc["type"]) == ("Coffee", Decimal("-150"), "Food", "expense")

    assert _run(storage, "add", "Salary", "1000", "--type", "income", "--category", "Salary") == 0
    out = capsys.readouterr().out
    assert "Balance: -150.00 -> 850.00" in out
    assert "Insufficient funds" not in out


def test_add_rejects_invalid_entries(storage, store, capsys):
    assert _run(storage, "add", "   ", "5") == 1
    assert "Invalid transaction" in capsys.readouterr().out
    assert _run(storage, "add", "Coffee", "0") == 1
    assert "positive number" in capsys.readouterr().out
    assert len(store) == 0


def test_list_categories(storage, tmp_path, capsys):
    path = tmp_path / "statement.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    _run(storage, "import", str(path))
    capsys.readouterr()

    assert _run(storage, "list", "--categories") == 0
    assert capsys.readouterr().out.split() == ["Food", "Salary"]


def test_summary_shows_split_and_budget_overrun(storage, capsys):
    _run(storage, "add", "Salary", "1000", "--type", "income", "--category", "Salary")
    _run(storage, "add", "Rent", "500", "--category", "Housing")
    capsys.readouterr()

    assert _run(storage, "summary", "--budget", "300") == 0
    out = capsys.readouterr().out
    assert "Budget Exceeded!" in out
    assert "Needs    500.00  (Rent, Groceries, Utilities)" in out
    assert "Savings  200.00" in out

    assert _run(storage, "summary", "--budget", "2000") == 0
    assert "1500.00 remaining" in capsys.readouterr().out


def test_main_reports_unexpected_errors(monkeypatch, capsys):
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)

    def fail_with(error):
        def _run_command(args, client):
            raise error
        return _run_command

    monkeypatch.setattr(cli, "run_command", fail_with(ValueError("bad period")))
    assert main(["list"]) == 1
    assert "❌ Input Error: bad period" in capsys.readouterr().out

    monkeypatch.setattr(cli, "run_command", fail_with(ValidationError("'Free': amount must be a positive number")))
    assert main(["list"]) == 1
    assert "❌ Error: 'Free'" in capsys.readouterr().out
