import csv
import json

import pytest
from click.testing import CliRunner

from loan_amortization.main import cli

REFERENCE = ["-p", "10k", "-r", "24", "-t", "12", "-s", "2024-01"]


@pytest.fixture
def runner():
    return CliRunner()


class TestScheduleCommand:
    def test_prints_summary_and_rows(self, runner):
        result = runner.invoke(cli, ["schedule", *REFERENCE, "-m", "reducing"])
        assert result.exit_code == 0, result.output
        assert "Periodic payment   : 945.60" in result.output
        assert "2025-01-01" in result.output
        assert result.output.count("\n12\t") == 1

    def test_truncates_long_schedules(self, runner):
        result = runner.invoke(
            cli,
            ["schedule", "-p", "1000", "-r", "5", "-t", "30", "-s", "2024-01"],
            env={"LOAN_AMORTIZATION_MAX_ROWS": "5"},
        )
        assert result.exit_code == 0, result.output
        assert "Schedule has 30 rows; showing first 5 rows." in result.output

    def test_default_method_from_environment(self, runner):
        result = runner.invoke(
            cli,
            ["schedule", "-p", "1200", "-r", "10", "-t", "12", "-s", "2024-01"],
            env={"LOAN_AMORTIZATION_DEFAULT_METHOD": "flat"},
        )
        assert result.exit_code == 0, result.output
        assert "Method             : flat" in result.output

    def test_json_export(self, runner, tmp_path):
        path = tmp_path / "schedule.json"
        result = runner.invoke(cli, ["schedule", *REFERENCE, "--output", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data["schedule"]) == 12
        assert data["schedule"][-1]["outstanding_balance"] == 0
        assert data["summary"]["periodic_payment"] == 945.6

    def test_csv_export(self, runner, tmp_path):
        path = tmp_path / "schedule.csv"
        result = runner.invoke(cli, ["schedule", *REFERENCE, "-m", "flat", "--output", str(path)])
        assert result.exit_code == 0, result.output
        with path.open(newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == 12
        assert rows[0]["Principal"] == "833.33"
        assert rows[-1]["Outstanding_Balance"] == "0.00"

    def test_unsupported_export(self, runner, tmp_path):
        result = runner.invoke(cli, ["schedule", *REFERENCE, "--output", str(tmp_path / "x.pdf")])
        assert result.exit_code == 2

    def test_zero_principal_is_usage_error(self, runner):
        result = runner.invoke(cli, ["schedule", "-p", "0", "-r", "24", "-t", "12", "-s", "2024-01"])
        assert result.exit_code == 2
        assert "principal must be positive" in result.output

    def test_bad_start_date(self, runner):
        result = runner.invoke(cli, ["schedule", "-p", "100", "-r", "24", "-t", "12", "-s", "soon"])
        assert result.exit_code == 2
        assert "Invalid date string" in result.output

    def test_overflow_reported_without_traceback(self, runner):
        result = runner.invoke(
            cli, ["schedule", "-p", "1e40", "-r", "5", "-t", "12", "-s", "2024-01"]
        )
        assert result.exit_code == 1
        assert "too large" in result.output


class TestOtherCommands:
    def test_summary(self, runner):
        result = runner.invoke(cli, ["summary", *REFERENCE, "-m", "simple"])
        assert result.exit_code == 0, result.output
        assert "Total interest     : 2400.00" in result.output

    def test_summary_json(self, runner, tmp_path):
        path = tmp_path / "summary.json"
        result = runner.invoke(cli, ["summary", *REFERENCE, "--output", str(path)])
        assert result.exit_code == 0, result.output
        assert json.loads(path.read_text(encoding="utf-8"))["summary"]["payments"] == 12

    def test_compare(self, runner):
        result = runner.invoke(cli, ["compare", *REFERENCE])
        assert result.exit_code == 0, result.output
        for label in ("Simple interest", "Compound interest", "Reducing balance", "Flat rate"):
            assert label in result.output

    def test_payoff(self, runner):
        result = runner.invoke(cli, ["payoff", "-b", "1000", "-n", "0", "-r", "24"])
        assert result.exit_code == 0, result.output
        assert "Payoff amount: 1000.00" in result.output

    def test_payoff_rejects_negative_balance(self, runner):
        result = runner.invoke(cli, ["payoff", "--balance=-5", "-n", "3", "-r", "24"])
        assert result.exit_code == 2

    def test_bad_log_level(self, runner):
        result = runner.invoke(cli, ["--log-level", "chatty", "summary", *REFERENCE])
        assert result.exit_code == 2

    def test_tiny_principal_schedule(self, runner):
        result = runner.invoke(cli, ["schedule", "-p", "0.01", "-r", "5", "-t", "12", "-s", "2024-01"])
        assert result.exit_code == 0, result.output
        assert "Periodic payment   : 0.00" in result.output

    def test_tiny_principal_compare(self, runner):
        result = runner.invoke(cli, ["compare", "-p", "0.01", "-r", "5", "-t", "12", "-s", "2024-01"])
        assert result.exit_code == 0, result.output

    def test_payoff_rejects_negative_rate(self, runner):
        result = runner.invoke(cli, ["payoff", "-b", "100", "-n", "0", "--rate=-5"])
        assert result.exit_code == 2
