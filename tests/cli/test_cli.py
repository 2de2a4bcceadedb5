"""Tests for the learnlens command line."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from learnlens import __version__
from learnlens.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_fast_env(monkeypatch):
    """No backoff and only error logs for CLI runs."""
    monkeypatch.setenv("LEARNLENS_INITIAL_DELAY_S", "0")
    monkeypatch.setenv("LEARNLENS_MAX_DELAY_S", "0")
    monkeypatch.setenv("LEARNLENS_LOG_LEVEL", "ERROR")


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"learnlens {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "analyze" in result.output
        assert "serve" in result.output


class TestAnalyzeCommand:
    def test_table_output(self, csv_file):
        result = runner.invoke(app, ["analyze", str(csv_file), "-m", "algebra-1"])
        assert result.exit_code == 0, result.output
        assert "moduleId: algebra-1" in result.output
        assert "engagementRate" in result.output
        assert "Specialists" in result.output

    def test_json_output(self, csv_file):
        result = runner.invoke(app, ["analyze", str(csv_file), "--json", "--cohort", "spring"])
        assert result.exit_code == 0, result.output
        assert '"success": true' in result.output
        assert '"numberOfLearners": 3' in result.output
        assert '"cohort": "spring"' in result.output
        assert '"source": "csv"' in result.output

    def test_json_with_metrics(self, csv_file):
        result = runner.invoke(app, ["analyze", str(csv_file), "--json", "--show-metrics"])
        assert result.exit_code == 0, result.output
        assert '"metrics"' in result.output
        assert '"perSpecialist"' in result.output

    def test_metrics_table(self, csv_file):
        result = runner.invoke(app, ["analyze", str(csv_file), "--show-metrics"])
        assert result.exit_code == 0, result.output
        assert "Execution metrics" in result.output
        assert "Success rate: 100.0%" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.csv")])
        assert result.exit_code == 1
        assert "Failed to read CSV file" in result.output

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("learner_id,correct\n", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1
        assert "no valid learner responses" in result.output
