"""
Tests for the command line interface and synthetic data generation.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from variant_conformance import __version__
from variant_conformance.conformance import check_conformance
from variant_conformance.ingest import derive_reference, load_table
from variant_conformance.main import cli
from variant_conformance.synthetic import P2P_HAPPY_PATH, P2PLogGenerator


def _reject_constant(name):
    raise ValueError(f"Non-standard JSON constant: {name}")


@pytest.fixture
def runner():
    return CliRunner()


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_version(self, runner):
        """Test the version option."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_text_output(self, runner, p2p_csv):
        """Test the default text report."""
        result = runner.invoke(cli, ["analyze", "--input", str(p2p_csv)])

        assert result.exit_code == 0, result.output
        assert "Selected cases: 6" in result.output
        assert "50% of cases is MISSING Receive Order Confirmation" in result.output

    def test_json_output_file(self, runner, p2p_csv, tmp_path):
        """Test writing a JSON report to a file."""
        output = tmp_path / "out" / "report.json"
        result = runner.invoke(cli, [
            "analyze", "-i", str(p2p_csv), "-f", "json", "-o", str(output), "--top", "2",
        ])

        assert result.exit_code == 0, result.output
        assert "Found 2 violation groups in 6 cases" in result.output

        report = json.loads(output.read_text(encoding="utf-8"))
        assert [v["key"] for v in report["violations"]] == [
            "MISSING:Receive Order Confirmation",
            "DID:Change Price",
        ]

    def test_explicit_reference(self, runner, p2p_csv):
        """Test the --reference option."""
        result = runner.invoke(cli, [
            "analyze", "-i", str(p2p_csv),
            "--reference", "Create Purchase Order Item -> Pay Invoice",
            "--max-display", "1",
        ])

        assert result.exit_code == 0, result.output
        assert "100% of cases DID Record Goods Receipt" in result.output
        assert "Record Invoice Receipt" not in result.output

    def test_empty_reference_rejected(self, runner, p2p_csv):
        """Test a reference without activities is an error."""
        result = runner.invoke(cli, ["analyze", "-i", str(p2p_csv), "--reference", " -> "])
        assert result.exit_code == 1

    def test_no_happy_path(self, runner, tmp_path):
        """Test a table without a flagged row."""
        path = tmp_path / "cases.csv"
        path.write_text("case_id,is_happy_path,variant,specification\n1,no,A,X\n",
                        encoding="utf-8")
        result = runner.invoke(cli, ["analyze", "-i", str(path)])

        assert result.exit_code == 0
        assert "No violations found" in result.output

    def test_missing_columns(self, runner, tmp_path):
        """Test a malformed table exits with an error."""
        path = tmp_path / "cases.csv"
        path.write_text("case_id,vendor\n1,X\n", encoding="utf-8")
        result = runner.invoke(cli, ["analyze", "-i", str(path)])

        assert result.exit_code == 1
        assert "Missing required columns" in result.output

    def test_max_rows(self, runner, p2p_csv, tmp_path):
        """Test reading only the first rows in windows."""
        output = tmp_path / "report.json"
        result = runner.invoke(cli, [
            "analyze", "-i", str(p2p_csv), "--max-rows", "3", "--window-size", "2",
            "-f", "json", "-o", str(output),
        ])

        assert result.exit_code == 0, result.output
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["summary"]["total_cases"] == 3

    def test_json_with_invalid_case_id(self, runner, tmp_path):
        """Test unparseable case ids are written as null."""
        path = tmp_path / "cases.csv"
        path.write_text(
            "case_id,is_happy_path,variant,specification\n"
            "1,yes,A -> B,X\n"
            "abc,no,A,X\n",
            encoding="utf-8",
        )
        output = tmp_path / "report.json"
        result = runner.invoke(cli, ["analyze", "-i", str(path), "-f", "json", "-o", str(output)])

        assert result.exit_code == 0, result.output
        report = json.loads(output.read_text(encoding="utf-8"), parse_constant=_reject_constant)
        assert report["summary"]["invalid_case_ids"] == 1
        assert report["violations"][0]["case_ids"] == [None]

    def test_verbose_enables_debug_logging(self, runner, p2p_csv, monkeypatch):
        """Test --verbose configures debug logging."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        result = runner.invoke(cli, ["--verbose", "analyze", "-i", str(p2p_csv)])

        assert result.exit_code == 0, result.output
        assert calls[0]["level"] == logging.DEBUG

    def test_quiet_by_default(self, runner, p2p_csv, monkeypatch):
        """Test logging is left alone without --verbose."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        result = runner.invoke(cli, ["analyze", "-i", str(p2p_csv)])

        assert result.exit_code == 0, result.output
        assert calls == []


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_generate_csv(self, runner, tmp_path):
        """Test generating a CSV table that analyzes cleanly."""
        output = tmp_path / "cases.csv"
        result = runner.invoke(cli, [
            "--seed", "7", "generate", "--count", "200", "--vendors", "5", "-o", str(output),
        ])

        assert result.exit_code == 0, result.output
        rows = load_table(output)
        assert len(rows) == 200
        assert derive_reference(rows) == tuple(P2P_HAPPY_PATH)

    def test_unsupported_suffix(self, runner, tmp_path):
        """Test an unsupported output type."""
        result = runner.invoke(cli, ["generate", "-o", str(tmp_path / "cases.txt")])
        assert result.exit_code == 1


class TestP2PLogGenerator:
    """Tests for the synthetic generator."""

    def test_reproducible(self):
        """Test the same seed gives the same table."""
        first = P2PLogGenerator(count=100, seed=1).generate_all()
        second = P2PLogGenerator(count=100, seed=1).generate_all()
        assert first == second

    def test_first_row_is_happy_path(self):
        """Test the flagged row carries the happy path."""
        rows = P2PLogGenerator(count=10, seed=3).generate_all()
        assert rows[0][1] == "yes"
        assert all(row[1] == "no" for row in rows[1:])
        assert derive_reference(rows) == tuple(P2P_HAPPY_PATH)

    def test_deviations_match_stats(self):
        """Test the analysis finds every generated deviating case."""
        generator = P2PLogGenerator(count=300, seed=11, deviation_rate=0.5, num_vendors=6)
        rows = generator.generate_all()
        result = check_conformance(rows)

        assert result.total_cases == 300
        assert result.deviating_cases == generator.stats["deviating_cases"]
        assert result.conformant_cases == generator.stats["happy_cases"]

    def test_no_deviations(self):
        """Test a zero deviation rate gives a conformant table."""
        rows = P2PLogGenerator(count=50, seed=2, deviation_rate=0.0).generate_all()
        result = check_conformance(rows)
        assert len(result.violations) == 0
        assert result.conformance_rate == 100.0

    def test_save_json(self, tmp_path):
        """Test JSON output loads back."""
        generator = P2PLogGenerator(count=20, seed=4)
        path = generator.save_output(tmp_path / "cases.json")
        rows = load_table(path)
        assert len(rows) == 20
        assert rows[0][0] == 1

    def test_invalid_arguments(self):
        """Test argument validation."""
        with pytest.raises(ValueError):
            P2PLogGenerator(count=0)
        with pytest.raises(ValueError):
            P2PLogGenerator(deviation_rate=1.5)
