"""
Tests for report generation.
"""

import json

import numpy as np
import pytest

from variant_conformance import DEFAULT_CONFIG
from variant_conformance.conformance import Case, check_conformance, find_violations
from variant_conformance.report import (
    NO_VIOLATIONS_TEXT,
    ReportGenerator,
    convert_for_json,
    describe_breakdown,
    describe_violation,
    generate_report,
    truncated_percent,
    violation_lines,
)


def _reject_constant(name):
    raise ValueError(f"Non-standard JSON constant: {name}")


@pytest.fixture
def p2p_result(p2p_rows):
    """Conformance result of the purchase-to-pay table."""
    return check_conformance(p2p_rows)


class TestViolationLines:
    """Tests for violation phrasing."""

    def test_truncated_percent(self):
        """Test percentages are truncated, not rounded."""
        assert truncated_percent(2, 3) == 66
        assert truncated_percent(1, 6) == 16
        assert truncated_percent(3, 3) == 100
        assert truncated_percent(1, 0) == 0

    def test_missing_phrase(self, p2p_result):
        """Test missing steps read 'is MISSING'."""
        group = p2p_result.violations[0]
        assert describe_violation(group, 6) == (
            "50% of cases is MISSING Receive Order Confirmation"
        )

    def test_extra_phrase(self, p2p_result):
        """Test extra steps read 'DID'."""
        group = p2p_result.violations.get("DID:Change Price")
        assert describe_violation(group, 6) == "16% of cases DID Change Price"

    def test_breakdown(self, p2p_result):
        """Test specification shares of a group."""
        group = p2p_result.violations[0]
        assert describe_breakdown(group) == [
            "66% (2 out of 3 cases from Acme Corp)",
            "33% (1 out of 3 cases from Globex)",
        ]
        assert describe_breakdown(group, limit=1) == [
            "66% (2 out of 3 cases from Acme Corp)",
        ]

    def test_max_display(self, p2p_result):
        """Test the number of lines is bounded."""
        lines = violation_lines(p2p_result.violations, max_display=2)
        assert len(lines) == 2
        assert lines[1] == "16% of cases DID Change Price"

    def test_no_violations(self, abc_cases):
        """Test the empty message."""
        ranked = find_violations(abc_cases, [])
        assert violation_lines(ranked) == [NO_VIOLATIONS_TEXT]

    def test_default_limits(self):
        """Test the default line and breakdown limits come from the configuration."""
        reference = [f"Step {i:02d}" for i in range(25)]
        ranked = find_violations([Case(1, (), "X")], reference)
        assert len(ranked) == 25
        assert len(violation_lines(ranked)) == DEFAULT_CONFIG["max_display"]

        cases = [Case(i, ("A",), f"Vendor {i:02d}") for i in range(12)]
        group = find_violations(cases, ["A", "B"])[0]
        assert len(describe_breakdown(group)) == DEFAULT_CONFIG["breakdown_limit"]


class TestReportGenerator:
    """Tests for ReportGenerator."""

    def test_text_report(self, p2p_result):
        """Test the plain text layout."""
        report = ReportGenerator(output_format="text").generate(p2p_result)
        lines = report.splitlines()

        assert lines[0] == "Selected cases: 6"
        assert lines[2] == "50% of cases is MISSING Receive Order Confirmation"
        assert lines[3] == "    66% (2 out of 3 cases from Acme Corp)"
        assert "16% of cases is MISSING Record Invoice Receipt" in lines

    def test_text_report_empty(self, p2p_rows):
        """Test the text report without a happy path."""
        rows = [[r[0], "no", r[2], r[3]] for r in p2p_rows]
        report = generate_report(check_conformance(rows), output_format="text")
        assert report.splitlines()[-1] == NO_VIOLATIONS_TEXT

    def test_json_report(self, p2p_result):
        """Test the JSON structure."""
        report = json.loads(ReportGenerator(output_format="json").generate(p2p_result))

        assert report["metadata"]["version"]
        assert report["summary"]["total_cases"] == 6
        assert report["summary"]["n_violation_groups"] == 3
        assert report["violations"][0]["key"] == "MISSING:Receive Order Confirmation"
        assert report["violations"][0]["count"] == 3
        assert report["violations"][0]["description"].startswith("50% of cases")

    def test_json_report_without_metadata(self, p2p_result):
        """Test metadata can be omitted."""
        generator = ReportGenerator(output_format="json", include_metadata=False)
        report = json.loads(generator.generate(p2p_result))
        assert "metadata" not in report

    def test_json_report_with_invalid_case_id(self):
        """Test unparseable case ids are written as null in valid JSON."""
        rows = [[1, "yes", "A -> B", "X"], ["abc", "", "A", "X"]]
        report_text = generate_report(check_conformance(rows), output_format="json")

        report = json.loads(report_text, parse_constant=_reject_constant)
        assert report["summary"]["invalid_case_ids"] == 1
        assert report["violations"][0]["case_ids"] == [None]
        assert report["violations"][0]["specifications"][0]["case_ids"] == [None]

    def test_markdown_invalid_case_ids(self):
        """Test the Markdown summary reports unparseable case ids."""
        rows = [[1, "yes", "A -> B", "X"], ["abc", "", "A", "X"]]
        report = ReportGenerator(output_format="markdown").generate(check_conformance(rows))
        assert "- **Invalid Case IDs**: 1" in report

    def test_markdown_report(self, p2p_result):
        """Test the Markdown layout."""
        report = ReportGenerator(output_format="markdown", max_display=1).generate(p2p_result)

        assert report.startswith("# Variant Conformance Report")
        assert "- **Conformance Rate**: 33.33%" in report
        assert "### 1. 50% of cases is MISSING Receive Order Confirmation" in report
        assert "- 33% (1 out of 3 cases from Globex)" in report
        assert "### 2." not in report

    def test_markdown_without_reference(self):
        """Test the Markdown report when nothing was checked."""
        result = check_conformance([[1, "no", "A", "X"]])
        report = ReportGenerator(output_format="markdown").generate(result)
        assert "none found, conformance not checked" in report
        assert NO_VIOLATIONS_TEXT in report

    def test_unknown_format(self):
        """Test unknown formats are rejected."""
        with pytest.raises(ValueError):
            ReportGenerator(output_format="html")


class TestConvertForJson:
    """Tests for JSON conversion of numpy values."""

    def test_numpy_values(self):
        """Test numpy scalars, arrays and NaN."""
        data = {
            1: np.int64(3),
            "f": np.float64(0.5),
            "nan": float("nan"),
            "arr": np.array([1, 2]),
            "flag": np.bool_(True),
        }
        assert convert_for_json(data) == {
            "1": 3, "f": 0.5, "nan": None, "arr": [1, 2], "flag": True,
        }
