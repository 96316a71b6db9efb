"""
Report Generator Module for variant conformance results.

Generates output in various formats:
- JSON for programmatic use
- Markdown for human reading
- Plain text, one line per violation with its specification breakdown

Includes timestamp and version information.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import numpy as np

from .. import DEFAULT_CONFIG, __version__
from ..conformance.checker import ConformanceResult
from .violation_lines import (
    describe_breakdown,
    describe_violation,
    selected_cases_line,
    violation_lines,
)

OUTPUT_FORMATS = ("json", "markdown", "text")


def convert_for_json(obj: Any) -> Any:
    """Convert objects to JSON-serializable types, including numpy types and NaN."""
    if isinstance(obj, dict):
        return {str(k): convert_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_for_json(item) for item in obj]
    elif isinstance(obj, (np.integer,)):
        return int(obj)
    elif isinstance(obj, (float, np.floating)):
        return None if np.isnan(obj) else float(obj)
    elif isinstance(obj, np.ndarray):
        return convert_for_json(obj.tolist())
    elif isinstance(obj, np.bool_):
        return bool(obj)
    else:
        return obj


class ReportGenerator:
    """
    Generates reports from conformance results in various formats.
    """

    def __init__(
        self,
        output_format: str = "json",
        max_display: Optional[int] = DEFAULT_CONFIG["max_display"],
        breakdown_limit: Optional[int] = DEFAULT_CONFIG["breakdown_limit"],
        include_metadata: bool = True,
    ):
        """
        Initialize the report generator.

        Args:
            output_format: Output format ('json', 'markdown' or 'text')
            max_display: Maximum number of violations listed in text reports
            breakdown_limit: Maximum specifications listed per violation
            include_metadata: Include generation metadata

        Raises:
            ValueError: If the output format is unknown
        """
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unknown output format '{output_format}', expected one of {OUTPUT_FORMATS}"
            )
        self.output_format = output_format
        self.max_display = max_display
        self.breakdown_limit = breakdown_limit
        self.include_metadata = include_metadata

    def generate(self, result: ConformanceResult) -> str:
        """
        Generate a report from a conformance result.

        Args:
            result: Result of one analysis run

        Returns:
            Formatted report string
        """
        if self.output_format == 'markdown':
            return self._generate_markdown(result)
        if self.output_format == 'text':
            return self._generate_text(result)
        return self._generate_json(result)

    def _generate_json(self, result: ConformanceResult) -> str:
        """Generate JSON report."""
        report: Dict[str, Any] = {}
        if self.include_metadata:
            report['metadata'] = self._generate_metadata(result)
        report['summary'] = self._generate_summary(result)
        report['violations'] = [
            {
                **group.to_dict(),
                'description': describe_violation(group, result.total_cases),
            }
            for group in result.violations
        ]
        # Unparseable case ids are NaN, written as null
        return json.dumps(convert_for_json(report), indent=2, default=str, allow_nan=False)

    def _generate_text(self, result: ConformanceResult) -> str:
        """Generate plain text report."""
        lines = [selected_cases_line(result.total_cases), ""]
        groups = list(result.violations)
        if self.max_display is not None:
            groups = groups[:self.max_display]

        if not groups:
            lines.extend(violation_lines(result.violations))
            return '\n'.join(lines)

        for group in groups:
            lines.append(describe_violation(group, result.total_cases))
            for breakdown in describe_breakdown(group, self.breakdown_limit):
                lines.append(f"    {breakdown}")

        return '\n'.join(lines)

    def _generate_markdown(self, result: ConformanceResult) -> str:
        """Generate Markdown report."""
        lines = []

        lines.append("# Variant Conformance Report")
        lines.append("")
        if self.include_metadata:
            metadata = self._generate_metadata(result)
            lines.append(f"**Generated**: {metadata['generated_at']}")
            lines.append(f"**Version**: {metadata['version']}")
            lines.append("")

        # Summary
        summary = self._generate_summary(result)
        lines.append("## Summary")
        lines.append("")
        if summary['reference']:
            lines.append(f"- **Happy Path**: {' -> '.join(summary['reference'])}")
        else:
            lines.append("- **Happy Path**: none found, conformance not checked")
        lines.append(f"- **Selected Cases**: {summary['total_cases']}")
        lines.append(f"- **Conformant Cases**: {summary['conformant_cases']}")
        lines.append(f"- **Conformance Rate**: {summary['conformance_rate']:.2f}%")
        lines.append(f"- **Violation Groups**: {summary['n_violation_groups']}")
        if summary['skipped_rows']:
            lines.append(f"- **Skipped Rows**: {summary['skipped_rows']}")
        if summary['invalid_case_ids']:
            lines.append(f"- **Invalid Case IDs**: {summary['invalid_case_ids']}")
        lines.append("")

        lines.append("## Violations")
        lines.append("")

        groups = list(result.violations)
        if self.max_display is not None:
            groups = groups[:self.max_display]

        if not groups:
            lines.extend(violation_lines(result.violations))
            return '\n'.join(lines)

        for rank, group in enumerate(groups, 1):
            lines.append(f"### {rank}. {describe_violation(group, result.total_cases)}")
            lines.append("")
            for breakdown in describe_breakdown(group, self.breakdown_limit):
                lines.append(f"- {breakdown}")
            lines.append("")

        return '\n'.join(lines)

    def _generate_metadata(self, result: ConformanceResult) -> Dict[str, Any]:
        """Generate report metadata."""
        return {
            'generated_at': datetime.now(timezone.utc).isoformat(),
            'version': __version__,
            'analysis_timestamp': result.analysis_timestamp.isoformat(),
        }

    def _generate_summary(self, result: ConformanceResult) -> Dict[str, Any]:
        """Generate report summary."""
        return {
            'reference': list(result.reference),
            'total_cases': result.total_cases,
            'conformant_cases': result.conformant_cases,
            'deviating_cases': result.deviating_cases,
            'conformance_rate': result.conformance_rate,
            'total_deviations': result.total_deviations,
            'n_violation_groups': len(result.violations),
            'skipped_rows': result.skipped_rows,
            'invalid_case_ids': result.invalid_case_ids,
        }


def generate_report(
    result: ConformanceResult,
    output_format: str = "json",
    max_display: Optional[int] = DEFAULT_CONFIG["max_display"]
) -> str:
    """Convenience function for report generation."""
    generator = ReportGenerator(output_format=output_format, max_display=max_display)
    return generator.generate(result)
