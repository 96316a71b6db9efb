"""
Report generation module for ranked conformance violations.
"""

from .generator import OUTPUT_FORMATS, ReportGenerator, convert_for_json, generate_report
from .violation_lines import (
    NO_VIOLATIONS_TEXT,
    describe_breakdown,
    describe_violation,
    truncated_percent,
    violation_lines,
)

__all__ = [
    'OUTPUT_FORMATS',
    'ReportGenerator',
    'convert_for_json',
    'generate_report',
    'NO_VIOLATIONS_TEXT',
    'describe_breakdown',
    'describe_violation',
    'truncated_percent',
    'violation_lines',
]
