"""
Human-readable phrasing of ranked violations.

One line per violation group, e.g.

    40% of cases is MISSING Record Goods Receipt
    12% of cases DID Change Price

and, per group, a breakdown of the specifications it concentrates in:

    75% (3 out of 4 cases from Vendor A)
"""

import math
from typing import List, Optional

from .. import DEFAULT_CONFIG
from ..conformance.models import DeviationKind, RankedViolations, ViolationGroup

NO_VIOLATIONS_TEXT = "No violations found"


def truncated_percent(part: int, whole: int) -> int:
    """Percentage of ``part`` in ``whole``, truncated to an integer."""
    if whole <= 0:
        return 0
    return math.trunc(part / whole * 100)


def describe_violation(group: ViolationGroup, total_cases: int) -> str:
    """Phrase a violation group as a share of all cases."""
    verb = "is " if group.kind is DeviationKind.MISSING_STEP else ""
    percent = truncated_percent(group.count, total_cases)
    return f"{percent}% of cases {verb}{group.kind.value} {group.activity}"


def describe_breakdown(
    group: ViolationGroup,
    limit: Optional[int] = DEFAULT_CONFIG["breakdown_limit"]
) -> List[str]:
    """Phrase the leading specifications of a group as shares of the group."""
    specs = list(group.specifications.values())
    if limit is not None:
        specs = specs[:limit]
    return [
        f"{truncated_percent(s.count, group.count)}% "
        f"({s.count} out of {group.count} cases from {s.name})"
        for s in specs
    ]


def selected_cases_line(total_cases: int) -> str:
    return f"Selected cases: {total_cases}"


def violation_lines(
    violations: RankedViolations,
    max_display: Optional[int] = DEFAULT_CONFIG["max_display"]
) -> List[str]:
    """
    Phrase the most frequent violation groups, one line each.

    Args:
        violations: Ranked violation groups
        max_display: Maximum number of lines (None for all)

    Returns:
        Lines in rank order, or the no-violations message
    """
    if len(violations) == 0:
        return [NO_VIOLATIONS_TEXT]

    groups = list(violations)
    if max_display is not None:
        groups = groups[:max_display]
    return [describe_violation(g, violations.total_cases) for g in groups]
