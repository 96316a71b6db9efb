"""
Conformance Checking Module for case variants.

Compares the activities of each case against a reference "happy path"
sequence and ranks the resulting deviations across the whole dataset.

Key Components:
- diff_sequences: Classified symmetric difference of two activity sequences
- DeviationClassifier: Emits one deviation record per (case, activity)
- aggregate_deviations: Groups records by kind and activity, with a
  breakdown per specification/vendor label
- rank_violations: Orders groups and breakdowns by affected case count
- ConformanceChecker: Runs the whole analysis for one table

Example Usage:
    from variant_conformance.conformance import Case, find_violations

    cases = [
        Case(1, ("A", "C"), "X"),
        Case(2, ("A", "B", "C", "D"), "Y"),
        Case(3, ("A", "C"), "X"),
    ]
    ranked = find_violations(cases, ["A", "B", "C"])

    for group in ranked:
        print(group.key, group.count, group.specification_counts())
    # MISSING:B 2 {'X': 2}
    # DID:D 1 {'Y': 1}
"""

from .models import (
    Case,
    DeviationKind,
    DeviationRecord,
    RankedViolations,
    SpecificationBreakdown,
    ViolationGroup,
    is_sentinel_case_id,
    make_key,
)

from .deviations import (
    DeviationClassifier,
    as_activity_set,
    classify_cases,
    diff_sequences,
)

from .aggregator import (
    aggregate_deviations,
    rank_violations,
)

from .checker import (
    ConformanceChecker,
    ConformanceResult,
    check_conformance,
    find_violations,
)

__all__ = [
    # Models
    "Case",
    "DeviationKind",
    "DeviationRecord",
    "RankedViolations",
    "SpecificationBreakdown",
    "ViolationGroup",
    "is_sentinel_case_id",
    "make_key",
    # Deviations
    "DeviationClassifier",
    "as_activity_set",
    "classify_cases",
    "diff_sequences",
    # Aggregation
    "aggregate_deviations",
    "rank_violations",
    # Checker
    "ConformanceChecker",
    "ConformanceResult",
    "check_conformance",
    "find_violations",
]
