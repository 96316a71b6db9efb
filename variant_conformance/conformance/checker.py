"""
Conformance Checking Engine for case variants.

Runs the full analysis for one table of cases:

1. Derive the reference sequence (flagged happy path row, or configured)
2. Classify the deviations of every case against it
3. Aggregate deviations into violation groups
4. Rank the groups by the number of affected cases

Every call recomputes from scratch; a checker holds configuration only.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from .. import DEFAULT_CONFIG
from .aggregator import aggregate_deviations, rank_violations
from .deviations import DeviationClassifier
from .models import Case, RankedViolations

logger = logging.getLogger(__name__)


@dataclass
class ConformanceResult:
    """
    Result of one conformance analysis run.

    Attributes:
        reference: The reference sequence used (empty if none was found)
        total_cases: Number of cases analyzed
        conformant_cases: Cases without any deviation
        deviating_cases: Cases with at least one deviation
        total_deviations: Number of deviation records
        violations: Ranked violation groups
        skipped_rows: Input rows excluded from the analysis
        invalid_case_ids: Rows whose case id could not be parsed
        analysis_timestamp: When the analysis was performed
    """
    reference: Tuple[str, ...]
    total_cases: int
    conformant_cases: int
    deviating_cases: int
    total_deviations: int
    violations: RankedViolations
    skipped_rows: int = 0
    invalid_case_ids: int = 0
    analysis_timestamp: datetime = field(default_factory=datetime.now)

    @property
    def checked(self) -> bool:
        """Whether conformance checking ran (a reference was available)."""
        return len(self.reference) > 0

    @property
    def conformance_rate(self) -> float:
        """Percentage of cases without deviations (0.0 - 100.0)."""
        if not self.checked or self.total_cases == 0:
            return 0.0
        return round(self.conformant_cases / self.total_cases * 100.0, 2)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "reference": list(self.reference),
            "checked": self.checked,
            "total_cases": self.total_cases,
            "conformant_cases": self.conformant_cases,
            "deviating_cases": self.deviating_cases,
            "conformance_rate": self.conformance_rate,
            "total_deviations": self.total_deviations,
            "skipped_rows": self.skipped_rows,
            "invalid_case_ids": self.invalid_case_ids,
            "analysis_timestamp": self.analysis_timestamp.isoformat(),
            "violations": self.violations.to_dict(),
        }


class ConformanceChecker:
    """
    Main conformance checking engine.

    Example:
        checker = ConformanceChecker()
        rows = [
            [1, "yes", "A -> B -> C", "Vendor X"],
            [2, "", "A -> C", "Vendor X"],
        ]
        result = checker.check_rows(rows)
        for group in result.violations:
            print(group.key, group.count)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        reference: Optional[Sequence[str]] = None
    ):
        """
        Initialize the conformance checker.

        Args:
            config: Settings merged over DEFAULT_CONFIG
            reference: Explicit reference sequence; when given, flagged rows
                are ignored and an empty sequence disables checking
        """
        self.config = DEFAULT_CONFIG.copy()
        self.config.update(config or {})
        self._reference = tuple(reference) if reference is not None else None

        top_n = self.config.get("top_n")
        if top_n is not None and top_n <= 0:
            raise ValueError(f"top_n must be a positive integer, got {top_n}")

    def check_rows(self, rows: Sequence[Sequence[Any]]) -> ConformanceResult:
        """
        Check conformance of a table of positional rows.

        Args:
            rows: Rows of [case_id, is_happy_path, variant, specification]

        Returns:
            ConformanceResult for the table
        """
        from ..ingest.table import derive_reference, rows_to_cases

        delimiter = self.config["variant_delimiter"]

        if self._reference is not None:
            reference = self._reference
        else:
            reference = derive_reference(rows, delimiter)

        parsed = rows_to_cases(
            rows,
            delimiter=delimiter,
            invalid_case_ids=self.config["invalid_case_ids"],
        )

        result = self.check_cases(parsed.cases, reference)
        result.skipped_rows = parsed.skipped_rows
        result.invalid_case_ids = parsed.invalid_case_ids
        return result

    def check_cases(
        self,
        cases: Sequence[Case],
        reference: Sequence[str]
    ) -> ConformanceResult:
        """
        Check conformance of already parsed cases.

        Args:
            cases: Cases to check
            reference: Reference activity sequence

        Returns:
            ConformanceResult for the cases
        """
        reference = tuple(reference)
        cases = list(cases)

        if not reference:
            logger.info("No happy path reference found, conformance check skipped")
            return ConformanceResult(
                reference=(),
                total_cases=len(cases),
                conformant_cases=0,
                deviating_cases=0,
                total_deviations=0,
                violations=RankedViolations(total_cases=len(cases)),
            )

        classifier = DeviationClassifier(reference)
        deviations = []
        deviating_cases = 0

        for case in cases:
            records = classifier.classify_case(case)
            if records:
                deviating_cases += 1
            deviations.extend(records)

        groups = aggregate_deviations(deviations)
        violations = rank_violations(
            groups,
            top_n=self.config.get("top_n"),
            total_cases=len(cases),
        )

        logger.info(
            f"Checked {len(cases)} cases against {len(reference)} reference steps: "
            f"{len(deviations)} deviations in {len(groups)} violation groups"
        )

        return ConformanceResult(
            reference=reference,
            total_cases=len(cases),
            conformant_cases=len(cases) - deviating_cases,
            deviating_cases=deviating_cases,
            total_deviations=len(deviations),
            violations=violations,
        )


def check_conformance(
    rows: Sequence[Sequence[Any]],
    reference: Optional[Sequence[str]] = None,
    config: Optional[Dict[str, Any]] = None
) -> ConformanceResult:
    """
    Convenience function to check conformance of a table.

    Args:
        rows: Rows of [case_id, is_happy_path, variant, specification]
        reference: Explicit reference sequence (default: flagged row);
            an empty sequence disables checking
        config: Settings merged over DEFAULT_CONFIG

    Returns:
        ConformanceResult with analysis results
    """
    checker = ConformanceChecker(config=config, reference=reference)
    return checker.check_rows(rows)


def find_violations(
    cases: Sequence[Case],
    reference: Sequence[str],
    top_n: Optional[int] = None
) -> RankedViolations:
    """
    Classify, aggregate and rank the violations of a set of cases.

    Args:
        cases: Cases to check
        reference: Reference activity sequence; empty means no checking
        top_n: Keep only the most frequent groups

    Returns:
        Ranked violation groups
    """
    checker = ConformanceChecker(config={"top_n": top_n})
    return checker.check_cases(cases, reference).violations
