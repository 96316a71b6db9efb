"""
Deviation Detection for Variant Conformance Checking.

Compares each case's variant with the reference sequence using an
unordered set comparison:

- MISSING_STEP: activity in the reference but absent from the variant
- EXTRA_OR_DIFFERENT_STEP: activity in the variant but absent from the reference

Ordering and repetition inside a variant are not evaluated; only the
presence or absence of each activity counts. Every element of the symmetric
difference belongs to exactly one of the two sequences, so every deviation
receives exactly one kind.
"""

import logging
from typing import Iterable, List, Sequence, Tuple

from .models import Case, DeviationKind, DeviationRecord

logger = logging.getLogger(__name__)


def as_activity_set(sequence: Iterable[str]) -> List[str]:
    """
    Reduce an activity sequence to its distinct activities.

    This is the point where ordering and repetition are discarded. The
    result keeps first-occurrence order only so that output built from it
    is deterministic.

    Args:
        sequence: Ordered activity names, possibly with repeats

    Returns:
        Distinct activity names in first-occurrence order
    """
    return list(dict.fromkeys(sequence))


def diff_sequences(
    reference: Sequence[str],
    actual: Sequence[str]
) -> List[Tuple[DeviationKind, str]]:
    """
    Compute the classified symmetric difference of two activity sequences.

    Args:
        reference: The expected (happy path) activity sequence
        actual: The observed activity sequence of one case

    Returns:
        List of (kind, activity) pairs; reference-only activities first,
        then actual-only activities. Empty when both are set-equal.
    """
    reference_set = as_activity_set(reference)
    actual_set = as_activity_set(actual)

    reference_lookup = set(reference_set)
    actual_lookup = set(actual_set)

    differences = [a for a in reference_set if a not in actual_lookup]
    differences.extend(a for a in actual_set if a not in reference_lookup)

    return [
        (
            DeviationKind.MISSING_STEP
            if activity in reference_lookup
            else DeviationKind.EXTRA_OR_DIFFERENT_STEP,
            activity,
        )
        for activity in differences
    ]


class DeviationClassifier:
    """
    Classifies the deviations of cases against a fixed reference sequence.

    Example:
        classifier = DeviationClassifier(["A", "B", "C"])
        records = classifier.classify_case(Case(1, ("A", "C"), "X"))
        # [DeviationRecord(MISSING_STEP, "B", 1, "X")]
    """

    def __init__(self, reference: Sequence[str]):
        """
        Initialize the classifier.

        Args:
            reference: The reference (happy path) activity sequence
        """
        self._reference = tuple(reference)

    @property
    def reference(self) -> Tuple[str, ...]:
        """Get the reference sequence."""
        return self._reference

    @property
    def enabled(self) -> bool:
        """Checking only runs when a reference sequence is present."""
        return len(self._reference) > 0

    def classify_case(self, case: Case) -> List[DeviationRecord]:
        """
        Detect the deviations of a single case.

        Args:
            case: The case to check

        Returns:
            One DeviationRecord per differing activity
        """
        records = [
            DeviationRecord(
                kind=kind,
                activity=activity,
                case_id=case.case_id,
                specification=case.specification,
            )
            for kind, activity in diff_sequences(self._reference, case.variant)
        ]
        if not case.variant:
            logger.debug(f"Empty variant for case {case.case_id}")
        return records

    def classify(self, cases: Iterable[Case]) -> List[DeviationRecord]:
        """
        Detect the deviations of every case.

        Args:
            cases: Cases to check

        Returns:
            Deviation records of all cases; empty when there is no reference
        """
        if not self.enabled:
            logger.debug("No reference sequence, skipping conformance check")
            return []

        records: List[DeviationRecord] = []
        for case in cases:
            records.extend(self.classify_case(case))
        return records


def classify_cases(
    cases: Iterable[Case],
    reference: Sequence[str]
) -> List[DeviationRecord]:
    """
    Convenience function to classify the deviations of many cases.

    Args:
        cases: Cases to check
        reference: The reference activity sequence

    Returns:
        Deviation records of all cases; empty when ``reference`` is empty
    """
    return DeviationClassifier(reference).classify(cases)
