"""
Data Model for Variant Conformance Checking.

A case's variant is compared against a reference sequence (the "happy path").
Every activity present in exactly one of the two becomes a deviation, and
deviations sharing the same kind and activity are grouped into a
ViolationGroup with a nested breakdown by specification/vendor label.

Key concepts:
- Reference sequence: the intended, compliant ordered list of activities
- Variant: the actual ordered list of activities recorded for one case
- Deviation: an activity expected but not observed (missing step), or
  observed but not expected (extra or different step)
- Specification: categorical attribute of a case used to sub-aggregate
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

# Integer id, or NaN for ids that could not be parsed
CaseId = Union[int, float]


def is_sentinel_case_id(case_id: CaseId) -> bool:
    """Check whether a case id is the unparseable-id sentinel (NaN)."""
    return isinstance(case_id, float) and math.isnan(case_id)


class DeviationKind(Enum):
    """Classification of a single deviation."""

    MISSING_STEP = "MISSING"           # Expected but not observed
    EXTRA_OR_DIFFERENT_STEP = "DID"    # Observed but not expected

    def inverted(self) -> "DeviationKind":
        """Return the kind this deviation would have with the inputs swapped."""
        if self is DeviationKind.MISSING_STEP:
            return DeviationKind.EXTRA_OR_DIFFERENT_STEP
        return DeviationKind.MISSING_STEP


def make_key(kind: DeviationKind, activity: str) -> str:
    """Build the composite key used to group deviations."""
    return f"{kind.value}:{activity}"


@dataclass(frozen=True)
class Case:
    """
    One process instance, read from a single input row.

    Attributes:
        case_id: Integer identifier, or NaN when the row's id was unparseable
        variant: Ordered activity names recorded for the case
        specification: Specification/vendor label of the case
    """
    case_id: CaseId
    variant: Tuple[str, ...]
    specification: str = ""


@dataclass(frozen=True)
class DeviationRecord:
    """
    One unit of nonconformance for one case.

    Attributes:
        kind: Whether the activity is missing or extra
        activity: Name of the activity involved
        case_id: Identifier of the originating case
        specification: Specification label of the originating case
    """
    kind: DeviationKind
    activity: str
    case_id: CaseId
    specification: str = ""

    @property
    def key(self) -> str:
        """Composite grouping key (kind + ':' + activity)."""
        return make_key(self.kind, self.activity)


@dataclass
class SpecificationBreakdown:
    """Cases of one specification label within a violation group."""
    name: str
    case_ids: List[CaseId] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.case_ids)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "count": self.count,
            "case_ids": list(self.case_ids),
        }


@dataclass
class ViolationGroup:
    """
    Aggregate of all deviations sharing one (kind, activity) key.

    Attributes:
        key: Composite key, e.g. "MISSING:Record Goods Receipt"
        kind: Deviation kind of the group
        activity: Activity name of the group
        case_ids: Cases exhibiting the deviation, in order of first sighting
        specifications: Breakdown of case ids per specification label
    """
    key: str
    kind: DeviationKind
    activity: str
    case_ids: List[CaseId] = field(default_factory=list)
    specifications: Dict[str, SpecificationBreakdown] = field(default_factory=dict)

    @property
    def count(self) -> int:
        """Number of cases exhibiting this violation."""
        return len(self.case_ids)

    def specification_counts(self) -> Dict[str, int]:
        """Map each specification label to its case count."""
        return {name: spec.count for name, spec in self.specifications.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "key": self.key,
            "kind": self.kind.value,
            "activity": self.activity,
            "count": self.count,
            "case_ids": list(self.case_ids),
            "specifications": [s.to_dict() for s in self.specifications.values()],
        }


@dataclass(frozen=True)
class RankedViolations:
    """
    Read-only ranked view over the violation groups of one run.

    Attributes:
        groups: Violation groups ordered by case count, largest first
        total_cases: Number of cases analyzed in the run
    """
    groups: Tuple[ViolationGroup, ...] = ()
    total_cases: int = 0

    def __iter__(self) -> Iterator[ViolationGroup]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def __getitem__(self, index: int) -> ViolationGroup:
        return self.groups[index]

    @property
    def keys(self) -> List[str]:
        return [g.key for g in self.groups]

    def get(self, key: str) -> Optional[ViolationGroup]:
        """Look up a group by its composite key."""
        for group in self.groups:
            if group.key == key:
                return group
        return None

    def top(self, n: int) -> List[ViolationGroup]:
        """Return the ``n`` most frequent groups."""
        return list(self.groups[:n])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "total_cases": self.total_cases,
            "n_groups": len(self.groups),
            "groups": [g.to_dict() for g in self.groups],
        }
