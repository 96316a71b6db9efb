"""
Violation aggregation and ranking.

Deviation records are grouped by their composite key (kind + ':' + activity).
Each group keeps the cases exhibiting it and a nested breakdown by
specification label. Ranking produces a new ordered view and never mutates
the aggregated groups.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional, Set

from .models import (
    DeviationRecord,
    RankedViolations,
    SpecificationBreakdown,
    ViolationGroup,
    is_sentinel_case_id,
)

logger = logging.getLogger(__name__)


def aggregate_deviations(
    deviations: Iterable[DeviationRecord]
) -> Dict[str, ViolationGroup]:
    """
    Group deviation records into violation groups.

    Args:
        deviations: Deviation records of one analysis run

    Returns:
        Fresh mapping from composite key to ViolationGroup, in order of
        first sighting
    """
    groups: Dict[str, ViolationGroup] = {}
    seen: Dict[str, Set] = {}

    for record in deviations:
        key = record.key
        group = groups.get(key)

        if group is None:
            group = ViolationGroup(
                key=key,
                kind=record.kind,
                activity=record.activity,
            )
            groups[key] = group
            seen[key] = set()

        # Sentinel ids stand for distinct unparseable cases, never deduplicated
        if not is_sentinel_case_id(record.case_id):
            if record.case_id in seen[key]:
                logger.debug(f"Duplicate deviation {key} for case {record.case_id}")
                continue
            seen[key].add(record.case_id)

        group.case_ids.append(record.case_id)

        spec = group.specifications.get(record.specification)
        if spec is None:
            spec = SpecificationBreakdown(name=record.specification)
            group.specifications[record.specification] = spec
        spec.case_ids.append(record.case_id)

    return groups


def _rank_specifications(
    specifications: Mapping[str, SpecificationBreakdown]
) -> Dict[str, SpecificationBreakdown]:
    ordered = sorted(
        specifications.values(),
        key=lambda s: (-s.count, s.name)
    )
    return {
        s.name: SpecificationBreakdown(name=s.name, case_ids=list(s.case_ids))
        for s in ordered
    }


def rank_violations(
    groups: Mapping[str, ViolationGroup],
    top_n: Optional[int] = None,
    total_cases: int = 0
) -> RankedViolations:
    """
    Order violation groups by the number of affected cases.

    Groups are sorted by case count descending; equal counts are ordered by
    composite key. Within each group the specification breakdown is sorted
    by case count descending, then by label.

    Args:
        groups: Aggregated violation groups
        top_n: Keep only the ``top_n`` most frequent groups (None keeps all)
        total_cases: Number of cases in the run, carried for reporting

    Returns:
        RankedViolations holding copies of the groups

    Raises:
        ValueError: If top_n is not a positive integer
    """
    if top_n is not None and top_n <= 0:
        raise ValueError(f"top_n must be a positive integer, got {top_n}")

    ordered = sorted(groups.values(), key=lambda g: (-g.count, g.key))
    if top_n is not None:
        ordered = ordered[:top_n]

    ranked = tuple(
        ViolationGroup(
            key=g.key,
            kind=g.kind,
            activity=g.activity,
            case_ids=list(g.case_ids),
            specifications=_rank_specifications(g.specifications),
        )
        for g in ordered
    )
    return RankedViolations(groups=ranked, total_cases=total_cases)
