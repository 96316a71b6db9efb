"""
Row parsing for variant tables.

Each input row is positional:

    [case_id, is_happy_path, variant, specification]

The variant is a delimited string of activity names ("A -> B -> C"). The
row flagged as the happy path supplies the reference sequence; when several
rows are flagged the last one wins.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from ..conformance.models import Case, CaseId, is_sentinel_case_id

logger = logging.getLogger(__name__)

# Positions of the fields within a row
CASE_ID_INDEX = 0
REFERENCE_FLAG_INDEX = 1
VARIANT_INDEX = 2
SPECIFICATION_INDEX = 3
ROW_WIDTH = 4

DEFAULT_DELIMITER = "->"

# Value used for case ids that cannot be parsed as integers
CASE_ID_SENTINEL = np.nan

# Accepted (case-insensitive) spellings of a set happy path flag
REFERENCE_FLAG_VALUES = frozenset({"true", "yes"})

INVALID_CASE_ID_POLICIES = ("sentinel", "skip")


def _text(value: Any) -> str:
    """Render a cell as text, treating None as empty."""
    if value is None:
        return ""
    return str(value)


def parse_variant(text: Any, delimiter: str = DEFAULT_DELIMITER) -> Tuple[str, ...]:
    """
    Split a variant string into trimmed activity names.

    Args:
        text: Delimited activity string, e.g. "A -> B -> C"
        delimiter: Activity separator

    Returns:
        Tuple of activity names; empty tokens are dropped
    """
    tokens = (token.strip() for token in _text(text).split(delimiter))
    return tuple(token for token in tokens if token)


def parse_case_id(value: Any) -> CaseId:
    """
    Parse a case id as an integer.

    Integral floats ("12.0") are accepted. Anything else degrades to
    CASE_ID_SENTINEL (NaN) instead of failing the run.

    Args:
        value: Raw case id cell

    Returns:
        The integer case id, or NaN
    """
    if isinstance(value, bool):
        return CASE_ID_SENTINEL
    if isinstance(value, (int, np.integer)):
        return int(value)

    text = _text(value).strip()
    try:
        return int(text)
    except ValueError:
        pass

    try:
        number = float(text)
    except ValueError:
        return CASE_ID_SENTINEL
    if math.isfinite(number) and number.is_integer():
        return int(number)
    return CASE_ID_SENTINEL


def is_reference_flag(value: Any) -> bool:
    """
    Check whether a happy path flag cell is set.

    The flag is set when the cell is boolean True, or its trimmed text is
    "true" or "yes" in any letter case. Everything else is unset.
    """
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    return _text(value).strip().lower() in REFERENCE_FLAG_VALUES


def normalize_row(row: Sequence[Any]) -> List[Any]:
    """Pad a row to the four positional fields."""
    values = list(row)
    if len(values) < ROW_WIDTH:
        logger.warning(f"Row has {len(values)} fields, expected {ROW_WIDTH}: {values!r}")
        values.extend([""] * (ROW_WIDTH - len(values)))
    return values


def derive_reference(
    rows: Sequence[Sequence[Any]],
    delimiter: str = DEFAULT_DELIMITER
) -> Tuple[str, ...]:
    """
    Derive the reference sequence from the flagged happy path row.

    Args:
        rows: Positional table rows
        delimiter: Activity separator of the variant column

    Returns:
        Activities of the last flagged row, or () if no row is flagged
    """
    reference: Tuple[str, ...] = ()
    flagged = 0

    for row in rows:
        values = normalize_row(row)
        if is_reference_flag(values[REFERENCE_FLAG_INDEX]):
            reference = parse_variant(values[VARIANT_INDEX], delimiter)
            flagged += 1

    if flagged > 1:
        logger.info(f"{flagged} rows flagged as happy path, using the last one")
    elif flagged == 0:
        logger.debug("No row flagged as happy path")

    return reference


@dataclass
class ParsedTable:
    """Cases parsed from a table together with parsing statistics."""
    cases: List[Case] = field(default_factory=list)
    skipped_rows: int = 0
    invalid_case_ids: int = 0


def rows_to_cases(
    rows: Sequence[Sequence[Any]],
    delimiter: str = DEFAULT_DELIMITER,
    invalid_case_ids: str = "sentinel"
) -> ParsedTable:
    """
    Build cases from positional table rows.

    Every row is a case, the happy path row included.

    Args:
        rows: Positional table rows
        delimiter: Activity separator of the variant column
        invalid_case_ids: "sentinel" keeps rows with unparseable ids under
            NaN; "skip" drops them

    Returns:
        ParsedTable with the cases and counts of degraded rows

    Raises:
        ValueError: If the invalid_case_ids policy is unknown
    """
    if invalid_case_ids not in INVALID_CASE_ID_POLICIES:
        raise ValueError(
            f"Unknown invalid_case_ids policy '{invalid_case_ids}', "
            f"expected one of {INVALID_CASE_ID_POLICIES}"
        )

    parsed = ParsedTable()

    for row in rows:
        values = normalize_row(row)
        case_id = parse_case_id(values[CASE_ID_INDEX])

        if is_sentinel_case_id(case_id):
            parsed.invalid_case_ids += 1
            if invalid_case_ids == "skip":
                logger.warning(f"Skipping row with invalid case id: {values[CASE_ID_INDEX]!r}")
                parsed.skipped_rows += 1
                continue
            logger.warning(f"Invalid case id {values[CASE_ID_INDEX]!r}, keeping case as NaN")

        parsed.cases.append(Case(
            case_id=case_id,
            variant=parse_variant(values[VARIANT_INDEX], delimiter),
            specification=_text(values[SPECIFICATION_INDEX]),
        ))

    return parsed


def reference_from_text(
    text: Optional[str],
    delimiter: str = DEFAULT_DELIMITER
) -> Tuple[str, ...]:
    """Parse an explicitly supplied reference sequence."""
    if text is None:
        return ()
    return parse_variant(text, delimiter)
