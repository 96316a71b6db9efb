"""Input tables: file loading, row parsing and windowed delivery."""

from .loader import TableLoadError, TableLoader, ValidationResult, load_table
from .paging import RowWindowBuffer
from .table import (
    CASE_ID_SENTINEL,
    ParsedTable,
    derive_reference,
    is_reference_flag,
    is_sentinel_case_id,
    parse_case_id,
    parse_variant,
    reference_from_text,
    rows_to_cases,
)

__all__ = [
    "TableLoadError",
    "TableLoader",
    "ValidationResult",
    "load_table",
    "RowWindowBuffer",
    "CASE_ID_SENTINEL",
    "ParsedTable",
    "derive_reference",
    "is_reference_flag",
    "is_sentinel_case_id",
    "parse_case_id",
    "parse_variant",
    "reference_from_text",
    "rows_to_cases",
]
