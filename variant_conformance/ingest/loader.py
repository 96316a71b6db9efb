"""
Data loader for variant tables.

Loads CSV or JSON exports of a case table and converts them into positional
rows: [case_id, is_happy_path, variant, specification].

Column names are matched through a set of known aliases, so exports that
call the columns "Case ID", "Vendor" or "Happy Path" load without
configuration. Validates that all four columns are present.
"""

import csv
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class TableLoadError(ValueError):
    """Raised when an input table cannot be read or lacks required columns."""


@dataclass
class ValidationResult:
    """Result of column validation."""
    valid: bool
    column_map: Dict[str, str] = field(default_factory=dict)
    missing_fields: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _canonical(name: str) -> str:
    """Lowercase a column name and collapse separators."""
    return "_".join(str(name).strip().lower().replace("-", " ").split())


class TableLoader:
    """Loads case tables from CSV and JSON files."""

    SUPPORTED_SUFFIXES = (".csv", ".json")

    # Positional field order of a row
    FIELDS = ("case_id", "is_happy_path", "variant", "specification")

    # Field name mappings: normalized name -> possible column names
    FIELD_MAPPINGS = {
        'case_id': ['case_id', 'caseid', 'case', 'id'],
        'is_happy_path': ['is_happy_path', 'happy_path', 'is_reference', 'reference', 'happy'],
        'variant': ['variant', 'trace', 'path', 'activities'],
        'specification': ['specification', 'spec', 'vendor', 'supplier', 'label'],
    }

    def __init__(self, column_names: Optional[Dict[str, str]] = None):
        """
        Initialize the table loader.

        Args:
            column_names: Explicit column name per field, overriding aliases

        Raises:
            ValueError: If column_names names an unknown field
        """
        self.column_names = dict(column_names or {})
        unknown = set(self.column_names) - set(self.FIELDS)
        if unknown:
            raise ValueError(f"Unknown table fields: {sorted(unknown)}")

        self.loaded_file: Optional[str] = None
        self.validation: Optional[ValidationResult] = None

    def load(self, file_path: Path) -> List[List[Any]]:
        """
        Load a case table into positional rows.

        Args:
            file_path: CSV or JSON file

        Returns:
            List of rows in field order

        Raises:
            TableLoadError: If the file is missing, unparseable or lacks columns
            ValueError: If the file type is not supported
        """
        file_path = Path(file_path)
        suffix = file_path.suffix.lower()

        if suffix not in self.SUPPORTED_SUFFIXES:
            raise ValueError(
                f"Unsupported file type '{suffix}', expected one of {self.SUPPORTED_SUFFIXES}"
            )
        if not file_path.exists():
            raise TableLoadError(f"Input file not found: {file_path}")

        if suffix == ".csv":
            rows = self._load_csv(file_path)
        else:
            rows = self._load_json(file_path)

        self.loaded_file = str(file_path)
        logger.info(f"Loaded {len(rows)} rows from {file_path.name}")
        return rows

    def _load_csv(self, file_path: Path) -> List[List[Any]]:
        """Load a CSV file with a header row."""
        try:
            with open(file_path, 'r', encoding='utf-8-sig', newline='') as f:
                reader = csv.DictReader(f)
                records = list(reader)
                header = reader.fieldnames or []
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise TableLoadError(f"Failed to read {file_path.name}: {e}") from e

        return self._records_to_rows(records, header)

    def _load_json(self, file_path: Path) -> List[List[Any]]:
        """Load a JSON list of rows or of objects."""
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise TableLoadError(f"Failed to parse {file_path.name}: {e}") from e
        except OSError as e:
            raise TableLoadError(f"Failed to read {file_path.name}: {e}") from e

        # Handle a dict with nested data
        if isinstance(data, dict):
            for key in ['rows', 'cases', 'data', 'results', 'items']:
                if key in data:
                    data = data[key]
                    break
            else:
                data = [data]

        if not isinstance(data, list):
            raise TableLoadError(f"Expected a list of rows in {file_path.name}")

        if not data:
            return []

        if all(isinstance(item, dict) for item in data):
            header: List[str] = []
            for item in data:
                for key in item:
                    if key not in header:
                        header.append(key)
            return self._records_to_rows(data, header)

        if all(isinstance(item, (list, tuple)) for item in data):
            return [list(item) for item in data]

        raise TableLoadError(f"Rows in {file_path.name} must all be lists or all be objects")

    def _records_to_rows(
        self,
        records: List[Dict[str, Any]],
        header: List[str]
    ) -> List[List[Any]]:
        """Convert keyed records to positional rows."""
        self.validation = self.validate_columns(header)
        if not self.validation.valid:
            raise TableLoadError(
                f"Missing required columns: {', '.join(self.validation.missing_fields)}"
            )

        columns = [self.validation.column_map[name] for name in self.FIELDS]
        return [[record.get(column) for column in columns] for record in records]

    def validate_columns(self, header: List[str]) -> ValidationResult:
        """
        Resolve each field to a column of the header.

        Args:
            header: Column names of the input

        Returns:
            ValidationResult with the resolved column map
        """
        result = ValidationResult(valid=True)
        by_canonical = {_canonical(name): name for name in header}

        for field_name in self.FIELDS:
            explicit = self.column_names.get(field_name)
            candidates = [explicit] if explicit else self.FIELD_MAPPINGS[field_name]

            for candidate in candidates:
                column = by_canonical.get(_canonical(candidate))
                if column is not None:
                    result.column_map[field_name] = column
                    break
            else:
                result.missing_fields.append(field_name)
                result.valid = False

        unused = [h for h in header if h not in result.column_map.values()]
        if unused:
            result.warnings.append(f"Ignoring columns: {', '.join(unused)}")
            logger.debug(f"Ignoring columns: {unused}")

        return result


def load_table(file_path: Path, column_names: Optional[Dict[str, str]] = None) -> List[List[Any]]:
    """
    Convenience function to load a case table.

    Args:
        file_path: CSV or JSON file
        column_names: Explicit column name per field

    Returns:
        List of positional rows
    """
    return TableLoader(column_names).load(Path(file_path))
