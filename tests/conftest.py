"""
Pytest configuration and fixtures for variant conformance tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from variant_conformance.conformance import Case


HAPPY_PATH = [
    "Create Purchase Order Item",
    "Receive Order Confirmation",
    "Record Goods Receipt",
    "Record Invoice Receipt",
    "Pay Invoice",
]


@pytest.fixture
def abc_reference():
    """Reference sequence of the worked example."""
    return ["A", "B", "C"]


@pytest.fixture
def abc_cases():
    """Cases of the worked example: two skip B, one adds D."""
    return [
        Case(case_id=1, variant=("A", "C"), specification="X"),
        Case(case_id=2, variant=("A", "B", "C", "D"), specification="Y"),
        Case(case_id=3, variant=("A", "C"), specification="X"),
    ]


@pytest.fixture
def happy_path():
    """Purchase-to-pay happy path."""
    return list(HAPPY_PATH)


@pytest.fixture
def p2p_rows():
    """Positional rows of a small purchase-to-pay table."""
    return [
        [100, "yes", " -> ".join(HAPPY_PATH), "Acme Corp"],
        [101, "no", "Create Purchase Order Item -> Record Goods Receipt -> "
                    "Record Invoice Receipt -> Pay Invoice", "Acme Corp"],
        [102, "no", "Create Purchase Order Item -> Record Goods Receipt -> "
                    "Record Invoice Receipt -> Pay Invoice", "Globex"],
        [103, "no", "Create Purchase Order Item -> Change Price -> Receive Order Confirmation -> "
                    "Record Goods Receipt -> Record Invoice Receipt -> Pay Invoice", "Globex"],
        [104, "no", "Create Purchase Order Item -> Receive Order Confirmation -> "
                    "Record Goods Receipt -> Record Invoice Receipt -> Pay Invoice", "Initech"],
        [105, "", "Create Purchase Order Item -> Record Goods Receipt -> Pay Invoice", "Acme Corp"],
    ]


@pytest.fixture
def p2p_csv(tmp_path, p2p_rows):
    """The purchase-to-pay table written as CSV."""
    lines = ["case_id,is_happy_path,variant,specification"]
    for case_id, flag, variant, spec in p2p_rows:
        lines.append(f'{case_id},{flag},"{variant}",{spec}')
    path = tmp_path / "cases.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
