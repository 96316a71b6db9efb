"""
Purchase-to-Pay Synthetic Case Table Generator

Generates a case table for conformance analysis:
- One row flagged as the happy path
- Cases following the happy path, or deviating from it by skipped steps,
  extra steps, or substituted steps
- Vendor names as specification labels, with some vendors far more prone
  to deviations than others

Usage:
    variant-conformance generate --count 5000 --output cases.csv --seed 42
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import numpy as np
from faker import Faker

logger = logging.getLogger(__name__)


P2P_HAPPY_PATH = [
    "Create Purchase Order Item",
    "Receive Order Confirmation",
    "Record Goods Receipt",
    "Record Invoice Receipt",
    "Pay Invoice",
]

# Steps that show up in deviating cases
EXTRA_ACTIVITIES: Dict[str, float] = {
    "Change Price": 0.30,
    "Change Quantity": 0.20,
    "Vendor creates invoice": 0.20,
    "Cancel Invoice Receipt": 0.10,
    "Delete Purchase Order Item": 0.10,
    "Clear Invoice": 0.10,
}

# Relative likelihood of each happy path step being skipped
SKIP_WEIGHTS: Dict[str, float] = {
    "Create Purchase Order Item": 0.02,
    "Receive Order Confirmation": 0.40,
    "Record Goods Receipt": 0.25,
    "Record Invoice Receipt": 0.18,
    "Pay Invoice": 0.15,
}

TABLE_HEADER = ["case_id", "is_happy_path", "variant", "specification"]


class P2PLogGenerator:
    """
    Generates a synthetic purchase-to-pay case table.

    Each vendor has its own deviation propensity, so violations concentrate
    in a few specifications the way they do in real procurement logs.
    """

    def __init__(
        self,
        count: int = 1000,
        seed: int = 42,
        deviation_rate: float = 0.35,
        num_vendors: int = 25,
        delimiter: str = "->",
    ):
        if count <= 0:
            raise ValueError(f"count must be positive, got {count}")
        if not 0.0 <= deviation_rate <= 1.0:
            raise ValueError(f"deviation_rate must be within [0, 1], got {deviation_rate}")

        self.count = count
        self.seed = seed
        self.deviation_rate = deviation_rate
        self.num_vendors = num_vendors
        self.delimiter = delimiter

        # Initialize random generators
        self.rng = np.random.default_rng(seed)
        self.faker = Faker()
        Faker.seed(seed)

        self.vendors: List[str] = []
        self.vendor_weights: np.ndarray = np.array([])
        self.vendor_propensity: Dict[str, float] = {}
        self.rows: List[List[Any]] = []

        self.stats = {
            "happy_cases": 0,
            "deviating_cases": 0,
            "skipped_steps": 0,
            "extra_steps": 0,
        }

    def _weighted_choice(self, options: Dict[str, float]) -> str:
        """Select from weighted options."""
        choices = list(options.keys())
        weights = np.array(list(options.values()))
        return str(self.rng.choice(choices, p=weights / weights.sum()))

    def _join(self, activities: List[str]) -> str:
        return f" {self.delimiter} ".join(activities)

    def generate_vendors(self) -> None:
        """Generate vendor names with a skewed size and deviation profile."""
        names = set()
        while len(names) < self.num_vendors:
            names.add(self.faker.company())
        self.vendors = sorted(names)

        # Zipf-like vendor sizes
        sizes = 1.0 / np.arange(1, self.num_vendors + 1)
        self.vendor_weights = sizes / sizes.sum()

        # Propensity scales the global deviation rate per vendor
        propensity = self.rng.gamma(shape=2.0, scale=0.5, size=self.num_vendors)
        self.vendor_propensity = {
            vendor: float(p) for vendor, p in zip(self.vendors, propensity)
        }

    def _deviating_variant(self) -> List[str]:
        """Build a variant that deviates from the happy path."""
        variant = list(P2P_HAPPY_PATH)

        n_skips = int(self.rng.integers(0, 3))
        for _ in range(n_skips):
            step = self._weighted_choice(SKIP_WEIGHTS)
            if step in variant and len(variant) > 1:
                variant.remove(step)
                self.stats["skipped_steps"] += 1

        n_extras = int(self.rng.integers(0 if n_skips else 1, 3))
        for _ in range(n_extras):
            extra = self._weighted_choice(EXTRA_ACTIVITIES)
            position = int(self.rng.integers(0, len(variant) + 1))
            variant.insert(position, extra)
            self.stats["extra_steps"] += 1

        return variant

    def generate_all(self) -> List[List[Any]]:
        """
        Generate the case table.

        Returns:
            Rows of [case_id, is_happy_path, variant, specification]
        """
        logger.info(f"Generating {self.count} cases with seed {self.seed}")
        self.generate_vendors()
        self.rows = []

        for i in range(self.count):
            case_id = i + 1
            vendor = str(self.rng.choice(self.vendors, p=self.vendor_weights))

            # The first case documents the happy path
            if i == 0:
                self.rows.append([case_id, "yes", self._join(P2P_HAPPY_PATH), vendor])
                self.stats["happy_cases"] += 1
                continue

            rate = min(1.0, self.deviation_rate * self.vendor_propensity[vendor])
            if self.rng.random() < rate:
                variant = self._deviating_variant()
                self.stats["deviating_cases"] += 1
            else:
                variant = list(P2P_HAPPY_PATH)
                self.stats["happy_cases"] += 1

            self.rows.append([case_id, "no", self._join(variant), vendor])

        logger.info(
            f"Generated {self.stats['happy_cases']} happy and "
            f"{self.stats['deviating_cases']} deviating cases"
        )
        return self.rows

    def save_output(self, output_path: Path) -> Path:
        """
        Save the generated rows as CSV or JSON, chosen by file suffix.

        Raises:
            ValueError: If the suffix is neither .csv nor .json
        """
        output_path = Path(output_path)
        suffix = output_path.suffix.lower()
        if suffix not in (".csv", ".json"):
            raise ValueError(f"Unsupported output type '{suffix}', use .csv or .json")

        if not self.rows:
            self.generate_all()

        output_path.parent.mkdir(parents=True, exist_ok=True)
        if suffix == ".csv":
            with open(output_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(TABLE_HEADER)
                writer.writerows(self.rows)
        else:
            records = [dict(zip(TABLE_HEADER, row)) for row in self.rows]
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)

        logger.info(f"Saved {len(self.rows)} rows to {output_path}")
        return output_path
