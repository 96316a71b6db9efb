"""
Variant Conformance Engine

Compares recorded case variants against a reference "happy path",
classifies skipped and extra steps, and ranks the most frequent
deviations together with the vendors/specifications they concentrate in.
"""

__version__ = "0.1.0"
__author__ = "Variant Conformance Team"

# Default configuration
DEFAULT_CONFIG = {
    "random_seed": 42,
    "variant_delimiter": "->",
    "invalid_case_ids": "sentinel",  # "sentinel" or "skip"
    "top_n": None,                   # None keeps every violation group
    "max_display": 19,
    "breakdown_limit": 10,
    "max_rows": None,                # None means no paging limit
}
