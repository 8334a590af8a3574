"""
SQL module for parameterized statement generation.

Provides identifier validation and INSERT builders shared by the loader.
"""

from .core.identifier import is_valid_identifier, validate_identifier, validate_identifiers
from .operations.insert import (
    build_batch_insert,
    build_insert,
    build_multi_row_insert,
    rows_per_statement,
)

__all__ = [
    "is_valid_identifier",
    "validate_identifier",
    "validate_identifiers",
    "build_insert",
    "build_multi_row_insert",
    "build_batch_insert",
    "rows_per_statement",
]
