"""Core SQL utilities package."""

from .identifier import is_valid_identifier, validate_identifier, validate_identifiers

__all__ = [
    "is_valid_identifier",
    "validate_identifier",
    "validate_identifiers",
]
