"""
SQL identifier handling utilities.

Table and column names are interpolated into statement text because parameter
binding only covers value positions. Every identifier therefore passes a strict
allow-list before any string concatenation happens.
"""

import re
from typing import Any, Iterable, List

from ingest_hub.domain.errors import InvalidIdentifierError

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_valid_identifier(name: Any) -> bool:
    """
    Check a name against the identifier allow-list.

    Examples:
        >>> is_valid_identifier("employee_records_2024")
        True
        >>> is_valid_identifier("table; DROP TABLE x")
        False
        >>> is_valid_identifier("2024_records")
        False
    """
    return isinstance(name, str) and IDENTIFIER_PATTERN.fullmatch(name) is not None


def validate_identifier(name: Any, role: str = "identifier") -> str:
    """
    Return ``name`` unchanged if it is a safe SQL identifier.

    Args:
        name: Table or column name
        role: Label used in the error message ("table", "column")

    Returns:
        The validated name

    Raises:
        InvalidIdentifierError: If the name contains anything other than
            letters, digits and underscore, or starts with a digit
    """
    if not is_valid_identifier(name):
        raise InvalidIdentifierError(name, role)
    return name


def validate_identifiers(names: Iterable[Any], role: str = "column") -> List[str]:
    """Validate every name in ``names``, returning them as a list in order."""
    return [validate_identifier(name, role) for name in names]
