"""Schema resolution for record batches."""

from .resolver import ColumnPlan, check_row, resolve, validate_target

__all__ = ["ColumnPlan", "check_row", "resolve", "validate_target"]
