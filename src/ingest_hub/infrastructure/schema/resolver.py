"""Column plan resolution for record batches.

The resolver decides which columns an INSERT names and checks that every
record fits them. With a known target column list that list wins and records
must use a subset of it; without one, the ordered union of keys across the
batch becomes the column list and absent columns bind as NULL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple, Union

from ingest_hub.domain.errors import EmptyBatchError, SchemaMismatchError
from ingest_hub.domain.records import Record, TableTarget
from ingest_hub.infrastructure.sql.core.identifier import (
    validate_identifier,
    validate_identifiers,
)


@dataclass(frozen=True)
class ColumnPlan:
    """Ordered insert columns for one batch.

    Attributes:
        table: Target table name (validated)
        columns: Insert column order
        known: True when ``columns`` came from the target, False when it is
            the union of the batch's keys
    """

    table: str
    columns: Tuple[str, ...]
    known: bool

    def unknown_columns(self, record: Record) -> Tuple[str, ...]:
        allowed = set(self.columns)
        return tuple(col for col in record if col not in allowed)


def validate_target(target: TableTarget) -> None:
    """Check the table name and any known column names against the allow-list."""
    validate_identifier(target.name, "table")
    if target.columns is not None:
        if not target.columns:
            raise EmptyBatchError(f"Target {target.name!r} lists no columns")
        validate_identifiers(target.columns, "column")


def check_row(plan: ColumnPlan, record: Record, row_index: int) -> None:
    """
    Per-row subset check against a resolved plan.

    Raises:
        SchemaMismatchError: If ``record`` names a column outside the plan
    """
    unknown = plan.unknown_columns(record)
    if unknown:
        raise SchemaMismatchError(plan.table, unknown, row_index=row_index)


def resolve(
    target: TableTarget,
    sample: Union[Record, Sequence[Record]],
    first_index: int = 0,
) -> ColumnPlan:
    """
    Determine the insert column list for a batch of records.

    Args:
        target: Destination table and optional known columns
        sample: One record or the batch of records to be inserted together
        first_index: Source position of the first record, for error reporting

    Returns:
        ColumnPlan shared by every statement in the batch

    Raises:
        InvalidIdentifierError: If the table or a resolved column name is unsafe
        SchemaMismatchError: If a record has a column the target does not list
        EmptyBatchError: If there are no records and no known columns, or the
            resolved column list is empty

    Example:
        >>> target = TableTarget("t")
        >>> rows = [Record.from_mapping({"a": 1}), Record.from_mapping({"b": 2, "a": 3})]
        >>> resolve(target, rows).columns
        ('a', 'b')
    """
    records: Sequence[Record] = [sample] if isinstance(sample, Record) else sample
    validate_identifier(target.name, "table")

    if target.columns is not None:
        columns = tuple(validate_identifiers(target.columns, "column"))
        if not columns:
            raise EmptyBatchError(f"Target {target.name!r} lists no columns")
        plan = ColumnPlan(target.name, columns, known=True)
        for offset, record in enumerate(records):
            check_row(plan, record, first_index + offset)
        return plan

    if not records:
        raise EmptyBatchError(
            f"Cannot derive columns for {target.name!r}: no records and no known columns"
        )

    # dict preserves first-seen order
    seen: Dict[str, None] = {}
    for record in records:
        for col in record:
            seen.setdefault(col, None)

    columns = tuple(validate_identifiers(seen, "column"))
    if not columns:
        raise EmptyBatchError(f"Records for {target.name!r} carry no columns")
    return ColumnPlan(target.name, columns, known=False)
