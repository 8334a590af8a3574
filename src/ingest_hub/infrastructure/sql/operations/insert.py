"""
SQL INSERT statement builders.

Builds parameterized ``INSERT INTO t (a,b) VALUES (?,?)`` statements from
Records. Identifiers are validated against the allow-list and interpolated;
values are always bound through ``?`` placeholders.
"""

from typing import List, Literal, Optional, Sequence

from ingest_hub.domain.records import InsertStatement, Record, Value
from ingest_hub.infrastructure.sql.core.identifier import (
    validate_identifier,
    validate_identifiers,
)

BatchMode = Literal["per_row", "multi_row"]

PLACEHOLDER = "?"


def _values_group(column_count: int) -> str:
    return "(" + ",".join([PLACEHOLDER] * column_count) + ")"


def _insert_prefix(table: str, columns: Sequence[str]) -> str:
    if not columns:
        raise ValueError("Column list cannot be empty")
    validate_identifier(table, "table")
    validate_identifiers(columns, "column")
    return f"INSERT INTO {table} ({','.join(columns)}) VALUES "


def _row_params(columns: Sequence[str], row: Record) -> List[Value]:
    return [row.get_value(col) for col in columns]


def build_insert(
    table: str,
    columns: Sequence[str],
    row: Record,
    row_index: Optional[int] = None,
) -> InsertStatement:
    """
    Build a single-row INSERT statement.

    Args:
        table: Target table name
        columns: Column names in insertion order
        row: Record supplying the values; absent columns bind as NULL
        row_index: Source position of ``row``, carried for failure attribution

    Returns:
        InsertStatement with one placeholder per column

    Raises:
        InvalidIdentifierError: If the table or a column name is unsafe
        ValueError: If ``columns`` is empty

    Example:
        >>> stmt = build_insert("t", ["a", "b"], Record.from_mapping({"a": 1, "b": "x"}))
        >>> stmt.sql
        'INSERT INTO t (a,b) VALUES (?,?)'
        >>> stmt.bound_parameters()
        (1, 'x')
    """
    sql = _insert_prefix(table, columns) + _values_group(len(columns))
    indices = (row_index,) if row_index is not None else ()
    return InsertStatement(sql, tuple(_row_params(columns, row)), indices)


def build_multi_row_insert(
    table: str,
    columns: Sequence[str],
    rows: Sequence[Record],
    first_index: int = 0,
) -> InsertStatement:
    """
    Build one INSERT statement carrying every row in ``rows``.

    Parameters are flattened row-major, so the statement binds
    ``len(rows) * len(columns)`` values.

    Example:
        >>> rows = [Record.from_mapping({"a": 1}), Record.from_mapping({"a": 2})]
        >>> build_multi_row_insert("t", ["a"], rows).sql
        'INSERT INTO t (a) VALUES (?),(?)'
    """
    if not rows:
        raise ValueError("Multi-row INSERT needs at least one row")

    group = _values_group(len(columns))
    sql = _insert_prefix(table, columns) + ",".join([group] * len(rows))

    params: List[Value] = []
    for row in rows:
        params.extend(_row_params(columns, row))

    indices = tuple(range(first_index, first_index + len(rows)))
    return InsertStatement(sql, tuple(params), indices)


def rows_per_statement(
    column_count: int, max_rows_per_statement: int, max_bound_parameters: int
) -> int:
    """Largest row count a multi-row statement may carry under both bounds."""
    if column_count <= 0:
        raise ValueError("Column list cannot be empty")
    if column_count > max_bound_parameters:
        raise ValueError(
            f"{column_count} columns exceed the bound parameter limit "
            f"({max_bound_parameters}) for a single row"
        )
    return max(1, min(max_rows_per_statement, max_bound_parameters // column_count))


def build_batch_insert(
    table: str,
    columns: Sequence[str],
    rows: Sequence[Record],
    mode: BatchMode = "per_row",
    max_rows_per_statement: int = 500,
    max_bound_parameters: int = 32766,
    first_index: int = 0,
) -> List[InsertStatement]:
    """
    Build the statements that insert ``rows`` into ``table``.

    Args:
        table: Target table name
        columns: Shared column list for every row
        rows: Records in source order
        mode: ``per_row`` for one statement per row, ``multi_row`` to group rows
        max_rows_per_statement: Row bound for a multi-row statement
        max_bound_parameters: Placeholder bound for a multi-row statement
        first_index: Source position of ``rows[0]``

    Returns:
        Statements in source order; empty when ``rows`` is empty
    """
    if mode == "per_row":
        return [
            build_insert(table, columns, row, first_index + offset)
            for offset, row in enumerate(rows)
        ]
    if mode != "multi_row":
        raise ValueError(f"Unknown batch mode: {mode!r}")

    chunk = rows_per_statement(len(columns), max_rows_per_statement, max_bound_parameters)
    return [
        build_multi_row_insert(
            table, columns, rows[start : start + chunk], first_index + start
        )
        for start in range(0, len(rows), chunk)
    ]
