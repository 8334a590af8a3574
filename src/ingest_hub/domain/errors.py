"""Error taxonomy for ingestion.

Every failure surfaced by ``ingest`` is an ``IngestError`` subclass carrying an
``ErrorKind`` so callers and log processors can classify it without string
matching. Wrapped driver or decoder errors are kept as ``__cause__``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Sequence


class ErrorKind(str, Enum):
    """Classification of ingestion failures."""

    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"
    EMPTY_BATCH = "EMPTY_BATCH"
    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    TRANSACTION_START_FAILED = "TRANSACTION_START_FAILED"
    ROW_EXECUTION_FAILED = "ROW_EXECUTION_FAILED"
    COMMIT_FAILED = "COMMIT_FAILED"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    DECODE_ERROR = "DECODE_ERROR"
    CANCELLED = "CANCELLED"
    LOAD_ABORTED = "LOAD_ABORTED"
    INVALID_STATE = "INVALID_STATE"


class IngestError(Exception):
    """Base class for all ingestion errors."""

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to structured dict for logging and failure export."""
        data: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "error_kind": self.kind.value,
            "message": str(self),
        }
        cause = self.__cause__
        if cause is not None:
            data["original_error_type"] = type(cause).__name__
            data["original_error_message"] = str(cause)
        return data


class SchemaMismatchError(IngestError):
    """A record uses columns the target table does not know."""

    kind = ErrorKind.SCHEMA_MISMATCH

    def __init__(
        self,
        table: str,
        unknown_columns: Sequence[str],
        row_index: Optional[int] = None,
    ):
        self.table = table
        self.unknown_columns = tuple(unknown_columns)
        self.row_index = row_index
        where = f"Row {row_index}" if row_index is not None else "Record"
        super().__init__(
            f"{where} has columns not in target {table!r}: "
            f"{', '.join(self.unknown_columns)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            table=self.table,
            row_index=self.row_index,
            unknown_columns=list(self.unknown_columns),
        )
        return data


class EmptyBatchError(IngestError):
    """No records and no known columns: nothing to derive a column list from."""

    kind = ErrorKind.EMPTY_BATCH


class InvalidIdentifierError(IngestError):
    """A table or column name failed the identifier allow-list."""

    kind = ErrorKind.INVALID_IDENTIFIER

    def __init__(self, identifier: Any, role: str = "identifier"):
        self.identifier = identifier
        self.role = role
        super().__init__(
            f"Invalid {role} {identifier!r}: must be letters, digits or underscore "
            "and must not start with a digit"
        )


class TransactionStartError(IngestError):
    """The gateway could not begin a transaction."""

    kind = ErrorKind.TRANSACTION_START_FAILED


class RowExecutionError(IngestError):
    """Executing the statement for one row (or one multi-row group) failed."""

    kind = ErrorKind.ROW_EXECUTION_FAILED

    def __init__(self, message: str, row_index: int, sql: Optional[str] = None):
        self.row_index = row_index
        self.sql = sql
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(row_index=self.row_index, sql=self.sql)
        return data


class CommitError(IngestError):
    """Commit failed; the table state is indeterminate and must be re-queried."""

    kind = ErrorKind.COMMIT_FAILED


class RollbackError(IngestError):
    """Rollback failed; the connection is in an unknown state and must be discarded."""

    kind = ErrorKind.ROLLBACK_FAILED

    def __init__(self, message: str, original_error: Optional[BaseException] = None):
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.original_error is not None:
            data["triggering_error_type"] = type(self.original_error).__name__
            data["triggering_error_message"] = str(self.original_error)
        return data


class DecodeError(IngestError):
    """A format adapter could not decode the source at ``position``."""

    kind = ErrorKind.DECODE_ERROR

    def __init__(self, message: str, source_format: str, position: Optional[int] = None):
        self.source_format = source_format
        self.position = position
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.position is None:
            return f"[{self.source_format}] {base}"
        return f"[{self.source_format}] record {self.position}: {base}"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(source_format=self.source_format, position=self.position)
        return data


class CancelledError(IngestError):
    """Ingestion was cancelled between rows and rolled back."""

    kind = ErrorKind.CANCELLED

    def __init__(self, rows_processed: int):
        self.rows_processed = rows_processed
        super().__init__(f"Ingestion cancelled after {rows_processed} rows")


class LoaderStateError(IngestError):
    """Operation not permitted in the loader's current state."""

    kind = ErrorKind.INVALID_STATE


class LoadAbortedError(IngestError):
    """An unclassified failure stopped the load; the transaction was rolled back.

    The original exception is kept as ``__cause__``.
    """

    kind = ErrorKind.LOAD_ABORTED


__all__ = [
    "ErrorKind",
    "IngestError",
    "SchemaMismatchError",
    "EmptyBatchError",
    "InvalidIdentifierError",
    "TransactionStartError",
    "RowExecutionError",
    "CommitError",
    "RollbackError",
    "DecodeError",
    "CancelledError",
    "LoaderStateError",
    "LoadAbortedError",
]
