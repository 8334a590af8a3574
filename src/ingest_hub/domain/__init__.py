"""Format-neutral domain model: records, values, targets and errors."""

from ingest_hub.domain.errors import (
    CancelledError,
    CommitError,
    DecodeError,
    EmptyBatchError,
    ErrorKind,
    IngestError,
    InvalidIdentifierError,
    LoadAbortedError,
    LoaderStateError,
    RollbackError,
    RowExecutionError,
    SchemaMismatchError,
    TransactionStartError,
)
from ingest_hub.domain.records import (
    NULL,
    InsertStatement,
    Record,
    TableTarget,
    Value,
    ValueKind,
)

__all__ = [
    "NULL",
    "InsertStatement",
    "Record",
    "TableTarget",
    "Value",
    "ValueKind",
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
