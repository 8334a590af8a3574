"""Transactional loading of records into a relational table."""

from ingest_hub.io.loader.core import LoaderState, TransactionalLoader
from ingest_hub.io.loader.failure_exporter import FailureExporter, generate_session_id
from ingest_hub.io.loader.models import IngestConfig, IngestionOutcome, RowFailure
from ingest_hub.io.loader.operations import ingest, ingest_source

__all__ = [
    "FailureExporter",
    "IngestConfig",
    "IngestionOutcome",
    "LoaderState",
    "RowFailure",
    "TransactionalLoader",
    "generate_session_id",
    "ingest",
    "ingest_source",
]
