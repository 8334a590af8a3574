"""
ingest_hub - Format-agnostic ingestion into embedded SQL tables.

Decoded record streams from JSON, CSV, XML, spreadsheet and DataFrame
sources are mapped onto parameterized INSERT statements and loaded under
row-batch transactional semantics.

Example:
    >>> from ingest_hub import Record, SQLiteGateway, TableTarget, ingest
    >>> with SQLiteGateway.open("app.db") as gateway:
    ...     outcome = ingest(gateway, TableTarget("people"), [Record.from_mapping({"id": 1})])
"""

from ingest_hub.domain import IngestError, Record, TableTarget, Value
from ingest_hub.io.connectors import SQLiteGateway
from ingest_hub.io.loader import IngestConfig, IngestionOutcome, ingest, ingest_source

__version__ = "0.1.0"

__all__ = [
    "IngestConfig",
    "IngestError",
    "IngestionOutcome",
    "Record",
    "SQLiteGateway",
    "TableTarget",
    "Value",
    "ingest",
    "ingest_source",
]
