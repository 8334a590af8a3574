"""Public ingestion entry points."""

from __future__ import annotations

from pathlib import Path
from threading import Event
from typing import Any, Iterable, Optional, Union

from ingest_hub.domain.records import Record, TableTarget
from ingest_hub.io.connectors.gateway import ConnectionGateway
from ingest_hub.io.loader.core import TransactionalLoader
from ingest_hub.io.loader.models import IngestConfig, IngestionOutcome
from ingest_hub.io.readers.registry import detect_format, get_adapter


def _as_target(target: Union[TableTarget, str]) -> TableTarget:
    return TableTarget(target) if isinstance(target, str) else target


def ingest(
    gateway: ConnectionGateway,
    target: Union[TableTarget, str],
    records: Iterable[Record],
    config: Optional[IngestConfig] = None,
    *,
    cancel_event: Optional[Event] = None,
) -> IngestionOutcome:
    """
    Insert a lazy sequence of records into one table in a single transaction.

    Args:
        gateway: Open connection gateway; the caller owns and closes it
        target: Destination table, optionally with its known column list
        records: Records in source order
        config: Failure policy and batching options (defaults when omitted)
        cancel_event: Set from another thread to abort between rows

    Returns:
        IngestionOutcome with attempted/committed/failed counts

    Raises:
        IngestError: One of the ``ingest_hub.domain.errors`` subclasses

    Example:
        >>> with SQLiteGateway.open("app.db") as gateway:
        ...     outcome = ingest(gateway, TableTarget("t"), [Record.from_mapping({"a": 1})])
        >>> outcome.committed
        1
    """
    loader = TransactionalLoader(
        gateway, _as_target(target), config, cancel_event=cancel_event
    )
    return loader.run(records)


def ingest_source(
    gateway: ConnectionGateway,
    target: Union[TableTarget, str],
    source: Any,
    fmt: Optional[str] = None,
    config: Optional[IngestConfig] = None,
    *,
    cancel_event: Optional[Event] = None,
    **adapter_options: Any,
) -> IngestionOutcome:
    """
    Decode ``source`` with the matching format adapter and ingest it.

    ``fmt`` is detected from the file suffix when omitted; a DataFrame source
    is always read with the dataframe adapter.
    """
    if fmt is None:
        if isinstance(source, (str, Path)):
            fmt = detect_format(source)
        else:
            fmt = "dataframe"
    adapter = get_adapter(fmt, **adapter_options)
    return ingest(
        gateway, target, adapter.open(source), config, cancel_event=cancel_event
    )
