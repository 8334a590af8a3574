"""JSON and JSON Lines adapter."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Optional

from ingest_hub.domain.records import Record
from ingest_hub.io.readers.base import BaseAdapter, SourceLike, open_text

JSON_LINES_SUFFIXES = (".jsonl", ".ndjson")


def json_scalar(value: Any) -> Any:
    """Nested objects and arrays are stored as their JSON text."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return value


def reject_constant(name: str) -> Any:
    """``NaN`` and ``Infinity`` are not JSON; SQLite would store NaN as NULL."""
    raise ValueError(f"Non-standard JSON constant {name} is not allowed")


def record_from_object(obj: Any) -> Record:
    if not isinstance(obj, dict):
        raise ValueError(f"Expected a JSON object, got {type(obj).__name__}")
    return Record.from_pairs((key, json_scalar(value)) for key, value in obj.items())


class JsonAdapter(BaseAdapter):
    """
    Decode a JSON document or JSON Lines stream.

    A document may hold a single object (one record) or an array of objects.
    JSON Lines is read one line at a time; blank lines are skipped.

    Args:
        lines: Force JSON Lines (True) or document (False) parsing; by default
            ``.jsonl``/``.ndjson`` paths are read as lines
        encoding: Text encoding of path sources
    """

    format_name = "json"

    def __init__(self, lines: Optional[bool] = None, encoding: str = "utf-8"):
        self.lines = lines
        self.encoding = encoding

    def _is_lines(self, source: SourceLike) -> bool:
        if self.lines is not None:
            return self.lines
        return isinstance(source, (str, Path)) and Path(source).suffix.lower() in JSON_LINES_SUFFIXES

    def _iter_records(self, source: SourceLike) -> Iterator[Record]:
        with open_text(source, self.encoding) as fh:
            if self._is_lines(source):
                for line in fh:
                    if line.strip():
                        yield record_from_object(json.loads(line, parse_constant=reject_constant))
                return

            text = fh.read()
            if not text.strip():
                return
            data = json.loads(text, parse_constant=reject_constant)
            if isinstance(data, dict):
                yield record_from_object(data)
            elif isinstance(data, list):
                for item in data:
                    yield record_from_object(item)
            else:
                raise ValueError(
                    f"Top-level JSON must be an object or an array, got {type(data).__name__}"
                )
