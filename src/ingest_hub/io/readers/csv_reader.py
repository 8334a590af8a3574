"""Delimited text adapter."""

from __future__ import annotations

import csv
import re
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ingest_hub.domain.records import Record
from ingest_hub.io.readers.base import BaseAdapter, SourceLike, open_text

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_BOOLEANS = {"true": True, "false": False}


def infer_scalar(text: str) -> Any:
    """
    Interpret numeric-looking and boolean text.

    Examples:
        >>> infer_scalar("42"), infer_scalar("-1.5e3"), infer_scalar("TRUE")
        (42, -1500.0, True)
        >>> infer_scalar("007x")
        '007x'
    """
    stripped = text.strip()
    if _INTEGER_PATTERN.match(stripped):
        return int(stripped)
    if _FLOAT_PATTERN.match(stripped):
        return float(stripped)
    lowered = stripped.lower()
    if lowered in _BOOLEANS:
        return _BOOLEANS[lowered]
    return text


def check_header(fieldnames: Optional[Sequence[str]]) -> List[str]:
    if not fieldnames:
        return []
    names = [name.strip() for name in fieldnames]
    seen: Dict[str, None] = {}
    for position, name in enumerate(names):
        if not name:
            raise ValueError(f"Empty column header at position {position}")
        if name in seen:
            raise ValueError(f"Duplicate column header {name!r}")
        seen[name] = None
    return names


class CsvAdapter(BaseAdapter):
    """
    Decode CSV rows using the first row as the header.

    Args:
        delimiter: Field separator
        infer_types: Convert numeric and true/false text to native values;
            otherwise every cell stays Text
        empty_as_null: Bind empty cells as NULL instead of empty Text
        encoding: Text encoding of path sources
    """

    format_name = "csv"

    def __init__(
        self,
        delimiter: str = ",",
        infer_types: bool = False,
        empty_as_null: bool = True,
        encoding: str = "utf-8",
    ):
        self.delimiter = delimiter
        self.infer_types = infer_types
        self.empty_as_null = empty_as_null
        self.encoding = encoding

    def _cell(self, text: str) -> Any:
        if text == "" and self.empty_as_null:
            return None
        if self.infer_types and text != "":
            return infer_scalar(text)
        return text

    def _iter_records(self, source: SourceLike) -> Iterator[Record]:
        with open_text(source, self.encoding) as fh:
            reader = csv.reader(fh, delimiter=self.delimiter)
            header = check_header(next(reader, None))
            for row in reader:
                if not row:
                    continue
                if len(row) != len(header):
                    raise ValueError(
                        f"Line {reader.line_num} has {len(row)} fields, header has {len(header)}"
                    )
                yield Record.from_pairs(
                    (name, self._cell(text)) for name, text in zip(header, row)
                )
