"""Format name to adapter lookup."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Union

from ingest_hub.io.readers.base import FormatAdapter
from ingest_hub.io.readers.csv_reader import CsvAdapter
from ingest_hub.io.readers.dataframe_reader import DataFrameAdapter
from ingest_hub.io.readers.excel_reader import ExcelAdapter
from ingest_hub.io.readers.json_reader import JsonAdapter
from ingest_hub.io.readers.xml_reader import XmlAdapter

ADAPTERS: Dict[str, Callable[..., FormatAdapter]] = {
    "json": JsonAdapter,
    "jsonl": lambda **options: JsonAdapter(lines=True, **options),
    "csv": CsvAdapter,
    "tsv": lambda **options: CsvAdapter(**{"delimiter": "\t", **options}),
    "xml": XmlAdapter,
    "excel": ExcelAdapter,
    "dataframe": DataFrameAdapter,
}

SUFFIX_FORMATS = {
    ".json": "json",
    ".jsonl": "jsonl",
    ".ndjson": "jsonl",
    ".csv": "csv",
    ".tsv": "tsv",
    ".xml": "xml",
    ".xlsx": "excel",
    ".xlsm": "excel",
}


def detect_format(path: Union[str, Path]) -> str:
    """
    Guess the format name from a file suffix.

    Raises:
        ValueError: If the suffix is not recognised
    """
    suffix = Path(path).suffix.lower()
    try:
        return SUFFIX_FORMATS[suffix]
    except KeyError:
        raise ValueError(
            f"Cannot detect format of {str(path)!r}; pass one of {sorted(ADAPTERS)}"
        ) from None


def get_adapter(fmt: str, **options: Any) -> FormatAdapter:
    """
    Build the adapter for ``fmt`` with adapter-specific options.

    Example:
        >>> get_adapter("csv", infer_types=True).format_name
        'csv'
    """
    try:
        factory = ADAPTERS[fmt.lower()]
    except KeyError:
        raise ValueError(f"Unknown format {fmt!r}; expected one of {sorted(ADAPTERS)}") from None
    return factory(**options)
