"""Format adapters decoding raw sources into Records."""

from ingest_hub.io.readers.base import BaseAdapter, FormatAdapter
from ingest_hub.io.readers.csv_reader import CsvAdapter
from ingest_hub.io.readers.dataframe_reader import DataFrameAdapter
from ingest_hub.io.readers.excel_reader import ExcelAdapter, ExcelReadError
from ingest_hub.io.readers.json_reader import JsonAdapter
from ingest_hub.io.readers.registry import detect_format, get_adapter
from ingest_hub.io.readers.xml_reader import XmlAdapter

__all__ = [
    "BaseAdapter",
    "CsvAdapter",
    "DataFrameAdapter",
    "ExcelAdapter",
    "ExcelReadError",
    "FormatAdapter",
    "JsonAdapter",
    "XmlAdapter",
    "detect_format",
    "get_adapter",
]
