"""
Excel workbook adapter.

Rows are streamed with openpyxl in read-only mode so large sheets are never
loaded whole. The first row is the header; cached formula results are read
instead of the formulas themselves.
"""

from __future__ import annotations

import datetime as dt
import zipfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator, List, Optional, Union

from openpyxl import load_workbook

from ingest_hub.domain.records import Record
from ingest_hub.io.readers.base import BaseAdapter
from ingest_hub.io.readers.csv_reader import check_header
from ingest_hub.utils.logging import get_logger

logger = get_logger(__name__)


class ExcelReadError(Exception):
    """Raised when the workbook or sheet cannot be opened."""


def excel_scalar(value: Any) -> Any:
    """Map an openpyxl cell value onto a storable scalar."""
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, str) and value == "":
        return None
    return value


class ExcelAdapter(BaseAdapter):
    """
    Decode one worksheet of an ``.xlsx`` workbook.

    Args:
        sheet: Sheet name or zero-based index; the active sheet when omitted
        max_rows: Stop after this many data rows (None = no limit)
    """

    format_name = "excel"

    def __init__(self, sheet: Optional[Union[str, int]] = None, max_rows: Optional[int] = None):
        self.sheet = sheet
        self.max_rows = max_rows

    def _iter_records(self, source: Union[str, Path]) -> Iterator[Record]:
        file_path = Path(source)
        if not file_path.exists():
            raise FileNotFoundError(f"Excel file not found: {file_path}")
        if file_path.stat().st_size == 0:
            raise ExcelReadError(f"Excel file is empty: {file_path}")

        try:
            workbook = load_workbook(file_path, read_only=True, data_only=True)
        except zipfile.BadZipFile as exc:
            raise ExcelReadError(
                f"Failed to parse Excel file {file_path}: corrupted or invalid format"
            ) from exc

        try:
            worksheet = self._select_sheet(workbook, file_path)
            logger.info("ingest.excel.reading", file=str(file_path), sheet=worksheet.title)

            rows = worksheet.iter_rows(values_only=True)
            first = next(rows, None)
            if first is None:
                return
            header = self._header(first)

            for count, row in enumerate(rows):
                if self.max_rows is not None and count >= self.max_rows:
                    break
                if all(cell is None for cell in row):
                    continue
                cells = list(row) + [None] * (len(header) - len(row))
                if any(cell is not None for cell in cells[len(header):]):
                    raise ValueError(
                        f"Sheet row {count + 2} has values beyond the {len(header)} header columns"
                    )
                yield Record.from_pairs(
                    (name, excel_scalar(cell)) for name, cell in zip(header, cells)
                )
        finally:
            workbook.close()

    def _select_sheet(self, workbook, file_path: Path):
        if self.sheet is None:
            return workbook.active
        if isinstance(self.sheet, int):
            names = workbook.sheetnames
            if not 0 <= self.sheet < len(names):
                raise ExcelReadError(f"Sheet index {self.sheet} out of range in {file_path}")
            return workbook[names[self.sheet]]
        if self.sheet not in workbook.sheetnames:
            raise ExcelReadError(f"Sheet '{self.sheet}' not found in {file_path}")
        return workbook[self.sheet]

    @staticmethod
    def _header(first_row) -> List[str]:
        cells = list(first_row)
        # trailing empty header cells are formatting, not columns
        while cells and cells[-1] is None:
            cells.pop()
        return check_header(["" if cell is None else str(cell) for cell in cells])

