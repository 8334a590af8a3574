"""pandas DataFrame adapter."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterator

import numpy as np
import pandas as pd

from ingest_hub.domain.records import Record, is_missing
from ingest_hub.io.readers.base import BaseAdapter
from ingest_hub.io.readers.csv_reader import check_header


def frame_scalar(value: Any) -> Any:
    """Convert a DataFrame cell to a native scalar; NaN, NaT and NA become None."""
    if value is pd.NaT or value is pd.NA or is_missing(value):
        return None
    if isinstance(value, np.generic):
        value = value.item()
        if is_missing(value):
            return None
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, pd.Timedelta):
        return value.total_seconds()
    return value


class DataFrameAdapter(BaseAdapter):
    """Yield one Record per DataFrame row, in index order."""

    format_name = "dataframe"

    def _iter_records(self, source: pd.DataFrame) -> Iterator[Record]:
        if not isinstance(source, pd.DataFrame):
            raise TypeError(f"Expected a pandas DataFrame, got {type(source).__name__}")
        columns = check_header([str(col).strip() for col in source.columns])
        for row in source.itertuples(index=False, name=None):
            yield Record.from_pairs(
                (name, frame_scalar(cell)) for name, cell in zip(columns, row)
            )
