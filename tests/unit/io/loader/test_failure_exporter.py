"""Tests for session-based failure CSV export."""

import csv
import re
from pathlib import Path

import pytest

from ingest_hub.domain.errors import RowExecutionError
from ingest_hub.io.loader import FailureExporter, IngestionOutcome, RowFailure, generate_session_id


def _outcome(*indices):
    failures = [
        RowFailure(i, RowExecutionError(f"row {i} rejected", row_index=i)) for i in indices
    ]
    return IngestionOutcome(
        attempted=len(indices) + 1, committed=1, failures=failures, table="people"
    )


def _read(path: Path):
    with open(path, newline="", encoding="utf-8-sig") as f:
        return list(csv.DictReader(f))


@pytest.mark.unit
def test_generate_session_id_format():
    session_id = generate_session_id()
    assert re.match(r"^ingest_\d{8}_\d{6}_[a-f0-9]{6}$", session_id)


@pytest.mark.unit
def test_generate_session_id_is_unique():
    assert len({generate_session_id() for _ in range(20)}) == 20


@pytest.mark.unit
class TestFailureExporter:
    def test_rejects_empty_session(self, tmp_path):
        with pytest.raises(ValueError, match="session_id"):
            FailureExporter("", tmp_path)

    def test_writes_header_and_rows(self, tmp_path):
        exporter = FailureExporter("ingest_s1", tmp_path / "logs")
        path = exporter.export(_outcome(1, 3))

        assert path == tmp_path / "logs" / "ingest_failures_ingest_s1.csv"
        rows = _read(path)
        assert list(rows[0].keys()) == FailureExporter.FIELDNAMES
        assert [row["row_index"] for row in rows] == ["1", "3"]
        assert rows[0]["error_kind"] == "ROW_EXECUTION_FAILED"
        assert rows[0]["table"] == "people"
        assert rows[0]["message"] == "row 1 rejected"
        assert rows[0]["session_id"] == "ingest_s1"

    def test_appends_within_session(self, tmp_path):
        exporter = FailureExporter("ingest_s2", tmp_path)
        exporter.export(_outcome(0))
        path = exporter.export(_outcome(4, 5))

        rows = _read(path)
        assert [row["row_index"] for row in rows] == ["0", "4", "5"]
        assert path.read_text(encoding="utf-8-sig").count("session_id,timestamp") == 1
