"""Session-based CSV export of rows skipped under best-effort ingestion.

Every ingestion in one CLI session appends to the same file, so failures from
several sources or tables can be reviewed together.
"""

from __future__ import annotations

import csv
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from ingest_hub.io.loader.models import IngestionOutcome, RowFailure


def generate_session_id() -> str:
    r"""Generate a unique session ID for one ingestion run.

    Format: ingest_{YYYYMMDD_HHMMSS}_{random_6chars}

    Example:
        >>> session_id = generate_session_id()
        >>> assert re.match(r'^ingest_\d{8}_\d{6}_[a-f0-9]{6}$', session_id)
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"ingest_{timestamp}_{secrets.token_hex(3)}"


def failure_row(session_id: str, table: str, failure: RowFailure) -> Dict[str, object]:
    return {
        "session_id": session_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "table": table,
        "row_index": failure.row_index,
        "error_kind": failure.error.kind.value,
        "message": str(failure.error),
    }


class FailureExporter:
    """Append-mode CSV exporter keyed by session.

    Attributes:
        session_id: Session identifier (from generate_session_id())
        output_dir: Directory holding the failure CSV
        output_file: Full path to the session's CSV file

    Example:
        >>> exporter = FailureExporter("ingest_20260102_181530_a1b2c3")
        >>> exporter.export(outcome)
        PosixPath('logs/ingest_failures_ingest_20260102_181530_a1b2c3.csv')
    """

    FIELDNAMES = [
        "session_id",
        "timestamp",
        "table",
        "row_index",
        "error_kind",
        "message",
    ]

    def __init__(self, session_id: str, output_dir: Path = Path("logs")) -> None:
        if not session_id:
            raise ValueError("session_id cannot be empty")

        self.session_id = session_id
        self.output_dir = Path(output_dir)
        self.output_file = self.output_dir / f"ingest_failures_{session_id}.csv"

    def export(self, outcome: IngestionOutcome) -> Path:
        """
        Append ``outcome.failures`` to the session CSV.

        The header is written only when the file is created. An outcome with no
        failures still creates the file, so callers can rely on the path.

        Returns:
            Path to the session CSV file
        """
        rows: List[Dict[str, object]] = [
            failure_row(self.session_id, outcome.table or "", failure)
            for failure in outcome.failures
        ]

        self.output_dir.mkdir(parents=True, exist_ok=True)
        file_exists = self.output_file.exists()

        # BOM only on new files so spreadsheet apps detect UTF-8
        encoding = "utf-8" if file_exists else "utf-8-sig"
        with open(self.output_file, "a", newline="", encoding=encoding) as f:
            writer = csv.DictWriter(f, fieldnames=self.FIELDNAMES)
            if not file_exists:
                writer.writeheader()
            writer.writerows(rows)

        return self.output_file


__all__ = ["FailureExporter", "failure_row", "generate_session_id"]
