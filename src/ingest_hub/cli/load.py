"""
Load a source file into a table.

Examples:
    # Columns derived from the file's keys
    python -m ingest_hub.cli load data/people.json --table people

    # Known columns, keep going past bad rows, record them to CSV
    python -m ingest_hub.cli load data/people.csv --table people \\
        --columns id,name,email --fail-policy best_effort --failures-dir logs

    # Columns read from the existing table, one multi-row INSERT per chunk
    python -m ingest_hub.cli load data/people.xlsx --table people --introspect \\
        --sheet Staff --batch-mode multi_row
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ingest_hub.domain.errors import IngestError
from ingest_hub.domain.records import TableTarget
from ingest_hub.io.connectors import GatewayError, SQLiteGateway
from ingest_hub.io.loader import (
    FailureExporter,
    IngestConfig,
    IngestionOutcome,
    generate_session_id,
    ingest_source,
)
from ingest_hub.io.readers import detect_format
from ingest_hub.utils.logging import get_logger

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ROWS_FAILED = 1
EXIT_ERROR = 2


def open_gateway(database: Optional[str]) -> SQLiteGateway:
    """Open a gateway from a path, a sqlite URL, or DATABASE_URL when omitted."""
    if database is None:
        from ingest_hub.config.settings import get_settings

        return SQLiteGateway.from_url(get_settings().DATABASE_URL)
    if "://" in database:
        return SQLiteGateway.from_url(database)
    return SQLiteGateway.open(database)


def parse_columns(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    return [col.strip() for col in raw.split(",") if col.strip()]


def adapter_options(args: argparse.Namespace, fmt: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    if fmt in ("csv", "tsv"):
        options["infer_types"] = args.infer_types
        if args.delimiter is not None:
            options["delimiter"] = args.delimiter
    elif fmt == "xml" and args.row_tag is not None:
        options["row_tag"] = args.row_tag
    elif fmt == "excel" and args.sheet is not None:
        options["sheet"] = args.sheet
    return options


def print_summary(outcome: IngestionOutcome, failures_file: Optional[Path]) -> None:
    print(f"Table:      {outcome.table}")
    print(f"Attempted:  {outcome.attempted}")
    print(f"Committed:  {outcome.committed}")
    print(f"Failed:     {outcome.failed}")
    print(f"Duration:   {outcome.duration_ms:.1f} ms")
    for failure in outcome.failures[:10]:
        print(f"  row {failure.row_index}: {failure.error}")
    if outcome.failed > 10:
        print(f"  ... {outcome.failed - 10} more")
    if failures_file is not None:
        print(f"Failures written to {failures_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ingest_hub.cli load",
        description="Load records from a JSON, CSV, XML or Excel file into a table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("source", help="Path of the file to load")
    parser.add_argument("--table", required=True, help="Target table name")
    parser.add_argument(
        "--columns",
        default=None,
        help="Comma-separated known column list (default: derived from the records)",
    )
    parser.add_argument(
        "--introspect",
        action="store_true",
        help="Read the known column list from the existing table",
    )
    parser.add_argument(
        "--format",
        dest="fmt",
        default=None,
        choices=["json", "jsonl", "csv", "tsv", "xml", "excel"],
        help="Source format (default: detected from the file suffix)",
    )
    parser.add_argument(
        "--database",
        default=None,
        help="SQLite file path or sqlite:/// URL (default: DATABASE_URL)",
    )
    parser.add_argument(
        "--fail-policy",
        choices=["fail_fast", "best_effort"],
        default=None,
        help="Abort on the first bad row or skip bad rows (default: INGEST_FAIL_POLICY)",
    )
    parser.add_argument(
        "--batch-mode",
        choices=["per_row", "multi_row"],
        default=None,
        help="One INSERT per row or multi-row INSERTs (default: INGEST_BATCH_MODE)",
    )
    parser.add_argument("--sheet", default=None, help="Excel sheet name")
    parser.add_argument("--row-tag", default=None, help="XML row element tag")
    parser.add_argument(
        "--infer-types",
        action="store_true",
        help="Convert numeric and true/false CSV cells to typed values",
    )
    parser.add_argument("--delimiter", default=None, help="CSV field delimiter")
    parser.add_argument(
        "--failures-dir",
        type=Path,
        default=None,
        help="Write skipped rows to a session CSV in this directory",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the load command.

    Returns:
        0 when every row was committed, 1 when some rows were skipped,
        2 when the load failed as a whole
    """
    args = build_parser().parse_args(argv)
    session_id = generate_session_id()
    with structlog.contextvars.bound_contextvars(session_id=session_id):
        return run_load(args, session_id)


def run_load(args: argparse.Namespace, session_id: str) -> int:
    if args.columns is not None and args.introspect:
        print("--columns and --introspect are mutually exclusive", file=sys.stderr)
        return EXIT_ERROR

    try:
        fmt = args.fmt or detect_format(args.source)
        config = IngestConfig.from_settings(
            fail_policy=args.fail_policy, batch_mode=args.batch_mode
        )
        with open_gateway(args.database) as gateway:
            columns = parse_columns(args.columns)
            if args.introspect:
                columns = gateway.table_columns(args.table)
            target = TableTarget(args.table, columns)
            outcome = ingest_source(
                gateway,
                target,
                args.source,
                fmt=fmt,
                config=config,
                **adapter_options(args, fmt),
            )
    except (IngestError, GatewayError, ValueError) as exc:
        logger.error("cli.load.failed", error=str(exc), source=args.source, table=args.table)
        print(f"Load failed: {exc}", file=sys.stderr)
        return EXIT_ERROR

    failures_file = None
    if args.failures_dir is not None and outcome.failures:
        failures_file = FailureExporter(session_id, args.failures_dir).export(outcome)

    print_summary(outcome, failures_file)
    return EXIT_ROWS_FAILED if outcome.failures else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
