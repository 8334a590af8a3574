"""
Command-line entry point for ingest_hub.

Usage:
    python -m ingest_hub.cli [--log-level LEVEL] <command> [options]

Available commands:
    load      - Load a JSON, CSV, XML or Excel file into a table
    describe  - Show a table's columns

Examples:
    python -m ingest_hub.cli load data/people.csv --table people --infer-types
    python -m ingest_hub.cli describe --table people --database app.db
"""

import argparse
import sys
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Route to a subcommand.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code of the subcommand
    """
    parser = argparse.ArgumentParser(
        prog="ingest_hub.cli",
        description="ingest_hub - load structured records into relational tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
        help="Command to execute",
    )
    # Subcommands parse their own arguments
    subparsers.add_parser("load", help="Load a file into a table", add_help=False)
    subparsers.add_parser("describe", help="Show a table's columns", add_help=False)

    args, remaining_args = parser.parse_known_args(argv)

    if args.log_level is not None:
        from ingest_hub.utils.logging import configure_logging

        configure_logging(args.log_level)

    if args.command == "load":
        from ingest_hub.cli.load import main as load_main

        return load_main(remaining_args)

    if args.command == "describe":
        from ingest_hub.cli.describe import main as describe_main

        return describe_main(remaining_args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
