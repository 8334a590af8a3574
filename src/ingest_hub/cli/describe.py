"""Print the column list of a table."""

import argparse
import sys
from typing import Optional, Sequence

from ingest_hub.cli.load import EXIT_ERROR, EXIT_OK, open_gateway
from ingest_hub.domain.errors import IngestError
from ingest_hub.io.connectors import GatewayError


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="ingest_hub.cli describe",
        description="Show the columns of a table in declaration order",
    )
    parser.add_argument("--table", required=True, help="Table name")
    parser.add_argument(
        "--database",
        default=None,
        help="SQLite file path or sqlite:/// URL (default: DATABASE_URL)",
    )
    args = parser.parse_args(argv)

    try:
        with open_gateway(args.database) as gateway:
            columns = gateway.table_columns(args.table)
    except (IngestError, GatewayError, ValueError) as exc:
        print(f"Describe failed: {exc}", file=sys.stderr)
        return EXIT_ERROR

    print(f"{args.table}:")
    for column in columns:
        print(f"  {column}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
