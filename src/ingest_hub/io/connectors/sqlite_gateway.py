"""SQLite connection gateway.

Wraps one ``sqlite3`` connection in autocommit mode and drives transactions
explicitly with BEGIN/COMMIT/ROLLBACK. Each statement runs inside its own
SAVEPOINT so a failing row is undone on its own and the enclosing transaction
stays usable for the rows that follow.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import List, Optional, Sequence, Union

from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import ArgumentError

from ingest_hub.domain.records import Value
from ingest_hub.infrastructure.sql.core.identifier import validate_identifier
from ingest_hub.io.connectors.gateway import GatewayError, TransactionHandle
from ingest_hub.utils.logging import get_logger

logger = get_logger(__name__)

_STATEMENT_SAVEPOINT = "ingest_hub_stmt"


def database_path_from_url(url: str) -> str:
    """
    Extract the database path from a ``sqlite://`` URL.

    Examples:
        >>> database_path_from_url("sqlite:///data/app.db")
        'data/app.db'
        >>> database_path_from_url("sqlite://")
        ':memory:'

    Raises:
        ValueError: If the URL is malformed or not a SQLite URL
    """
    try:
        parsed = make_url(url)
    except ArgumentError as exc:
        raise ValueError(f"Invalid database URL {url!r}: {exc}") from exc

    if parsed.get_backend_name() != "sqlite":
        raise ValueError(
            f"Only sqlite URLs are supported, got backend {parsed.get_backend_name()!r}"
        )
    return parsed.database or ":memory:"


class SQLiteGateway:
    """
    ConnectionGateway implementation over a single sqlite3 connection.

    Example:
        >>> with SQLiteGateway.open(":memory:") as gateway:
        ...     handle = gateway.begin()
        ...     gateway.execute(handle, "CREATE TABLE t (a)", [])
        ...     gateway.commit(handle)
    """

    def __init__(self, connection: sqlite3.Connection):
        # Explicit BEGIN/COMMIT only; the sqlite3 module must not open
        # transactions implicitly.
        connection.isolation_level = None
        self.connection = connection
        self._active: Optional[TransactionHandle] = None

    @classmethod
    def open(cls, database: Union[str, Path], timeout: float = 5.0) -> "SQLiteGateway":
        """Open a gateway on a database file (or ``:memory:``)."""
        try:
            connection = sqlite3.connect(str(database), timeout=timeout)
        except sqlite3.Error as exc:
            raise GatewayError(f"Failed to open SQLite database {database}: {exc}") from exc
        logger.info("database.gateway.opened", database=str(database))
        return cls(connection)

    @classmethod
    def from_url(cls, url: str, timeout: float = 5.0) -> "SQLiteGateway":
        """Open a gateway from a ``sqlite:///path.db`` URL."""
        return cls.open(database_path_from_url(url), timeout=timeout)

    def __enter__(self) -> "SQLiteGateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying connection; an open transaction is rolled back."""
        if self.connection is None:
            return
        if self.connection.in_transaction:
            logger.warning("database.gateway.closed_with_open_transaction")
        self.connection.close()
        self.connection = None  # type: ignore[assignment]
        self._active = None

    def _require_active(self, handle: TransactionHandle) -> None:
        if self._active is None or handle != self._active:
            raise GatewayError(f"Transaction {handle.id} is not active on this connection")

    def begin(self) -> TransactionHandle:
        if self.connection is None:
            raise GatewayError("Gateway is closed")
        if self._active is not None or self.connection.in_transaction:
            raise GatewayError("A transaction is already active on this connection")
        try:
            self.connection.execute("BEGIN")
        except sqlite3.Error as exc:
            raise GatewayError(f"BEGIN failed: {exc}") from exc
        self._active = TransactionHandle()
        return self._active

    def execute(
        self, handle: TransactionHandle, sql: str, params: Sequence[Value]
    ) -> int:
        self._require_active(handle)
        bound = tuple(value.to_python() for value in params)
        cursor = self.connection.cursor()
        try:
            cursor.execute(f"SAVEPOINT {_STATEMENT_SAVEPOINT}")
        except sqlite3.Error as exc:
            raise GatewayError(f"SAVEPOINT failed: {exc}") from exc

        # ValueError/TypeError cover values the driver cannot encode or bind,
        # such as text holding a lone surrogate
        try:
            cursor.execute(sql, bound)
        except (sqlite3.Error, OverflowError, ValueError, TypeError) as exc:
            try:
                cursor.execute(f"ROLLBACK TO SAVEPOINT {_STATEMENT_SAVEPOINT}")
                cursor.execute(f"RELEASE SAVEPOINT {_STATEMENT_SAVEPOINT}")
            except sqlite3.Error as undo_exc:
                raise GatewayError(
                    f"{exc} (statement could not be undone: {undo_exc})"
                ) from exc
            raise GatewayError(str(exc)) from exc

        try:
            cursor.execute(f"RELEASE SAVEPOINT {_STATEMENT_SAVEPOINT}")
        except sqlite3.Error as exc:
            raise GatewayError(f"RELEASE failed: {exc}") from exc
        return cursor.rowcount

    def commit(self, handle: TransactionHandle) -> None:
        self._require_active(handle)
        try:
            self.connection.execute("COMMIT")
        except sqlite3.Error as exc:
            raise GatewayError(f"COMMIT failed: {exc}") from exc
        self._active = None

    def rollback(self, handle: TransactionHandle) -> None:
        self._require_active(handle)
        try:
            self.connection.execute("ROLLBACK")
        except sqlite3.Error as exc:
            raise GatewayError(f"ROLLBACK failed: {exc}") from exc
        finally:
            if not self.connection.in_transaction:
                self._active = None

    def execute_script(self, script: str) -> None:
        """
        Run raw SQL (typically DDL) outside any ingestion transaction.

        The script is executed as-is, so it must come from trusted code and
        never from record data.

        Raises:
            GatewayError: If a transaction is active or the script fails
        """
        if self.connection is None:
            raise GatewayError("Gateway is closed")
        if self._active is not None:
            raise GatewayError("Cannot run a script while a transaction is active")
        try:
            self.connection.executescript(script)
        except sqlite3.Error as exc:
            raise GatewayError(f"Script failed: {exc}") from exc
        logger.debug("database.gateway.script_executed", statements=script.count(";") or 1)

    def table_columns(self, table: str) -> List[str]:
        """
        Column names of ``table`` in declaration order.

        Raises:
            InvalidIdentifierError: If ``table`` is not a safe identifier
            GatewayError: If the table does not exist
        """
        validate_identifier(table, "table")
        rows = self.connection.execute(f"PRAGMA table_info({table})").fetchall()
        if not rows:
            raise GatewayError(f"Table {table!r} not found")
        return [row[1] for row in rows]
