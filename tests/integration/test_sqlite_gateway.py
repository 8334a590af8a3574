"""Integration tests for SQLiteGateway against temporary database files."""

import sqlite3

import pytest

from ingest_hub.domain.errors import InvalidIdentifierError
from ingest_hub.domain.records import Value
from ingest_hub.io.connectors import (
    ConnectionGateway,
    GatewayError,
    SQLiteGateway,
    database_path_from_url,
)

INSERT = "INSERT INTO people (id,name,email) VALUES (?,?,?)"


def _params(*values):
    return [Value.of(v) for v in values]


@pytest.mark.unit
class TestDatabaseUrl:
    def test_file_url(self):
        assert database_path_from_url("sqlite:///data/app.db") == "data/app.db"

    def test_memory_url(self):
        assert database_path_from_url("sqlite://") == ":memory:"

    def test_other_backend_rejected(self):
        with pytest.raises(ValueError, match="Only sqlite"):
            database_path_from_url("postgresql://u:p@localhost/db")

    def test_malformed_url(self):
        with pytest.raises(ValueError, match="Invalid database URL"):
            database_path_from_url("not a url")


@pytest.mark.integration
class TestSQLiteGateway:
    def test_satisfies_gateway_protocol(self, gateway):
        assert isinstance(gateway, ConnectionGateway)

    def test_commit_makes_rows_visible(self, gateway, people_db, fetch_rows):
        handle = gateway.begin()
        assert gateway.execute(handle, INSERT, _params(1, "Ada", None)) == 1
        assert fetch_rows(people_db, "SELECT * FROM people") == []

        gateway.commit(handle)
        assert fetch_rows(people_db, "SELECT * FROM people") == [(1, "Ada", None)]

    def test_rollback_discards_rows(self, gateway, people_db, fetch_rows):
        handle = gateway.begin()
        gateway.execute(handle, INSERT, _params(1, "Ada", None))
        gateway.rollback(handle)

        assert fetch_rows(people_db, "SELECT * FROM people") == []

    def test_failed_statement_leaves_transaction_usable(self, gateway, people_db, fetch_rows):
        handle = gateway.begin()
        gateway.execute(handle, INSERT, _params(1, "Ada", None))

        with pytest.raises(GatewayError, match="NOT NULL"):
            gateway.execute(handle, INSERT, _params(2, None, None))
        with pytest.raises(GatewayError, match="UNIQUE"):
            gateway.execute(handle, INSERT, _params(1, "Dup", None))

        gateway.execute(handle, INSERT, _params(3, "Grace", None))
        gateway.commit(handle)

        assert fetch_rows(people_db, "SELECT id FROM people ORDER BY id") == [(1,), (3,)]

    def test_failure_is_chained_to_driver_error(self, gateway):
        handle = gateway.begin()
        with pytest.raises(GatewayError) as excinfo:
            gateway.execute(handle, "INSERT INTO missing (a) VALUES (?)", _params(1))
        assert isinstance(excinfo.value.__cause__, sqlite3.Error)
        gateway.rollback(handle)

    def test_unencodable_text_is_gateway_error(self, gateway, people_db, fetch_rows):
        handle = gateway.begin()
        gateway.execute(handle, INSERT, _params(1, "Ada", None))

        with pytest.raises(GatewayError) as excinfo:
            gateway.execute(handle, INSERT, _params(2, "bad\ud800", None))
        assert isinstance(excinfo.value.__cause__, UnicodeEncodeError)

        gateway.execute(handle, INSERT, _params(3, "Grace", None))
        gateway.commit(handle)

        assert fetch_rows(people_db, "SELECT id FROM people ORDER BY id") == [(1,), (3,)]

    def test_one_transaction_at_a_time(self, gateway):
        handle = gateway.begin()
        with pytest.raises(GatewayError, match="already active"):
            gateway.begin()
        gateway.rollback(handle)

    def test_stale_handle_rejected(self, gateway):
        handle = gateway.begin()
        gateway.commit(handle)
        with pytest.raises(GatewayError, match="not active"):
            gateway.execute(handle, INSERT, _params(1, "Ada", None))

    def test_values_round_trip(self, db_path):
        with SQLiteGateway.open(db_path) as gw:
            handle = gw.begin()
            gw.execute(handle, "CREATE TABLE v (n, b, i, f, t, x)", [])
            values = [Value.null(), Value.boolean(True), Value.integer(-7),
                      Value.float_(2.5), Value.text("héllo"), Value.bytes_(b"\x00\xff")]
            gw.execute(handle, "INSERT INTO v (n,b,i,f,t,x) VALUES (?,?,?,?,?,?)", values)
            gw.commit(handle)
            row = gw.connection.execute("SELECT * FROM v").fetchone()

        assert row == (None, 1, -7, 2.5, "héllo", b"\x00\xff")
        assert row[1] == True  # noqa: E712

    def test_table_columns(self, gateway):
        assert gateway.table_columns("people") == ["id", "name", "email"]

    def test_table_columns_unknown_table(self, gateway):
        with pytest.raises(GatewayError, match="not found"):
            gateway.table_columns("ghosts")

    def test_table_columns_rejects_unsafe_name(self, gateway):
        with pytest.raises(InvalidIdentifierError):
            gateway.table_columns("people); DROP TABLE people; --")

    def test_from_url(self, people_db):
        with SQLiteGateway.from_url(f"sqlite:///{people_db}") as gw:
            assert gw.table_columns("people") == ["id", "name", "email"]

    def test_closed_gateway(self, people_db):
        gw = SQLiteGateway.open(people_db)
        gw.close()
        with pytest.raises(GatewayError, match="closed"):
            gw.begin()

    def test_execute_script_creates_tables(self, gateway):
        gateway.execute_script("CREATE TABLE tags (name TEXT); CREATE INDEX ix_tags ON tags (name);")
        assert gateway.table_columns("tags") == ["name"]

    def test_execute_script_refused_inside_transaction(self, gateway):
        handle = gateway.begin()
        with pytest.raises(GatewayError, match="transaction is active"):
            gateway.execute_script("CREATE TABLE tags (name TEXT)")
        gateway.rollback(handle)

    def test_execute_script_failure(self, gateway):
        with pytest.raises(GatewayError, match="Script failed"):
            gateway.execute_script("CREATE TABLE people (id)")
