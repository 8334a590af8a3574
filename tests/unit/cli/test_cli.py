"""Tests for the ingest_hub command-line interface."""

import pytest

from ingest_hub.cli.__main__ import main
from ingest_hub.cli.load import EXIT_ERROR, EXIT_OK, EXIT_ROWS_FAILED, parse_columns


def _write_csv(tmp_path, body):
    path = tmp_path / "people.csv"
    path.write_text(body, encoding="utf-8")
    return str(path)


@pytest.mark.unit
def test_parse_columns():
    assert parse_columns("id, name,,email") == ["id", "name", "email"]
    assert parse_columns(None) is None


@pytest.mark.integration
class TestLoadCommand:
    def test_successful_load(self, people_db, fetch_rows, tmp_path, capsys):
        source = _write_csv(tmp_path, "id,name\n1,Ada\n2,Grace\n")

        code = main(["load", source, "--table", "people", "--database", str(people_db), "--infer-types"])

        assert code == EXIT_OK
        assert "Committed:  2" in capsys.readouterr().out
        assert fetch_rows(people_db, "SELECT id, name FROM people ORDER BY id") == [(1, "Ada"), (2, "Grace")]

    def test_partial_failure_exports_rows(self, people_db, tmp_path, capsys):
        source = _write_csv(tmp_path, "id,name\n1,Ada\n2,\n")
        failures_dir = tmp_path / "failures"

        code = main(
            [
                "load", source,
                "--table", "people",
                "--database", str(people_db),
                "--introspect",
                "--fail-policy", "best_effort",
                "--failures-dir", str(failures_dir),
            ]
        )

        assert code == EXIT_ROWS_FAILED
        exported = list(failures_dir.glob("ingest_failures_ingest_*.csv"))
        assert len(exported) == 1
        assert "ROW_EXECUTION_FAILED" in exported[0].read_text(encoding="utf-8-sig")
        assert "Failures written to" in capsys.readouterr().out

    def test_fail_fast_error_exit_code(self, people_db, fetch_rows, tmp_path, capsys):
        source = _write_csv(tmp_path, "id,name\n1,Ada\n2,\n")

        code = main(["load", source, "--table", "people", "--database", str(people_db)])

        assert code == EXIT_ERROR
        assert "Load failed" in capsys.readouterr().err
        assert fetch_rows(people_db, "SELECT * FROM people") == []

    def test_unknown_column_with_explicit_columns(self, people_db, tmp_path):
        source = _write_csv(tmp_path, "id,age\n1,40\n")

        code = main(
            ["load", source, "--table", "people", "--database", str(people_db), "--columns", "id,name"]
        )
        assert code == EXIT_ERROR

    def test_columns_and_introspect_conflict(self, people_db, tmp_path):
        source = _write_csv(tmp_path, "id\n1\n")
        code = main(
            ["load", source, "--table", "people", "--database", str(people_db), "--columns", "id", "--introspect"]
        )
        assert code == EXIT_ERROR

    def test_undetectable_format(self, people_db, tmp_path):
        path = tmp_path / "people.dat"
        path.write_text("x", encoding="utf-8")
        assert main(["load", str(path), "--table", "people", "--database", str(people_db)]) == EXIT_ERROR

    def test_database_from_environment(self, people_db, tmp_path, monkeypatch):
        from ingest_hub.config.settings import get_settings

        monkeypatch.setenv("DATABASE_URL", f"sqlite:///{people_db}")
        get_settings.cache_clear()
        try:
            source = _write_csv(tmp_path, "id,name\n1,Ada\n")
            assert main(["load", source, "--table", "people"]) == EXIT_OK
        finally:
            get_settings.cache_clear()


@pytest.mark.integration
class TestDescribeCommand:
    def test_lists_columns(self, people_db, capsys):
        code = main(["describe", "--table", "people", "--database", str(people_db)])

        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert out.splitlines() == ["people:", "  id", "  name", "  email"]

    def test_unknown_table(self, people_db, capsys):
        code = main(["describe", "--table", "ghosts", "--database", str(people_db)])
        assert code == EXIT_ERROR
        assert "not found" in capsys.readouterr().err


@pytest.mark.unit
def test_command_is_required():
    with pytest.raises(SystemExit):
        main([])


@pytest.mark.integration
def test_log_level_option(people_db, tmp_path):
    import logging

    from ingest_hub.utils.logging import configure_logging

    source = _write_csv(tmp_path, "id,name\n1,Ada\n")
    try:
        code = main(
            ["--log-level", "error", "load", source, "--table", "people", "--database", str(people_db)]
        )
        assert code == EXIT_OK
        assert logging.getLogger().level == logging.ERROR
    finally:
        configure_logging()
