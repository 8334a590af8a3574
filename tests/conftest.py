"""Shared pytest fixtures: temporary SQLite databases and gateways."""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from typing import Iterator

import pytest

# Settings() must initialize without a project .env file
os.environ.setdefault("DATABASE_URL", "sqlite://")

from ingest_hub.io.connectors import SQLiteGateway  # noqa: E402


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path of a fresh SQLite database file."""
    return tmp_path / "ingest.db"


@pytest.fixture
def people_db(db_path: Path) -> Path:
    """Database with a ``people`` table: id is the primary key, name is required."""
    conn = sqlite3.connect(db_path)
    conn.execute(
        "CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT)"
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def gateway(people_db: Path) -> Iterator[SQLiteGateway]:
    with SQLiteGateway.open(people_db) as gw:
        yield gw


def fetch_all(path: Path, sql: str):
    """Read rows through a separate connection so only committed data is visible."""
    conn = sqlite3.connect(path)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


@pytest.fixture
def fetch_rows():
    return fetch_all
