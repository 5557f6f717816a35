from __future__ import annotations

from pathlib import Path
import sqlite3

import pytest

from snapql.models import ConnectionConfig, ConnectionStringConfig

from fakes import SCHEMA_DDL, SQLiteAdapter


@pytest.fixture
def sqlite_db(tmp_path: Path) -> Path:
    path = tmp_path / "shop.db"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SCHEMA_DDL)
    finally:
        conn.close()
    return path


@pytest.fixture
def adapter() -> SQLiteAdapter:
    return SQLiteAdapter()


@pytest.fixture
def descriptor(sqlite_db: Path) -> ConnectionConfig:
    return ConnectionConfig(
        host="localhost", username="u", password="p", database=str(sqlite_db)
    )


@pytest.fixture
def string_descriptor(sqlite_db: Path) -> ConnectionStringConfig:
    return ConnectionStringConfig(connection_string=f"sqlite+pysqlite:///{sqlite_db}")


@pytest.fixture
def empty_db_descriptor(tmp_path: Path) -> ConnectionConfig:
    path = tmp_path / "empty.db"
    sqlite3.connect(path).close()
    return ConnectionConfig(host="localhost", username="u", password="p", database=str(path))


@pytest.fixture
def unreachable_descriptor(tmp_path: Path) -> ConnectionConfig:
    missing = tmp_path / "no" / "such" / "dir" / "db.sqlite"
    return ConnectionConfig(
        host="localhost", username="u", password="p", database=str(missing)
    )
