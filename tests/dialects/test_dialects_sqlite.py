"""Tests for ormlet.dialects.sqlite: connect."""

import sqlite3

from ormlet.dialects import SqliteDialect


def test_sqlite_connect_memory():
    conn = SqliteDialect().connect("sqlite:///:memory:")
    try:
        assert isinstance(conn, sqlite3.Connection)
        assert conn.isolation_level is None
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    finally:
        conn.close()


def test_sqlite_connect_file(tmp_path):
    path = tmp_path / "test.sqlite3"
    conn = SqliteDialect().connect(f"sqlite:///{path}")
    try:
        conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
    finally:
        conn.close()
    assert path.exists()


def test_sqlite_connect_passes_options():
    conn = SqliteDialect().connect("sqlite:///:memory:", options={"detect_types": sqlite3.PARSE_DECLTYPES})
    conn.close()
