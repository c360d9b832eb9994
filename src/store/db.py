"""SQLite database wrapper shared by the record store and the credibility cache."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any


class SQLiteDB:
    """Thin SQLite connection wrapper.

    Provides:
    - WAL mode for crash recovery
    - Parameterized queries
    - Schema initialization on first use
    - Context manager support for connection lifecycle
    """

    def __init__(self, db_path: str, schema_sql: str) -> None:
        """Open the database and apply ``schema_sql``.

        Args:
            db_path: Path to the SQLite database file, or ``:memory:``.
            schema_sql: Idempotent DDL executed on open.
        """
        self._db_path = db_path
        self._schema_sql = schema_sql
        self._conn: sqlite3.Connection | None = None
        self._initialize()

    def _initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        # Connections are shared by the event loop and worker threads of the API
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(self._schema_sql)
        self._conn.commit()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Database connection is closed")
        return self._conn

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        conn = self._connection()
        cursor = conn.execute(sql, params)
        conn.commit()
        return cursor

    def fetch_one(self, sql: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None:
        row = self._connection().execute(sql, params).fetchone()
        if row is None:
            return None
        return dict(row)

    def fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        cursor = self._connection().execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> SQLiteDB:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()


def placeholders(count: int) -> str:
    """``?,?,?`` for an ``IN (...)`` clause of ``count`` values."""
    return ",".join("?" * count)
