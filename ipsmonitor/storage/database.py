"""SQLite connection for the portfolio state store."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class Database:
    """Lazily opened SQLite connection.

    ``Database(":memory:")`` keeps everything in process and never touches
    the filesystem; any other path is expanded, its parent directory
    created, and the file opened in WAL mode.
    """

    def __init__(self, path: str | Path, busy_timeout_ms: int = 5000):
        self.in_memory = str(path) == MEMORY
        self.path = Path(MEMORY) if self.in_memory else Path(path).expanduser().resolve()
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Open the connection on first use; later calls return it."""
        if self._conn is not None:
            return self._conn

        if self.in_memory:
            conn = sqlite3.connect(MEMORY)
        else:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path))
            conn.execute("PRAGMA journal_mode = WAL")
        conn.row_factory = sqlite3.Row
        conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")

        self._conn = conn
        logger.debug("Opened portfolio store: %s", self.path)
        return conn

    @property
    def conn(self) -> sqlite3.Connection:
        return self.connect()

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug("Closed portfolio store: %s", self.path)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """Cursor whose writes are committed on exit, rolled back on error."""
        conn = self.connect()
        cursor = conn.cursor()
        try:
            yield cursor
        except Exception:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            cursor.close()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.conn.execute(sql, params)

    def executescript(self, sql: str) -> None:
        self.conn.executescript(sql)

    def fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        return self.conn.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchall()

    def schema_version(self) -> int:
        """Highest applied migration, 0 for a fresh database."""
        try:
            row = self.fetchone("SELECT MAX(version) AS v FROM _schema_version")
        except sqlite3.OperationalError:
            return 0
        return int(row["v"]) if row and row["v"] is not None else 0

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database({self.path})"
