"""SQLite preference backend."""

import sqlite3
import threading
from contextlib import contextmanager
from typing import List, Optional

from ..exceptions import BackingStoreError
from .base import PreferenceNode, PreferencesBackend


@contextmanager
def _translate_errors(action: str):
    try:
        yield
    except sqlite3.Error as e:
        raise BackingStoreError(f"SQLite {action} failed: {e}") from e


class SQLiteNode(PreferenceNode):
    """Preference node stored as rows of the preferences table."""

    def __init__(self, backend: "SQLiteBackend", path: str):
        super().__init__(path)
        self._backend = backend

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        row = self._backend._fetchone(
            "SELECT value FROM preferences WHERE root = ? AND node = ? AND key = ?",
            (self._backend.root, self.path, key),
        )
        return default if row is None else row["value"]

    def _put(self, key: str, value: str) -> None:
        self._backend._execute(
            """
            INSERT OR REPLACE INTO preferences (root, node, key, value)
            VALUES (?, ?, ?, ?)
            """,
            (self._backend.root, self.path, key, value),
        )

    def remove(self, key: str) -> None:
        self._backend._execute(
            "DELETE FROM preferences WHERE root = ? AND node = ? AND key = ?",
            (self._backend.root, self.path, key),
        )

    def keys(self) -> List[str]:
        rows = self._backend._fetchall(
            "SELECT key FROM preferences WHERE root = ? AND node = ? ORDER BY key",
            (self._backend.root, self.path),
        )
        return [row["key"] for row in rows]

    def flush(self) -> None:
        self._backend.commit()


class SQLiteBackend(PreferencesBackend):
    """SQLite preference backend.

    Stores every node of one tree in a single table. User and system trees
    can share a database file since rows are keyed by root as well.

    Example:
        backend = SQLiteBackend()
        backend.connect(path="prefs.db", root="user")

        # Or in-memory
        backend.connect(path=":memory:")
    """

    name = "sqlite"

    def __init__(self):
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()
        self.root = "user"

    def connect(self, path: str = ":memory:", root: str = "user", **kwargs) -> None:
        """Connect to SQLite database.

        Args:
            path: Database file path, or ":memory:" for in-memory database
            root: Tree name stored with every row ("user" or "system")
        """
        self.root = root
        with _translate_errors("connect"):
            self._conn = sqlite3.connect(path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._create_tables()

    def _create_tables(self) -> None:
        """Create the preferences table if it doesn't exist."""
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS preferences (
                root TEXT NOT NULL,
                node TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                PRIMARY KEY (root, node, key)
            )
            """
        )
        self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def _node(self, path: str) -> SQLiteNode:
        return SQLiteNode(self, path)

    def commit(self) -> None:
        with self._lock, _translate_errors("commit"):
            self._require_connection().commit()

    def _execute(self, sql: str, params: tuple) -> None:
        with self._lock, _translate_errors("write"):
            conn = self._require_connection()
            conn.execute(sql, params)
            conn.commit()

    def _fetchone(self, sql: str, params: tuple) -> Optional[sqlite3.Row]:
        with self._lock, _translate_errors("read"):
            return self._require_connection().execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: tuple) -> List[sqlite3.Row]:
        with self._lock, _translate_errors("read"):
            return self._require_connection().execute(sql, params).fetchall()

    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise BackingStoreError("SQLite backend is not connected")
        return self._conn
