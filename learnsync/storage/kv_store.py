"""
SQLite Key-Value Store for learnsync.

Provides durable persistence of arbitrary JSON-serializable records keyed by
string. Higher layers own disjoint key namespaces:
- learn_cache_*     : content resolver cache (one entry per query)
- chapter_progress  : progress ledger (single serialized array)
- sync_queue        : pending mutations (single serialized array, FIFO)

Every write is committed before the call returns.

Database location: ~/.learnsync/store.db
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any

from loguru import logger


class StorageError(Exception):
    """Raised when the local store cannot read or persist a record."""


class KeyValueStore:
    """
    SQLite-backed key-value persistence.

    No transactions are exposed: each get/set/delete touches a single key and
    commits immediately.
    """

    DEFAULT_DB_PATH = Path.home() / ".learnsync" / "store.db"

    def __init__(self, db_path: Path | None = None):
        """
        Initialize the store.

        Args:
            db_path: Custom database path (defaults to ~/.learnsync/store.db).
                Pass Path(":memory:") for a throwaway store.
        """
        self.db_path = db_path or self.DEFAULT_DB_PATH
        if str(self.db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.debug("KeyValueStore initialized at {}", self.db_path)

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            try:
                self._conn = sqlite3.connect(str(self.db_path))
            except sqlite3.Error as exc:
                raise StorageError(f"Cannot open store at {self.db_path}: {exc}") from exc
        return self._conn

    def _init_schema(self) -> None:
        try:
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            self.conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot initialize store schema: {exc}") from exc

    # =========================================================================
    # Single-key operations
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value stored under key, or default."""
        try:
            row = self.conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc

        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt value stored under {key!r}: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        """Serialize and durably store value under key."""
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"Value for {key!r} is not serializable: {exc}") from exc

        try:
            self.conn.execute(
                """
                INSERT INTO kv_store (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, encoded),
            )
            self.conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        """Remove key if present."""
        try:
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            self.conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to delete {key!r}: {exc}") from exc

    def contains(self, key: str) -> bool:
        try:
            row = self.conn.execute(
                "SELECT 1 FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key!r}: {exc}") from exc
        return row is not None

    def keys(self, prefix: str = "") -> list[str]:
        """List stored keys, optionally restricted to a namespace prefix."""
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        try:
            rows = self.conn.execute(
                "SELECT key FROM kv_store WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                (f"{escaped}%",),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to list keys: {exc}") from exc
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
