import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from crlottery.core.storage.port import PersistenceError
from crlottery.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend implementing the KeyValueStore port.

    Provides a durable replacement for browser local storage:
    each key holds one complete JSON document, written atomically,
    so a reader never observes a half-written map.
    """

    def __init__(self, db_path: Path, bucket: str = "default"):
        self.db_path = Path(db_path)
        self.bucket = bucket
        self._conn_local = threading.local()

        # Ensure directory exists
        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.debug(f"SQLite store opened at {self.db_path} (bucket={bucket})")

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            try:
                conn = sqlite3.connect(
                    self.db_path,
                    timeout=30.0,
                    check_same_thread=False,
                )
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.execute("PRAGMA synchronous=NORMAL;")
            except sqlite3.Error as exc:
                raise PersistenceError(f"Cannot open {self.db_path}: {exc}") from exc
            self._conn_local.conn = conn
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        try:
            with conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT NOT NULL,
                        value TEXT NOT NULL,
                        bucket TEXT NOT NULL DEFAULT 'default',
                        PRIMARY KEY (bucket, key)
                    )
                """)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Cannot initialize schema: {exc}") from exc

    # =========================================================================
    # Key-Value Operations
    # =========================================================================

    def set(self, key: str, value: str) -> None:
        """Save a key-value pair."""
        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_store (key, value, bucket) VALUES (?, ?, ?)",
                    (key, value, self.bucket),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to write {key!r}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "SELECT value FROM kv_store WHERE bucket = ? AND key = ?",
                (self.bucket, key),
            )
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read {key!r}: {exc}") from exc
        return row["value"] if row else None

    def delete(self, key: str) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    "DELETE FROM kv_store WHERE bucket = ? AND key = ?",
                    (self.bucket, key),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to delete {key!r}: {exc}") from exc

    def keys(self) -> List[str]:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "SELECT key FROM kv_store WHERE bucket = ? ORDER BY key",
                (self.bucket,),
            )
            return [row["key"] for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to list keys: {exc}") from exc

    def close(self) -> None:
        """Close this thread's connection."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn
