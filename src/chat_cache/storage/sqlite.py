"""SQLite-backed persistent key-value storage."""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

from chat_cache.exceptions import StorageAccessError, StorageQuotaError
from chat_cache.storage.base import BaseStorage, item_size

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".chat_cache" / "storage.db"

_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"


def _default_db_path() -> Path:
    env_path = os.environ.get("CHAT_CACHE_DB")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_DB_PATH


class SQLiteStorage(BaseStorage):
    """Key-value store kept in a single SQLite table.

    Args:
        db_path: Database file. Defaults to $CHAT_CACHE_DB, then
            ~/.chat_cache/storage.db.
        quota_bytes: Maximum total of key + value lengths. None disables
            the check.
    """

    def __init__(self, db_path: Path | str | None = None, quota_bytes: int | None = None):
        self.db_path = Path(db_path) if db_path else _default_db_path()
        self.quota_bytes = quota_bytes
        self._initialized = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_item(self, key: str) -> str | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageAccessError(f"Failed reading '{key}': {e}") from e
        finally:
            conn.close()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            if self.quota_bytes is not None:
                self._check_quota(conn, key, value)
            with conn:
                conn.execute(
                    "INSERT INTO kv (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
        except sqlite3.Error as e:
            if "full" in str(e).lower():
                raise StorageQuotaError(f"Database full writing '{key}': {e}") from e
            raise StorageAccessError(f"Failed writing '{key}': {e}") from e
        finally:
            conn.close()

    def remove_item(self, key: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as e:
            raise StorageAccessError(f"Failed removing '{key}': {e}") from e
        finally:
            conn.close()

    def keys(self) -> list[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        except sqlite3.Error as e:
            raise StorageAccessError(f"Failed listing keys: {e}") from e
        finally:
            conn.close()
        return [r["key"] for r in rows]

    def clear(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM kv")
        except sqlite3.Error as e:
            raise StorageAccessError(f"Failed clearing storage: {e}") from e
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.db_path))
            conn.row_factory = sqlite3.Row
        except (OSError, sqlite3.Error) as e:
            raise StorageAccessError(
                f"Cannot open storage database at {self.db_path}: {e}"
            ) from e
        if not self._initialized:
            try:
                with conn:
                    conn.execute(_SCHEMA)
            except sqlite3.Error as e:
                conn.close()
                raise StorageAccessError(f"Failed to initialize storage: {e}") from e
            self._initialized = True
        return conn

    def _check_quota(self, conn: sqlite3.Connection, key: str, value: str) -> None:
        row = conn.execute(
            "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) AS used "
            "FROM kv WHERE key != ?",
            (key,),
        ).fetchone()
        if row["used"] + item_size(key, value) > self.quota_bytes:
            raise StorageQuotaError(
                f"Storage quota of {self.quota_bytes} exceeded writing '{key}'."
            )
