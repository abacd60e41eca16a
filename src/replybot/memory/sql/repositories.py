"""
Repositories (SQL-only)
=======================
- Pure reads and writes; caching lives in :mod:`replybot.memory.cache.settings`.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import Dict, Protocol


class SettingsStore(Protocol):
    """Anything that can return the full settings table."""

    def get_all(self) -> Dict[str, str]: ...


class SqliteSettingsStore:
    """Blocking CRUD helpers for the ``settings`` table.

    Calls are synchronous; async callers offload them with
    :func:`asyncio.to_thread`.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._lock = threading.Lock()

    def get_all(self) -> Dict[str, str]:
        with self._lock:
            rows = self.conn.execute("SELECT key, value FROM settings").fetchall()
        return {row["key"]: row["value"] for row in rows}

    def set(self, key: str, value: str) -> None:
        sql = """
            INSERT INTO settings (key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
        """
        with self._lock, self.conn:
            self.conn.execute(sql, (key, value))

    def delete(self, key: str) -> bool:
        with self._lock, self.conn:
            cur = self.conn.execute("DELETE FROM settings WHERE key = ?", (key,))
        return cur.rowcount > 0


__all__ = ["SettingsStore", "SqliteSettingsStore"]
