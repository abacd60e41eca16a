"""
SQLite bootstrap and connection helpers
=======================================

- Path comes from ``core.SETTINGS_DB_PATH`` unless one is passed explicitly.
- WAL so the CLI can write settings while the bot process reads them.
"""

from __future__ import annotations

import pathlib
import sqlite3
from typing import Optional

from replybot.config import core


def db_path() -> str:
    return core.SETTINGS_DB_PATH


def connect(path: Optional[str] = None) -> sqlite3.Connection:
    target = path or db_path()
    if target != ":memory:":
        pathlib.Path(target).parent.mkdir(parents=True, exist_ok=True)

    # Autocommit; writes use explicit `with conn:` blocks.
    conn = sqlite3.connect(target, isolation_level=None, check_same_thread=False)

    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA busy_timeout=3000;")

    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    """Execute schema.sql (idempotent)."""
    schema_file = pathlib.Path(__file__).with_name("schema.sql")
    sql = schema_file.read_text(encoding="utf-8")
    with conn:
        conn.executescript(sql)
