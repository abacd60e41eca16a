from .db import connect, migrate
from .repositories import SettingsStore, SqliteSettingsStore


def open_settings_store(path: str | None = None) -> SqliteSettingsStore:
    """Connect, migrate, and wrap the settings database at ``path``."""
    conn = connect(path)
    migrate(conn)
    return SqliteSettingsStore(conn)


__all__ = ["connect", "migrate", "open_settings_store", "SettingsStore", "SqliteSettingsStore"]
