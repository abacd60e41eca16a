"""Time-based caches shared by the session controller and reply pipeline."""

from .entry import CacheEntry, now_ms
from .models import ModelListCache
from .settings import SettingsCache, SettingsSnapshot

__all__ = ["CacheEntry", "now_ms", "ModelListCache", "SettingsCache", "SettingsSnapshot"]
