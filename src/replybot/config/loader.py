"""Locate and parse ``config.toml``."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict

CONFIG_ENV = "REPLYBOT_CONFIG"
DEFAULT_CONFIG_PATH = Path("config.toml")
ROOT_TABLE = "replybot"


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Return the ``[replybot]`` table of the config file.

    The file is ``path`` if given, else ``$REPLYBOT_CONFIG``, else
    ``./config.toml``. A missing default file yields ``{}`` so every value falls
    back to the environment; a file that was named explicitly must exist.
    """
    if path is None:
        path = os.getenv(CONFIG_ENV) or None
    explicit = path is not None
    target = Path(path) if explicit else DEFAULT_CONFIG_PATH

    if not target.is_file():
        if explicit:
            raise FileNotFoundError(f"Config file not found: {target}")
        return {}

    with target.open("rb") as handle:
        raw = tomllib.load(handle)

    table = raw.get(ROOT_TABLE, {})
    if not isinstance(table, dict):
        raise ValueError(f"'{ROOT_TABLE}' in {target} must be a table")
    return table


def section(config: Dict[str, Any] | None, name: str) -> Dict[str, Any]:
    """Return ``[replybot.<name>]`` from a loaded config, ``{}`` when absent."""
    value = (config or {}).get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"'{ROOT_TABLE}.{name}' must be a table")
    return value


__all__ = ["load_raw_config", "section", "CONFIG_ENV", "DEFAULT_CONFIG_PATH"]
