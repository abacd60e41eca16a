import logging
import os
from pathlib import Path

from .loader import section

logger = logging.getLogger(__name__)

_DEFAULT_DB_PATH = Path("data") / "settings.db"


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        discord_cfg = section(cfg, "discord")

        token_env = str(discord_cfg.get("token_env", "DISCORD_API_TOKEN"))
        self.DISCORD_API_TOKEN: str | None = os.getenv(token_env)

        self.SETTINGS_DB_PATH: str = str(
            cfg.get("settings_db_path", os.getenv("SETTINGS_DB_PATH", str(_DEFAULT_DB_PATH)))
        )
