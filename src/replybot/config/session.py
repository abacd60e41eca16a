import os

from .loader import section


class Session:
    def __init__(self, config: dict | None = None) -> None:
        session_cfg = section(config, "session")
        self.RECONNECT_DELAY_S: float = float(
            session_cfg.get("reconnect_delay_s", os.getenv("RECONNECT_DELAY_S", "10"))
        )
        self.MAX_RECONNECT_ATTEMPTS: int = int(
            session_cfg.get("max_reconnect_attempts", os.getenv("MAX_RECONNECT_ATTEMPTS", "5"))
        )
