import os

from .loader import section


class Memory:
    def __init__(self, config: dict | None = None) -> None:
        memory_cfg = section(config, "memory")
        self.HISTORY_LENGTH: int = int(memory_cfg.get("history_length", os.getenv("HISTORY_LENGTH", "10")))
        self.MAX_CORRESPONDENTS: int = int(
            memory_cfg.get("max_correspondents", os.getenv("MAX_CORRESPONDENTS", "50"))
        )
