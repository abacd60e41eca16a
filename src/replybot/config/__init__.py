"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .core import Core
from .session import Session
from .memory import Memory
from .llm import LLM

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("discord").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()

core = Core(_RAW_CONFIG)
session = Session(_RAW_CONFIG)
memory = Memory(_RAW_CONFIG)
llm = LLM(_RAW_CONFIG)


class Config:
    core = core
    session = session
    memory = memory
    llm = llm


__all__ = ["core", "session", "memory", "llm", "Config"]
