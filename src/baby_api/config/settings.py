from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()

DEFAULT_PORT = 3000
DEFAULT_DATA_FILE = "baby_data.json"


def _get_int_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Keep all process-level config centralized here.
    """

    data_file: Path = field(default_factory=lambda: Path(os.getenv("BABY_DATA_FILE", DEFAULT_DATA_FILE)))
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: _get_int_env("PORT", DEFAULT_PORT) or DEFAULT_PORT)
    debug: bool = field(default_factory=lambda: os.getenv("FLASK_DEBUG", "").strip() == "1")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    random_seed: int | None = field(default_factory=lambda: _get_int_env("BABY_RANDOM_SEED", None))
    version: str = field(default_factory=lambda: os.getenv("BABY_API_VERSION", "1.0.0"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
