"""
Application configuration.

Values are read once from environment variables (prefixed with CHESS_), with defaults that work for local play.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Self

from src.engine.config import SearchConfig

ENV_PREFIX = "CHESS_"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./chess.db"
    search_depth: int = 2
    search_time_limit_ms: int = 500
    thinking_delay_ms: int = 100
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Self:
        return cls(
            database_url=_env("DATABASE_URL", cls.database_url),
            search_depth=int(_env("SEARCH_DEPTH", str(cls.search_depth))),
            search_time_limit_ms=int(
                _env("SEARCH_TIME_LIMIT_MS", str(cls.search_time_limit_ms))
            ),
            thinking_delay_ms=int(
                _env("THINKING_DELAY_MS", str(cls.thinking_delay_ms))
            ),
            log_level=_env("LOG_LEVEL", cls.log_level).upper(),
        )

    def search_config(self) -> SearchConfig:
        return SearchConfig(
            max_depth=self.search_depth, time_limit_ms=self.search_time_limit_ms
        )

    @property
    def thinking_delay_s(self) -> float:
        return self.thinking_delay_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Environment is only read the first time. Call `get_settings.cache_clear()` to re-read (tests)."""
    return Settings.from_env()
