"""Environment-driven settings for formlogic."""

import os
from dataclasses import dataclass
from functools import lru_cache

CACHE_SIZE_VAR = "FORMLOGIC_CACHE_SIZE"
LOG_LEVEL_VAR = "FORMLOGIC_LOG_LEVEL"
RESPECT_HIDDEN_PAGES_VAR = "FORMLOGIC_RESPECT_HIDDEN_PAGES"

DEFAULT_CACHE_SIZE = 256
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """
    Properties:
        cache_size: LRU size of FormLogic's reachability memo (0 disables it)
        log_level: Logging level name used by the command line
        respect_hidden_pages: Default hidden-page policy of FormLogic.validate
    """

    cache_size: int = DEFAULT_CACHE_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    respect_hidden_pages: bool = True


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(0, int(raw.strip()))
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Read settings from the environment once."""
    level = (os.getenv(LOG_LEVEL_VAR) or DEFAULT_LOG_LEVEL).strip().upper()
    return Settings(
        cache_size=_int_env(CACHE_SIZE_VAR, DEFAULT_CACHE_SIZE),
        log_level=level or DEFAULT_LOG_LEVEL,
        respect_hidden_pages=_bool_env(RESPECT_HIDDEN_PAGES_VAR, True),
    )


def reset_settings() -> None:
    """Forget cached settings (for tests)."""
    get_settings.cache_clear()
