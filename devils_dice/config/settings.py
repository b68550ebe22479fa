"""
Devil's Dice - Application Settings

Loads configuration from environment variables using Pydantic Settings.
Also owns logging configuration for the `devils_dice` logger hierarchy.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase (optional, only needed for realtime broadcast)
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    broadcast_events: bool = False

    # Application
    debug: bool = False
    log_level: str = "INFO"

    # Table defaults
    rng_seed: int | None = None
    starting_tokens: int = 1
    starting_dice: int = 2

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "DEVILS_DICE_",
    }

    @property
    def has_supabase(self) -> bool:
        """Returns True if both Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_anon_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached singleton settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger at the configured level.

    Safe to call repeatedly; the handler is only added once.
    """
    settings = settings or get_settings()
    level_name = "DEBUG" if settings.debug else settings.log_level.upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level {settings.log_level!r}.")

    logger = logging.getLogger("devils_dice")
    logger.setLevel(level)
    if not any(getattr(h, "_devils_dice", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._devils_dice = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
