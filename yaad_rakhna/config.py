from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the skill.

    Values are loaded from environment variables by default and may be
    overridden via CLI flags by the application entrypoint.
    """

    # Durable tier
    # Note: "none" is a valid production configuration; the skill then keeps
    # items for the current conversation only.
    durable_backend: Literal["none", "memory", "json", "sqlite"] = "none"
    durable_path: Path | None = None

    # Vocabulary
    vocabulary_path: Path | None = None
    locale: Literal["hi-IN"] = "hi-IN"

    user_agent: str = "hindi-item-locator/v1.0"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["plain", "json"] = "plain"

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
