"""
Configuration management using pydantic-settings.
Loads from AGENT_EDITOR_* environment variables and ./.env
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_editor.constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Client settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="AGENT_EDITOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT

    # Logging
    log_level: str = "INFO"

    # Export
    export_dir: str = "."


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure logging for agent_editor modules."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
