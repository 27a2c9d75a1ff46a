"""
Application configuration loaded from environment variables.

Every field can be overridden with a ``PLAYSTORE_API_`` prefixed
variable, e.g. ``PLAYSTORE_API_API_PREFIX=/v1``.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the facade."""

    model_config = SettingsConfigDict(env_prefix="PLAYSTORE_API_", env_file=".env", extra="ignore")

    project_name: str = Field(default="Play Store API", description="Human readable name.")
    api_prefix: str = Field(default="/api", description="Path the catalogue router is mounted under.")
    default_lang: str = Field(default="en", description="Language used for per-app lookups when none is given.")
    default_country: str = Field(default="us", description="Country used for per-app lookups when none is given.")
    log_level: str = Field(default="INFO", description="Level applied to the application loggers.")


@lru_cache
def get_settings() -> Settings:
    return Settings()
