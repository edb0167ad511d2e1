"""
Configuration settings for rowcache.

Uses Pydantic Settings to load environment variables for the cache location,
the remote API client, logging, and materialization defaults.
"""
from __future__ import annotations

import tempfile
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Cache artifacts
    cache_path: str = Field(default_factory=tempfile.gettempdir, alias="ROWCACHE_CACHE_PATH")
    cache_prefix: str = Field("rowcache", alias="ROWCACHE_CACHE_PREFIX")

    # Remote API
    api_url: str = Field("http://localhost", alias="ROWCACHE_API_URL")
    api_token: str = Field("", alias="ROWCACHE_API_TOKEN")
    api_timeout_seconds: float = Field(10.0, alias="ROWCACHE_API_TIMEOUT")

    # Materialization defaults
    insert_chunk_size: int = Field(100, ge=1, alias="ROWCACHE_INSERT_CHUNK_SIZE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
