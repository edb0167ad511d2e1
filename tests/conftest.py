"""
Pytest configuration for rowcache.

Provides fixtures for:
- Settings pointing the cache directory at a per-test temporary path
- A RowCache bound to those settings, reset after each test
- A transient in-memory SQLite engine for materializer tests
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy import Engine

from rowcache.config import Settings, get_settings
from rowcache.infrastructure.connection import create_sqlite_engine
from rowcache.orchestrator import RowCache, get_row_cache

TEST_API_URL = "https://api.example.test"
TEST_API_TOKEN = "test-token"


@pytest.fixture(scope="function")
def cache_dir(tmp_path: Path) -> Path:
    """
    Existing, writable cache directory.
    """
    directory = tmp_path / "cache"
    directory.mkdir()
    return directory


@pytest.fixture(scope="function")
def test_settings(cache_dir: Path) -> Settings:
    """
    Settings fixture with test-specific overrides.
    """
    return Settings(
        cache_path=str(cache_dir),
        cache_prefix="rowcache",
        api_url=TEST_API_URL,
        api_token=TEST_API_TOKEN,
        insert_chunk_size=100,
        log_level="DEBUG",
    )


@pytest.fixture(scope="function")
def row_cache(test_settings: Settings) -> Generator[RowCache, None, None]:
    """
    RowCache on the test settings; every binding is dropped afterwards.
    """
    cache = RowCache(settings=test_settings)
    try:
        yield cache
    finally:
        cache.reset()


@pytest.fixture(scope="function")
def memory_engine() -> Generator[Engine, None, None]:
    engine = create_sqlite_engine(":memory:")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(autouse=True)
def _clear_process_singletons() -> Generator[None, None, None]:
    """
    Keep the lru-cached settings and process-wide RowCache from leaking
    between tests.
    """
    get_settings.cache_clear()
    get_row_cache.cache_clear()
    yield
    get_settings.cache_clear()
    get_row_cache.cache_clear()
