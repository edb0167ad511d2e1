"""
Cache artifact locations.

Each entity caches to `<cache_path>/<cache_prefix>-<slug>.sqlite`, where the
slug is the kebab-cased entity identity.
"""

from __future__ import annotations

import os
from pathlib import Path

from rowcache.config import Settings
from rowcache.utils.naming import kebab_slug

CACHE_SUFFIX = ".sqlite"


def cache_directory(settings: Settings) -> Path:
    """Absolute cache directory; it may not exist."""
    return Path(os.path.expandvars(settings.cache_path)).expanduser().resolve()


def cache_file_name(identity: str, settings: Settings) -> str:
    return f"{settings.cache_prefix}-{kebab_slug(identity)}{CACHE_SUFFIX}"


def cache_file_path(identity: str, settings: Settings) -> Path:
    return cache_directory(settings) / cache_file_name(identity, settings)


def cache_artifacts(settings: Settings) -> list[Path]:
    """Existing cache files written under the configured prefix."""
    directory = cache_directory(settings)
    if not directory.is_dir():
        return []
    return sorted(directory.glob(f"{settings.cache_prefix}-*{CACHE_SUFFIX}"))


__all__ = [
    "CACHE_SUFFIX",
    "cache_artifacts",
    "cache_directory",
    "cache_file_name",
    "cache_file_path",
]
