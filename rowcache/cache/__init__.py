"""
Cache package: artifact paths and freshness decisions.
"""

from rowcache.cache.freshness import (
    MEMORY_DATABASE,
    CacheDecision,
    CacheProbe,
    FreshnessAction,
    decide,
    probe_cache,
    reset_cache_file,
    stamp_cache_file,
)
from rowcache.cache.paths import cache_artifacts, cache_directory, cache_file_name, cache_file_path

__all__ = [
    "MEMORY_DATABASE",
    "CacheDecision",
    "CacheProbe",
    "FreshnessAction",
    "cache_artifacts",
    "cache_directory",
    "cache_file_name",
    "cache_file_path",
    "decide",
    "probe_cache",
    "reset_cache_file",
    "stamp_cache_file",
]
