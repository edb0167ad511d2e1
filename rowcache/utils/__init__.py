"""
Utilities package for rowcache.

Exports shared helpers for logging, timing, and naming. Keep this package
lightweight and free of cache-specific logic.
"""

from rowcache.utils.logging import configure_logging, get_logger
from rowcache.utils.naming import kebab_slug, snake_case, table_name_for
from rowcache.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "kebab_slug",
    "snake_case",
    "table_name_for",
    "ProfileStats",
    "profile_block",
]
