"""
Cache freshness decisions.

A cache file is valid only while its mtime is at least the entity's reference
timestamp (the mtime of the file defining the entity). After a rebuild the
cache file's mtime is set to the reference timestamp, so the file records
"built from the definition as of T" rather than "written at T".

`decide()` is pure; `probe_cache()` collects the filesystem facts it needs and
never raises.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from rowcache.cache.paths import cache_file_path
from rowcache.config import Settings
from rowcache.domain.models import EntityDescriptor
from rowcache.utils.logging import get_logger

log = get_logger(__name__)

MEMORY_DATABASE = ":memory:"


class FreshnessAction(str, Enum):
    NO_CACHING = "no-caching-capabilities"
    CACHE_UP_TO_DATE = "cache-file-found-and-up-to-date"
    CACHE_STALE = "cache-file-not-found-or-stale"
    CACHE_UNAVAILABLE = "cache-directory-unavailable"


@dataclass(frozen=True)
class CacheProbe:
    """Filesystem facts about one entity's cache artifact."""

    caching_enabled: bool
    cache_path: Path
    reference_mtime: Optional[float]
    cache_mtime: Optional[float]
    directory_exists: bool
    directory_writable: bool


@dataclass(frozen=True)
class CacheDecision:
    """
    What to bind and whether to materialize.

    `stamp_mtime` is set only when the cache file must be stamped with the
    reference timestamp after a successful rebuild.
    """

    action: FreshnessAction
    target: str
    materialize: bool
    stamp_mtime: Optional[float] = None

    @property
    def transient(self) -> bool:
        return self.target == MEMORY_DATABASE


def decide(probe: CacheProbe) -> CacheDecision:
    """Classify the cache state; the first matching branch wins."""
    if not probe.caching_enabled or probe.reference_mtime is None:
        return CacheDecision(FreshnessAction.NO_CACHING, MEMORY_DATABASE, materialize=True)

    if probe.cache_mtime is not None and probe.reference_mtime <= probe.cache_mtime:
        return CacheDecision(FreshnessAction.CACHE_UP_TO_DATE, str(probe.cache_path), materialize=False)

    if probe.directory_exists and probe.directory_writable:
        return CacheDecision(
            FreshnessAction.CACHE_STALE,
            str(probe.cache_path),
            materialize=True,
            stamp_mtime=probe.reference_mtime,
        )

    return CacheDecision(FreshnessAction.CACHE_UNAVAILABLE, MEMORY_DATABASE, materialize=True)


def _mtime(path: Optional[str | Path]) -> Optional[float]:
    if path is None:
        return None
    try:
        return Path(path).stat().st_mtime
    except OSError:
        return None


def probe_cache(
    descriptor: EntityDescriptor,
    reference_path: Optional[str | Path],
    settings: Settings,
) -> CacheProbe:
    """Gather the inputs of `decide()` for one entity."""
    cache_path = cache_file_path(descriptor.identity, settings)
    directory = cache_path.parent
    try:
        directory_exists = directory.is_dir()
        directory_writable = directory_exists and os.access(directory, os.W_OK)
    except OSError:
        directory_exists = directory_writable = False

    return CacheProbe(
        caching_enabled=descriptor.cache_enabled,
        cache_path=cache_path,
        reference_mtime=_mtime(reference_path),
        cache_mtime=_mtime(cache_path),
        directory_exists=directory_exists,
        directory_writable=directory_writable,
    )


def reset_cache_file(path: str | Path) -> None:
    """Create the cache file, truncating a stale one."""
    with open(path, "w", encoding="utf-8"):
        pass


def stamp_cache_file(path: str | Path, mtime: float) -> None:
    """Set the cache file's access and modification time to `mtime`."""
    os.utime(path, (mtime, mtime))


__all__ = [
    "MEMORY_DATABASE",
    "CacheDecision",
    "CacheProbe",
    "FreshnessAction",
    "decide",
    "probe_cache",
    "reset_cache_file",
    "stamp_cache_file",
]
