"""
Exception hierarchy for rowcache.

Database failures other than the benign table-exists race are not wrapped:
SQLAlchemy exceptions reach the caller unmodified.
"""

from __future__ import annotations

from typing import Optional


class RowCacheError(Exception):
    """Base class for rowcache errors."""


class InvalidEntityError(RowCacheError):
    """Raised when an entity declaration cannot be resolved into a descriptor."""


class RemoteFetchError(RowCacheError):
    """
    Non-success response (or transport failure) from the remote API.

    `status` is None when no HTTP response was received at all.
    """

    def __init__(self, reason: str, status: Optional[int] = None, verb: Optional[str] = None) -> None:
        self.status = status
        self.reason = reason
        self.verb = verb
        prefix = f"{verb.upper()} " if verb else ""
        detail = f"HTTP {status}: {reason}" if status is not None else reason
        super().__init__(f"{prefix}request failed ({detail})")


class SchemaConflictError(RowCacheError):
    """
    The target table already exists.

    Raised inside the materializer when a concurrent first access won the
    create race; it is logged and absorbed, never surfaced to callers.
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        super().__init__(f"table {table_name!r} already exists")


__all__ = [
    "RowCacheError",
    "InvalidEntityError",
    "RemoteFetchError",
    "SchemaConflictError",
]
