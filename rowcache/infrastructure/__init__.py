"""
Infrastructure package for rowcache.

Centralizes I/O concerns: SQLite engines bound per entity and the HTTP client
used by remote-backed entities. Keep this layer free of freshness and schema
logic.
"""

from rowcache.infrastructure.api_client import ApiClient, send_request
from rowcache.infrastructure.connection import (
    BoundConnection,
    ConnectionRegistry,
    create_sqlite_engine,
)

__all__ = [
    "ApiClient",
    "BoundConnection",
    "ConnectionRegistry",
    "create_sqlite_engine",
    "send_request",
]
