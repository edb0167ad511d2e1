"""
rowcache - materialize row data into per-entity SQLite tables.

Entities declare their rows (static, computed, or fetched from an HTTP API);
the first access builds a SQLite table from them and later reads are plain SQL:

- Freshness decisions keyed on the mtime of the entity's defining file
- Schema inference with per-column override rules
- Race-tolerant table creation and chunked bulk inserts
- One connection per entity, on a cache file or an in-memory store
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from rowcache.cache.freshness import CacheDecision, FreshnessAction, decide
from rowcache.config import Settings, get_settings
from rowcache.domain.entity import Entity
from rowcache.domain.errors import (
    InvalidEntityError,
    RemoteFetchError,
    RowCacheError,
    SchemaConflictError,
)
from rowcache.domain.models import ColumnSpec, ColumnType, RowKind
from rowcache.events import RecordEvent, RecordEvents
from rowcache.infrastructure.connection import BoundConnection, ConnectionRegistry
from rowcache.orchestrator import BootReport, RowCache, get_row_cache
from rowcache.schema.inference import infer_schema, infer_schema_without_rows
from rowcache.schema.materializer import MaterializeResult, TableMaterializer
from rowcache.utils.logging import configure_logging, get_logger
from rowcache.validation import ExistsRule

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Entities
    "Entity",
    "ColumnSpec",
    "ColumnType",
    "RowKind",
    # Orchestration
    "BootReport",
    "RowCache",
    "get_row_cache",
    # Core components
    "BoundConnection",
    "CacheDecision",
    "ConnectionRegistry",
    "FreshnessAction",
    "MaterializeResult",
    "TableMaterializer",
    "decide",
    "infer_schema",
    "infer_schema_without_rows",
    # Events and lookups
    "ExistsRule",
    "RecordEvent",
    "RecordEvents",
    # Errors
    "InvalidEntityError",
    "RemoteFetchError",
    "RowCacheError",
    "SchemaConflictError",
    # Logging
    "configure_logging",
    "get_logger",
]
