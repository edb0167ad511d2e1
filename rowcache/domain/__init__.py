"""
Domain package for rowcache.

Exports the entity base class, its descriptor, the column vocabulary, and the
error hierarchy. Keep this package focused on data definitions and validation.
"""

from rowcache.domain.entity import Entity, describe
from rowcache.domain.errors import (
    InvalidEntityError,
    RemoteFetchError,
    RowCacheError,
    SchemaConflictError,
)
from rowcache.domain.models import ColumnSpec, ColumnType, EntityDescriptor, Row, RowKind, Rows

__all__ = [
    "ColumnSpec",
    "ColumnType",
    "Entity",
    "EntityDescriptor",
    "InvalidEntityError",
    "RemoteFetchError",
    "Row",
    "RowCacheError",
    "RowKind",
    "Rows",
    "SchemaConflictError",
    "describe",
]
