"""
Entity base class.

An entity owns one materialized table. Subclasses declare where their rows
come from through class attributes:

    class Planet(Entity):
        rows = [
            {"id": 1, "name": "Mercury", "radius_km": 2439.7},
            {"id": 2, "name": "Venus", "radius_km": 6051.8},
        ]

    Planet.count()            # 2, served from SQLite
    Planet.where(name="Venus")

Static `rows` are cached on disk; overriding `get_rows()` computes rows on
every materialization (transient store); `use_api = True` fetches rows from
`base_uri` on the configured API. An entity with none of these is created
from its `schema` alone.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import Table

from rowcache.domain.errors import InvalidEntityError
from rowcache.domain.models import ColumnType, EntityDescriptor, Row, RowKind, Rows
from rowcache.utils.naming import table_name_for

if TYPE_CHECKING:
    from rowcache.infrastructure.connection import BoundConnection
    from rowcache.orchestrator import RowCache


class Entity:
    """Base class for row-cached entities."""

    rows: ClassVar[Optional[Rows]] = None
    schema: ClassVar[Dict[str, str]] = {}
    table_name: ClassVar[Optional[str]] = None
    primary_key: ClassVar[str] = "id"
    incrementing: ClassVar[bool] = True
    timestamps: ClassVar[bool] = False
    insert_chunk_size: ClassVar[Optional[int]] = None
    use_api: ClassVar[bool] = False
    base_uri: ClassVar[str] = "api"
    # None: cache on disk only when rows are static.
    cache: ClassVar[Optional[bool]] = None

    descriptor: ClassVar[EntityDescriptor]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.descriptor = describe(cls)

    def get_rows(self) -> Optional[Rows]:
        """Override to compute rows each time the table is materialized."""
        return None

    def after_migrate(self, table: Table) -> None:
        """Adjust the table definition (extra columns, indexes) before it is created."""

    @classmethod
    def identity(cls) -> str:
        return f"{cls.__module__}.{cls.__qualname__}"

    @classmethod
    def reference_path(cls) -> Optional[str]:
        """
        File whose mtime versions the cached table. Defaults to the module
        defining the class; None when the class has no source file.
        """
        try:
            return inspect.getfile(cls)
        except (TypeError, OSError):
            return None

    # Convenience API bound to the process-wide RowCache.

    @classmethod
    def _row_cache(cls) -> "RowCache":
        from rowcache.orchestrator import get_row_cache

        return get_row_cache()

    @classmethod
    def connection(cls) -> "BoundConnection":
        return cls._row_cache().connection(cls)

    @classmethod
    def count(cls) -> int:
        return cls._row_cache().count(cls)

    @classmethod
    def all(cls) -> List[Row]:
        return cls._row_cache().all(cls)

    @classmethod
    def first(cls, **filters: Any) -> Optional[Row]:
        return cls._row_cache().first(cls, **filters)

    @classmethod
    def where(cls, **filters: Any) -> List[Row]:
        return cls._row_cache().where(cls, **filters)

    @classmethod
    def pluck(cls, column: str) -> List[Any]:
        return cls._row_cache().pluck(cls, column)

    @classmethod
    def create(cls, values: Row) -> Row:
        return cls._row_cache().create(cls, values)

    @classmethod
    def update(cls, key: Any, values: Row) -> int:
        return cls._row_cache().update(cls, key, values)

    @classmethod
    def delete(cls, key: Any) -> int:
        return cls._row_cache().delete(cls, key)


def _row_kind(entity_cls: type) -> RowKind:
    if getattr(entity_cls, "rows", None) is not None:
        return RowKind.STATIC
    if entity_cls.get_rows is not Entity.get_rows:
        return RowKind.COMPUTED
    if getattr(entity_cls, "use_api", False):
        return RowKind.REMOTE
    return RowKind.SCHEMA_ONLY


def describe(entity_cls: type) -> EntityDescriptor:
    """
    Resolve an entity class declaration into its descriptor.

    Raises
    ------
    InvalidEntityError
        If the schema names an unknown column type or the chunk size is invalid.
    """
    identity = f"{entity_cls.__module__}.{entity_cls.__qualname__}"
    kind = _row_kind(entity_cls)
    cache_flag = entity_cls.cache
    try:
        schema_override = {
            name: ColumnType(declared) for name, declared in (entity_cls.schema or {}).items()
        }
    except ValueError as exc:
        raise InvalidEntityError(f"Invalid entity declaration {identity}: {exc}") from exc
    try:
        return EntityDescriptor(
            identity=identity,
            table_name=entity_cls.table_name or table_name_for(entity_cls.__name__),
            row_kind=kind,
            schema_override=schema_override,
            primary_key=entity_cls.primary_key,
            incrementing=entity_cls.incrementing,
            timestamps=entity_cls.timestamps,
            insert_chunk_size=entity_cls.insert_chunk_size,
            cache_enabled=cache_flag if cache_flag is not None else kind is RowKind.STATIC,
            use_api=entity_cls.use_api,
            base_uri=entity_cls.base_uri,
        )
    except ValidationError as exc:
        raise InvalidEntityError(f"Invalid entity declaration {identity}: {exc}") from exc


__all__ = ["Entity", "describe"]
