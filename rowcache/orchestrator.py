"""
Orchestrator for booting entities: freshness decision, connection binding,
materialization, and the read/write API served from the bound table.

Usage:
    from rowcache.orchestrator import RowCache

    cache = RowCache()
    cache.count(Planet)          # boots Planet on first access
    cache.where(Planet, name="Venus")

On first access to an entity:

1. probe the filesystem and decide (fresh / stale / no caching / unavailable),
2. bind the entity's connection in the registry,
3. when the decision requires it, fetch rows, infer the schema, materialize,
4. stamp a rebuilt cache file with the reference timestamp.

Freshness and provisioning problems degrade to the transient in-memory store;
materialization errors surface unchanged.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Type

from sqlalchemy import Column, Engine, Table, func, select
from sqlalchemy.exc import OperationalError

from rowcache.cache.freshness import (
    MEMORY_DATABASE,
    CacheDecision,
    FreshnessAction,
    decide,
    probe_cache,
    reset_cache_file,
    stamp_cache_file,
)
from rowcache.config import Settings, get_settings
from rowcache.domain.entity import Entity
from rowcache.domain.models import Row
from rowcache.events import RecordEvent, RecordEvents, register_remote_writes
from rowcache.infrastructure.api_client import ApiClient
from rowcache.infrastructure.connection import BoundConnection, ConnectionRegistry
from rowcache.schema.inference import CREATED_AT, UPDATED_AT, infer_schema, infer_schema_without_rows
from rowcache.schema.materializer import MaterializeResult, TableMaterializer, reflect_table
from rowcache.sources.selection import select_row_source
from rowcache.utils.logging import get_logger
from rowcache.utils.profiler import profile_block

log = get_logger(__name__)

EntityType = Type[Entity]


@dataclass(frozen=True)
class BootReport:
    """Outcome of booting one entity."""

    entity: str
    decision: CacheDecision
    connection: BoundConnection
    result: Optional[MaterializeResult] = None
    fell_back: bool = False
    duration_seconds: float = 0.0

    @property
    def materialized(self) -> bool:
        return self.result is not None


class RowCache:
    """
    Boots entities and serves queries from their materialized tables.

    Parameters
    ----------
    settings : Settings, optional
        Cache location, API and chunking configuration. Defaults to
        `get_settings()`.
    registry : ConnectionRegistry, optional
        Entity connection registry; a fresh one is created when omitted.
    events : RecordEvents, optional
        Record event dispatcher used by the write API.
    client_factory : Callable[[], ApiClient], optional
        Provides the API client for remote rows and write-through. Defaults to
        a client built lazily from settings.
    remote_writes : bool
        Whether to subscribe the HTTP write-through callbacks.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[ConnectionRegistry] = None,
        events: Optional[RecordEvents] = None,
        client_factory: Optional[Callable[[], ApiClient]] = None,
        remote_writes: bool = True,
    ) -> None:
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.events = events if events is not None else RecordEvents()
        self._client_factory = client_factory
        self._client: Optional[ApiClient] = None
        self._tables: Dict[str, Table] = {}
        self._entities: Dict[str, EntityType] = {}
        if remote_writes:
            register_remote_writes(self.events, self.api_client)

    # --- collaborators -------------------------------------------------

    def api_client(self) -> ApiClient:
        if self._client is None:
            if self._client_factory is not None:
                self._client = self._client_factory()
            else:
                self._client = ApiClient.from_settings(self.settings)
        return self._client

    # --- boot ------------------------------------------------------------

    def booted_entity(self, identity: str) -> Optional[EntityType]:
        """Entity class booted under `identity`, if any."""
        return self._entities.get(identity)

    def status(self, entity: EntityType) -> CacheDecision:
        """Freshness decision for an entity, without side effects."""
        return decide(probe_cache(entity.descriptor, entity.reference_path(), self.settings))

    def connection(self, entity: EntityType) -> BoundConnection:
        """The entity's bound connection, booting it on first access."""
        bound = self.registry.get(entity.descriptor.identity)
        if bound is None:
            bound = self.boot(entity).connection
        return bound

    def boot(self, entity: EntityType) -> BootReport:
        """Decide, bind, and materialize if needed."""
        identity = entity.descriptor.identity
        self._tables.pop(identity, None)
        self._entities[identity] = entity

        with profile_block(f"boot:{identity}") as stats:
            decision = self.status(entity)
            log.info(
                "Cache decision",
                extra={"entity": identity, "action": decision.action.value, "target": decision.target},
            )
            if decision.action is FreshnessAction.CACHE_STALE:
                bound, result, fell_back = self._rebuild(entity, decision)
            elif decision.action is FreshnessAction.CACHE_UP_TO_DATE:
                bound, result, fell_back = self._reuse(entity, decision)
            else:
                bound = self.registry.bind(identity, MEMORY_DATABASE)
                result, fell_back = self._migrate_or_forget(entity, bound), False

        return BootReport(
            entity=identity,
            decision=decision,
            connection=bound,
            result=result,
            fell_back=fell_back,
            duration_seconds=stats.duration_seconds,
        )

    def _transient(self, entity: EntityType, reason: str, error: Exception):
        identity = entity.descriptor.identity
        log.warning(
            "Cache file unavailable; using transient store",
            extra={"entity": identity, "reason": reason, "error": str(error)},
        )
        bound = self.registry.bind(identity, MEMORY_DATABASE)
        return bound, self._migrate_or_forget(entity, bound), True

    def _reuse(self, entity: EntityType, decision: CacheDecision):
        try:
            bound = self.registry.bind(entity.descriptor.identity, decision.target)
        except OperationalError as exc:
            return self._transient(entity, "open", exc)
        return bound, None, False

    def _rebuild(self, entity: EntityType, decision: CacheDecision):
        identity = entity.descriptor.identity
        try:
            reset_cache_file(decision.target)
            if decision.stamp_mtime is not None:
                # Older than the reference until the rebuild completes.
                stamp_cache_file(decision.target, decision.stamp_mtime - 1)
            bound = self.registry.bind(identity, decision.target)
        except (OSError, OperationalError) as exc:
            return self._transient(entity, "create", exc)

        try:
            result = self.migrate(entity, bound)
        except BaseException:
            self.registry.forget(identity)
            self._discard(decision.target)
            raise

        if decision.stamp_mtime is not None:
            try:
                stamp_cache_file(decision.target, decision.stamp_mtime)
            except OSError as exc:
                log.warning(
                    "Could not stamp cache file",
                    extra={"entity": identity, "path": decision.target, "error": str(exc)},
                )
        return bound, result, False

    def _migrate_or_forget(self, entity: EntityType, bound: BoundConnection) -> MaterializeResult:
        try:
            return self.migrate(entity, bound)
        except BaseException:
            self.registry.forget(entity.descriptor.identity)
            raise

    @staticmethod
    def _discard(path: str) -> None:
        try:
            os.remove(path)
        except OSError:
            log.warning("Could not remove incomplete cache file", extra={"path": path})

    def migrate(self, entity: EntityType, bound: BoundConnection) -> MaterializeResult:
        """Fetch rows, infer the schema, and materialize into `bound`."""
        descriptor = entity.descriptor
        instance = entity()
        source = select_row_source(instance, self.api_client)
        rows = source.fetch() if source is not None else None

        if rows:
            columns = infer_schema(
                rows[0],
                descriptor.schema_override,
                primary_key=descriptor.primary_key,
                incrementing=descriptor.incrementing,
                timestamps=descriptor.timestamps,
            )
        else:
            columns = infer_schema_without_rows(
                descriptor.schema_override,
                primary_key=descriptor.primary_key,
                incrementing=descriptor.incrementing,
                timestamps=descriptor.timestamps,
            )

        chunk_size = descriptor.insert_chunk_size or self.settings.insert_chunk_size
        materializer = TableMaterializer(bound.engine, chunk_size=chunk_size)
        return materializer.materialize(
            descriptor.table_name,
            columns,
            rows,
            after_migrate=instance.after_migrate,
        )

    def reset(self) -> None:
        """Drop every binding (process-lifetime state; used by tests)."""
        self.registry.reset()
        self._tables.clear()
        self._entities.clear()
        if self._client is not None:
            self._client.close()
            self._client = None

    # --- reads -----------------------------------------------------------

    def engine(self, entity: EntityType) -> Engine:
        return self.connection(entity).engine

    def table(self, entity: EntityType) -> Table:
        """Reflected table for the entity (boots the entity if needed)."""
        identity = entity.descriptor.identity
        engine = self.engine(entity)
        table = self._tables.get(identity)
        if table is None:
            table = reflect_table(entity.descriptor.table_name, engine)
            self._tables[identity] = table
        return table

    @staticmethod
    def _column(table: Table, name: str) -> Column:
        if name not in table.c:
            raise ValueError(f"Unknown column '{name}' on table '{table.name}'")
        return table.c[name]

    def _select(self, entity: EntityType, filters: Dict[str, Any]):
        table = self.table(entity)
        stmt = select(table)
        for name, value in filters.items():
            stmt = stmt.where(self._column(table, name) == value)
        return stmt

    def count(self, entity: EntityType) -> int:
        table = self.table(entity)
        with self.engine(entity).connect() as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()

    def where(self, entity: EntityType, **filters: Any) -> List[Row]:
        with self.engine(entity).connect() as conn:
            return [dict(row._mapping) for row in conn.execute(self._select(entity, filters))]

    def all(self, entity: EntityType) -> List[Row]:
        return self.where(entity)

    def first(self, entity: EntityType, **filters: Any) -> Optional[Row]:
        with self.engine(entity).connect() as conn:
            row = conn.execute(self._select(entity, filters).limit(1)).first()
        return dict(row._mapping) if row is not None else None

    def pluck(self, entity: EntityType, column: str, order_by: Optional[str] = None) -> List[Any]:
        table = self.table(entity)
        stmt = select(self._column(table, column))
        if order_by is not None:
            stmt = stmt.order_by(self._column(table, order_by))
        with self.engine(entity).connect() as conn:
            return list(conn.execute(stmt).scalars())

    # --- writes ----------------------------------------------------------

    def create(self, entity: EntityType, values: Row) -> Row:
        """Insert one record after dispatching `saving` and `creating`."""
        descriptor = entity.descriptor
        record = dict(values)
        if descriptor.timestamps:
            now = datetime.now(timezone.utc)
            record.setdefault(CREATED_AT, now)
            record.setdefault(UPDATED_AT, now)

        key = record.get(descriptor.primary_key)
        self.events.dispatch(RecordEvent.SAVING, entity, record, key=key)
        self.events.dispatch(RecordEvent.CREATING, entity, record, key=key)

        table = self.table(entity)
        with self.engine(entity).begin() as conn:
            result = conn.execute(table.insert().values(**record))
        if key is None and result.inserted_primary_key:
            record[descriptor.primary_key] = result.inserted_primary_key[0]
        return record

    def update(self, entity: EntityType, key: Any, values: Row) -> int:
        """Update the record with primary key `key`; returns affected rows."""
        descriptor = entity.descriptor
        record = dict(values)
        if descriptor.timestamps:
            record.setdefault(UPDATED_AT, datetime.now(timezone.utc))

        self.events.dispatch(RecordEvent.SAVING, entity, record, key=key)
        self.events.dispatch(RecordEvent.UPDATING, entity, record, key=key)

        table = self.table(entity)
        stmt = table.update().where(self._column(table, descriptor.primary_key) == key).values(**record)
        with self.engine(entity).begin() as conn:
            return conn.execute(stmt).rowcount

    def delete(self, entity: EntityType, key: Any) -> int:
        """Delete the record with primary key `key`; returns affected rows."""
        descriptor = entity.descriptor
        record = self.first(entity, **{descriptor.primary_key: key}) or {descriptor.primary_key: key}
        self.events.dispatch(RecordEvent.DELETING, entity, record, key=key)

        table = self.table(entity)
        stmt = table.delete().where(self._column(table, descriptor.primary_key) == key)
        with self.engine(entity).begin() as conn:
            return conn.execute(stmt).rowcount


@lru_cache(maxsize=1)
def get_row_cache() -> RowCache:
    """
    Process-wide RowCache used by the `Entity` classmethods. Call
    `get_row_cache().reset()` (or `get_row_cache.cache_clear()`) to start over.
    """
    return RowCache()


__all__ = ["BootReport", "RowCache", "get_row_cache"]
