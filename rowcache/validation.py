"""
Existence lookups against materialized tables, for validation rules.

    rule = ExistsRule(cache, "app.catalog.Planet")            # entity table
    rule = ExistsRule(cache, "app.catalog.Planet.planets", column="name")
    rule.passes("name", "Venus")

The target is resolved through the connection registry: either a registered
entity identity, or an identity followed by `.<table>`. Only entities that
have already been booted in this process can be resolved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Tuple

from sqlalchemy import exists, select

from rowcache.domain.errors import RowCacheError
from rowcache.infrastructure.connection import BoundConnection
from rowcache.schema.materializer import reflect_table
from rowcache.utils.naming import table_name_for

if TYPE_CHECKING:
    from rowcache.orchestrator import RowCache


class ExistsRule:
    """Passes when a row with `column == value` exists in the target table."""

    def __init__(self, row_cache: "RowCache", target: str, column: Optional[str] = None) -> None:
        self.row_cache = row_cache
        self.target = target
        self.column = column

    def _resolve(self) -> Tuple[BoundConnection, str]:
        registry = self.row_cache.registry
        bound = registry.get(self.target)
        if bound is not None:
            entity = self.row_cache.booted_entity(self.target)
            if entity is not None:
                return bound, entity.descriptor.table_name
            return bound, table_name_for(self.target.rsplit(".", 1)[-1])
        key, _, table_name = self.target.rpartition(".")
        bound = registry.get(key) if key else None
        if bound is None:
            raise RowCacheError(f"No connection registered for '{self.target}'")
        return bound, table_name

    def passes(self, attribute: str, value: Any) -> bool:
        bound, table_name = self._resolve()
        table = reflect_table(table_name, bound.engine)
        column_name = self.column or attribute
        if column_name not in table.c:
            return False
        stmt = select(exists().where(table.c[column_name] == value))
        with bound.engine.connect() as conn:
            return bool(conn.execute(stmt).scalar())


__all__ = ["ExistsRule"]
