"""
Row source selection from an entity's descriptor.

Static rows win, then a `get_rows()` override, then the remote API; an entity
with none of these has no row source and is materialized from its schema.
"""

from __future__ import annotations

from typing import Callable, Optional

from rowcache.domain.entity import Entity
from rowcache.domain.models import RowKind
from rowcache.infrastructure.api_client import ApiClient
from rowcache.sources.abstract import RowSource
from rowcache.sources.computed import ComputedRows
from rowcache.sources.remote import RemoteRows
from rowcache.sources.static import StaticRows


def select_row_source(
    entity: Entity,
    client_factory: Callable[[], ApiClient],
) -> Optional[RowSource]:
    """
    Build the row source for an entity instance.

    Parameters
    ----------
    entity : Entity
        Instance whose class descriptor decides the source.
    client_factory : Callable[[], ApiClient]
        Lazily provides the API client for remote-backed entities.
    """
    descriptor = type(entity).descriptor
    kind = descriptor.row_kind
    if kind is RowKind.STATIC:
        return StaticRows(type(entity).rows or [])
    if kind is RowKind.COMPUTED:
        return ComputedRows(entity.get_rows)
    if kind is RowKind.REMOTE:
        return RemoteRows(client_factory, descriptor.base_uri)
    return None


__all__ = ["select_row_source"]
