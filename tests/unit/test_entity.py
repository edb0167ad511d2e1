from __future__ import annotations

import pytest

from rowcache.domain.entity import Entity
from rowcache.domain.errors import InvalidEntityError
from rowcache.domain.models import ColumnType, RowKind


class Category(Entity):
    rows = [{"id": 1, "name": "Tools"}]


class ComputedReading(Entity):
    def get_rows(self):
        return []


class RemoteInvoice(Entity):
    use_api = True
    base_uri = "invoices"


class Blank(Entity):
    pass


class PinnedCache(Entity):
    cache = True
    table_name = "pinned"
    schema = {"seen_at": "datetime", "payload": "JSON"}


class StaticWithApiWrites(Entity):
    rows = [{"id": 1}]
    use_api = True


def test_row_kind_resolution_order() -> None:
    assert Category.descriptor.row_kind is RowKind.STATIC
    assert ComputedReading.descriptor.row_kind is RowKind.COMPUTED
    assert RemoteInvoice.descriptor.row_kind is RowKind.REMOTE
    assert Blank.descriptor.row_kind is RowKind.SCHEMA_ONLY
    assert StaticWithApiWrites.descriptor.row_kind is RowKind.STATIC


def test_only_static_rows_are_cached_by_default() -> None:
    assert Category.descriptor.cache_enabled
    assert not ComputedReading.descriptor.cache_enabled
    assert not RemoteInvoice.descriptor.cache_enabled
    assert not Blank.descriptor.cache_enabled
    assert PinnedCache.descriptor.cache_enabled


def test_default_table_names() -> None:
    assert Category.descriptor.table_name == "categories"
    assert Blank.descriptor.table_name == "blanks"
    assert PinnedCache.descriptor.table_name == "pinned"


def test_schema_types_are_case_insensitive() -> None:
    assert PinnedCache.descriptor.schema_override == {
        "seen_at": ColumnType.DATETIME,
        "payload": ColumnType.JSON,
    }


def test_identity_is_module_qualified() -> None:
    assert Category.descriptor.identity == f"{__name__}.Category"
    assert Category.identity() == Category.descriptor.identity


def test_reference_path_is_defining_module() -> None:
    assert Category.reference_path() == __file__


def test_use_api_is_recorded_for_static_entities() -> None:
    assert StaticWithApiWrites.descriptor.use_api
    assert StaticWithApiWrites.descriptor.base_uri == "api"


def test_unknown_schema_type_is_rejected() -> None:
    with pytest.raises(InvalidEntityError):

        class _Broken(Entity):
            schema = {"price": "money"}


def test_non_positive_chunk_size_is_rejected() -> None:
    with pytest.raises(InvalidEntityError):

        class _Broken(Entity):
            insert_chunk_size = 0
