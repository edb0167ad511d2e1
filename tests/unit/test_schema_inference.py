from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from rowcache.domain.models import ColumnSpec, ColumnType
from rowcache.schema.inference import (
    CREATED_AT,
    UPDATED_AT,
    infer_schema,
    infer_schema_without_rows,
    infer_value_type,
)

NON_STANDARD_ROW = {"id": 5, "foo": "bar", "bob": "lob"}


def _types(columns: list[ColumnSpec]) -> dict[str, ColumnType]:
    return {column.name: column.type for column in columns}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (123, ColumnType.INTEGER),
        (123.456, ColumnType.FLOAT),
        (Decimal("1.50"), ColumnType.FLOAT),
        ("12.5", ColumnType.FLOAT),
        ("42", ColumnType.FLOAT),
        ("bar", ColumnType.STRING),
        ("", ColumnType.STRING),
        (datetime(2020, 1, 1), ColumnType.DATETIME),
        (date(2020, 1, 1), ColumnType.DATE),
        (True, ColumnType.BOOLEAN),
        (None, ColumnType.STRING),
        ([1, 2], ColumnType.STRING),
    ],
)
def test_infer_value_type_precedence(value, expected) -> None:
    assert infer_value_type(value) is expected


def test_integer_primary_key_becomes_auto_increment_column() -> None:
    columns = infer_schema(NON_STANDARD_ROW)

    assert [column.name for column in columns] == ["id", "foo", "bob"]
    assert columns[0] == ColumnSpec.increments("id")
    assert all(column.nullable for column in columns[1:])
    assert _types(columns)["foo"] is ColumnType.STRING


def test_missing_primary_key_is_synthesized_first() -> None:
    columns = infer_schema({"name": "Venus", "radius": 6051.8})

    assert [column.name for column in columns] == ["id", "name", "radius"]
    assert columns[0].autoincrement
    assert _types(columns)["radius"] is ColumnType.FLOAT


def test_non_incrementing_entity_gets_no_synthetic_key() -> None:
    columns = infer_schema({"code": "EUR", "rate": 1.0}, primary_key="code", incrementing=False)

    assert [column.name for column in columns] == ["code", "rate"]
    assert not any(column.primary_key for column in columns)


def test_string_primary_key_value_stays_a_plain_column() -> None:
    columns = infer_schema({"id": "abc", "name": "x"}, incrementing=False)

    assert columns[0] == ColumnSpec(name="id", type=ColumnType.STRING)


def test_varying_value_types_map_column_by_column() -> None:
    row = {
        "int": 123,
        "float": 123.456,
        "datetime": datetime(2020, 1, 1),
        "string": "bar",
        "null": None,
    }

    types = _types(infer_schema(row))

    assert types == {
        "id": ColumnType.INTEGER,
        "int": ColumnType.INTEGER,
        "float": ColumnType.FLOAT,
        "datetime": ColumnType.DATETIME,
        "string": ColumnType.STRING,
        "null": ColumnType.STRING,
    }


def test_schema_override_wins_over_inferred_type() -> None:
    columns = infer_schema(
        {"float": 123.456, "string": "foo"},
        schema_override={"float": ColumnType.STRING},
    )

    assert _types(columns)["float"] is ColumnType.STRING
    assert _types(columns)["string"] is ColumnType.STRING


def test_integer_primary_key_detection_precedes_override() -> None:
    columns = infer_schema({"id": 5}, schema_override={"id": ColumnType.STRING})

    assert columns == [ColumnSpec.increments("id")]


def test_timestamps_append_both_columns_when_missing() -> None:
    columns = infer_schema({"name": "a"}, timestamps=True)

    assert [column.name for column in columns] == ["id", "name", CREATED_AT, UPDATED_AT]
    assert _types(columns)[CREATED_AT] is ColumnType.DATETIME


def test_timestamps_only_append_the_missing_column() -> None:
    columns = infer_schema({"name": "a", CREATED_AT: datetime(2020, 1, 1)}, timestamps=True)

    names = [column.name for column in columns]
    assert names.count(CREATED_AT) == 1
    assert names[-1] == UPDATED_AT


def test_timestamps_skipped_when_both_columns_are_present() -> None:
    row = {CREATED_AT: "2020-01-01", UPDATED_AT: "2020-01-02"}

    columns = infer_schema(row, incrementing=False, timestamps=True)

    assert [column.name for column in columns] == [CREATED_AT, UPDATED_AT]


def test_schema_without_rows_takes_override_at_face_value() -> None:
    columns = infer_schema_without_rows({"id": ColumnType.INTEGER, "name": ColumnType.STRING})

    assert columns == [
        ColumnSpec.increments("id"),
        ColumnSpec(name="name", type=ColumnType.STRING),
    ]


def test_schema_without_rows_synthesizes_key() -> None:
    columns = infer_schema_without_rows({"name": ColumnType.TEXT}, timestamps=True)

    assert [column.name for column in columns] == ["id", "name", CREATED_AT, UPDATED_AT]


def test_blank_entity_schema_is_just_the_key() -> None:
    assert infer_schema_without_rows({}) == [ColumnSpec.increments("id")]
    assert infer_schema_without_rows({}, incrementing=False) == []
