"""
Schema inference: derive an ordered column list from a sample row, an
explicit schema override, or both.

Per-value precedence:

1. int                                   -> integer
2. other numeric (float, Decimal, numeric string) -> float
3. str                                   -> string
4. datetime                              -> dateTime
5. anything else, None included          -> string

with bool -> boolean and date -> date as the two Python-only additions. An
explicit override for a column always wins over the inferred type.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from rowcache.domain.models import ColumnSpec, ColumnType

CREATED_AT = "created_at"
UPDATED_AT = "updated_at"

# Same shape a numeric string must have to count as a number: optional sign,
# digits with optional fraction, optional exponent, surrounding whitespace.
_NUMERIC_STRING = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def _is_numeric(value: Any) -> bool:
    if isinstance(value, (float, Decimal)):
        return True
    return isinstance(value, str) and bool(_NUMERIC_STRING.match(value))


def infer_value_type(value: Any) -> ColumnType:
    """Column type for a single sample value."""
    if isinstance(value, bool):
        return ColumnType.BOOLEAN
    if isinstance(value, int):
        return ColumnType.INTEGER
    if _is_numeric(value):
        return ColumnType.FLOAT
    if isinstance(value, str):
        return ColumnType.STRING
    if isinstance(value, datetime):
        return ColumnType.DATETIME
    if isinstance(value, date):
        return ColumnType.DATE
    return ColumnType.STRING


def _timestamp_columns(present: List[str]) -> List[ColumnSpec]:
    if CREATED_AT in present and UPDATED_AT in present:
        return []
    return [
        ColumnSpec(name=name, type=ColumnType.DATETIME)
        for name in (CREATED_AT, UPDATED_AT)
        if name not in present
    ]


def infer_schema(
    sample_row: Mapping[str, Any],
    schema_override: Optional[Mapping[str, ColumnType]] = None,
    primary_key: str = "id",
    incrementing: bool = True,
    timestamps: bool = False,
) -> List[ColumnSpec]:
    """
    Infer the table schema from the first row of data.

    Parameters
    ----------
    sample_row : Mapping[str, Any]
        A representative row; its key order becomes the column order.
    schema_override : Mapping[str, ColumnType], optional
        Declared types that replace inferred ones for the columns they name.
    primary_key : str
        Primary key column name.
    incrementing : bool
        Whether a missing primary key should be synthesized as an
        auto-incrementing integer column.
    timestamps : bool
        Whether `created_at`/`updated_at` columns are maintained.

    Returns
    -------
    List[ColumnSpec]
        Ordered columns; every non-key column is nullable.
    """
    overrides = dict(schema_override or {})
    columns: List[ColumnSpec] = []

    if incrementing and primary_key not in sample_row:
        columns.append(ColumnSpec.increments(primary_key))

    for name, value in sample_row.items():
        inferred = infer_value_type(value)
        if name == primary_key and inferred is ColumnType.INTEGER:
            columns.append(ColumnSpec.increments(primary_key))
            continue
        declared = overrides.get(name)
        columns.append(ColumnSpec(name=name, type=ColumnType(declared) if declared else inferred))

    if timestamps:
        columns.extend(_timestamp_columns(list(sample_row.keys())))

    return columns


def infer_schema_without_rows(
    schema_override: Optional[Mapping[str, ColumnType]] = None,
    primary_key: str = "id",
    incrementing: bool = True,
    timestamps: bool = False,
) -> List[ColumnSpec]:
    """
    Schema for an entity with no row data: every named column is taken at
    face value from the override.
    """
    overrides = dict(schema_override or {})
    columns: List[ColumnSpec] = []

    if incrementing and primary_key not in overrides:
        columns.append(ColumnSpec.increments(primary_key))

    for name, declared in overrides.items():
        declared = ColumnType(declared)
        if name == primary_key and declared is ColumnType.INTEGER:
            columns.append(ColumnSpec.increments(primary_key))
            continue
        columns.append(ColumnSpec(name=name, type=declared))

    if timestamps:
        columns.extend(_timestamp_columns(list(overrides.keys())))

    return columns


__all__ = [
    "CREATED_AT",
    "UPDATED_AT",
    "infer_schema",
    "infer_schema_without_rows",
    "infer_value_type",
]
