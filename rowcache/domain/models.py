"""
Domain models for rowcache.

Defines the column vocabulary shared by schema inference and the
materializer, and the entity descriptor that captures an entity's
capabilities once, at class definition time.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

Scalar = Union[int, float, str, bool, date, datetime, Decimal, None]
Row = Dict[str, Any]
Rows = List[Row]


class ColumnType(str, Enum):
    """Declarable column types. Lookup by value is case-insensitive."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    TEXT = "text"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "dateTime"
    JSON = "json"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ColumnType"]:
        if isinstance(value, str):
            lowered = value.lower()
            for member in cls:
                if member.value.lower() == lowered:
                    return member
        return None


class RowKind(str, Enum):
    """Where an entity's rows come from."""

    STATIC = "static"
    COMPUTED = "computed"
    REMOTE = "remote"
    SCHEMA_ONLY = "schema_only"


class ColumnSpec(BaseModel):
    """
    One column of an inferred schema. The materializer turns these into DDL
    without re-deriving anything.
    """

    name: str = Field(..., description="Column name.")
    type: ColumnType = Field(..., description="Declared or inferred column type.")
    primary_key: bool = Field(False, description="Whether the column is the primary key.")
    autoincrement: bool = Field(False, description="Auto-incrementing integer key.")
    nullable: bool = Field(True, description="Every non-key column is nullable.")

    model_config = {"frozen": True}

    @classmethod
    def increments(cls, name: str) -> "ColumnSpec":
        """Auto-incrementing integer primary key."""
        return cls(
            name=name,
            type=ColumnType.INTEGER,
            primary_key=True,
            autoincrement=True,
            nullable=False,
        )


class EntityDescriptor(BaseModel):
    """
    Capabilities of an entity, resolved once from its class declaration.
    """

    identity: str = Field(..., description="Dotted `module.QualName` of the entity class.")
    table_name: str
    row_kind: RowKind
    schema_override: Dict[str, ColumnType] = Field(default_factory=dict)
    primary_key: str = "id"
    incrementing: bool = True
    timestamps: bool = False
    insert_chunk_size: Optional[int] = Field(None, ge=1)
    cache_enabled: bool = False
    use_api: bool = Field(False, description="Rows and writes go through the remote API.")
    base_uri: str = "api"

    model_config = {"frozen": True}


__all__ = [
    "ColumnSpec",
    "ColumnType",
    "EntityDescriptor",
    "Row",
    "RowKind",
    "Rows",
    "Scalar",
]
