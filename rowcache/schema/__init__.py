"""
Schema package: column inference and table materialization.
"""

from rowcache.schema.inference import infer_schema, infer_schema_without_rows, infer_value_type
from rowcache.schema.materializer import (
    DEFAULT_CHUNK_SIZE,
    MaterializeResult,
    TableMaterializer,
    build_table,
    chunked,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "MaterializeResult",
    "TableMaterializer",
    "build_table",
    "chunked",
    "infer_schema",
    "infer_schema_without_rows",
    "infer_value_type",
]
