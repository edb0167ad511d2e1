"""
Table materializer: create the entity table from an inferred schema and
bulk-insert rows in bounded chunks.

Creation tolerates a concurrent first access that created the same table a
moment earlier: the loser of that race does nothing further, so the rows are
written exactly once. Any other DDL or DML failure propagates unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Engine,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    event,
    inspect,
)
from sqlalchemy.exc import DBAPIError, OperationalError, ProgrammingError
from sqlalchemy.types import TypeDecorator, TypeEngine

from rowcache.domain.errors import SchemaConflictError
from rowcache.domain.models import ColumnSpec, ColumnType, Row
from rowcache.utils.logging import get_logger
from rowcache.utils.profiler import profile_block

log = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 100


class _LenientTemporal(TypeDecorator):
    """
    Date/time column that also stores strings it cannot parse.

    ISO-8601 strings are bound as date/time objects; any other string is
    stored verbatim and read back as the same string.
    """

    cache_ok = True

    def _parse(self, value: str) -> Any:
        raise NotImplementedError

    def bind_processor(self, dialect):
        process = self.impl_instance.bind_processor(dialect)

        def _bind(value):
            if isinstance(value, str):
                try:
                    value = self._parse(value)
                except ValueError:
                    return value
            return process(value) if process is not None else value

        return _bind

    def result_processor(self, dialect, coltype):
        process = self.impl_instance.result_processor(dialect, coltype)
        if process is None:
            return None

        def _result(value):
            try:
                return process(value)
            except ValueError:
                return value

        return _result


class LenientDateTime(_LenientTemporal):
    impl = DateTime

    def _parse(self, value: str) -> datetime:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))


class LenientDate(_LenientTemporal):
    impl = Date

    def _parse(self, value: str) -> date:
        return date.fromisoformat(value)


_SQL_TYPES: Dict[ColumnType, Callable[[], TypeEngine]] = {
    ColumnType.INTEGER: Integer,
    ColumnType.FLOAT: Float,
    ColumnType.STRING: lambda: String(255),
    ColumnType.TEXT: Text,
    ColumnType.BOOLEAN: Boolean,
    ColumnType.DATE: LenientDate,
    ColumnType.DATETIME: LenientDateTime,
    ColumnType.JSON: JSON,
}


@dataclass(frozen=True)
class MaterializeResult:
    table_name: str
    created: bool
    rows_inserted: int
    chunks: int
    duration_seconds: float = 0.0


def sql_column(spec: ColumnSpec) -> Column:
    """Translate one ColumnSpec into a SQLAlchemy Column, 1:1."""
    if spec.autoincrement:
        return Column(spec.name, Integer, primary_key=True, autoincrement=True)
    return Column(
        spec.name,
        _SQL_TYPES[spec.type](),
        primary_key=spec.primary_key,
        nullable=spec.nullable,
    )


def build_table(table_name: str, columns: Sequence[ColumnSpec], metadata: Optional[MetaData] = None) -> Table:
    """Build (but do not create) the table for an inferred schema."""
    metadata = metadata if metadata is not None else MetaData()
    autoincrement = any(spec.autoincrement for spec in columns)
    return Table(
        table_name,
        metadata,
        *(sql_column(spec) for spec in columns),
        sqlite_autoincrement=autoincrement,
    )


def chunked(rows: Sequence[Row], size: int) -> Iterator[List[Row]]:
    """Yield consecutive slices of `size` rows, preserving order."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(rows), size):
        yield list(rows[start : start + size])


def _lenient_reflected_types(inspector, table, column_info) -> None:
    if isinstance(column_info["type"], DateTime):
        column_info["type"] = LenientDateTime()
    elif isinstance(column_info["type"], Date):
        column_info["type"] = LenientDate()


def reflect_table(table_name: str, engine: Engine) -> Table:
    """Load an existing table, with date/time columns read leniently."""
    metadata = MetaData()
    event.listen(metadata, "column_reflect", _lenient_reflected_types)
    return Table(table_name, metadata, autoload_with=engine)


def _normalize_chunk(table: Table, chunk: List[Row]) -> List[Row]:
    """
    Give every row in the chunk the same keys (union, first-seen order).

    Keys that are not columns of `table` are dropped with a warning.
    """
    keys: Dict[str, None] = {}
    for row in chunk:
        keys.update(dict.fromkeys(row))
    unknown = [key for key in keys if key not in table.c]
    if unknown:
        log.warning("Ignoring keys without a column", extra={"table": table.name, "keys": unknown})
        for key in unknown:
            del keys[key]
    return [{key: row.get(key) for key in keys} for row in chunk]


class TableMaterializer:
    """
    Creates one table and fills it from a row sequence.

    Parameters
    ----------
    engine : Engine
        The entity's provisioned connection.
    chunk_size : int
        Rows per INSERT statement; bounded to respect the engine's
        parameter-count limit.
    """

    def __init__(self, engine: Engine, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk size must be positive, got {chunk_size}")
        self.engine = engine
        self.chunk_size = chunk_size

    def create_table(self, table: Table) -> None:
        """
        Issue the CREATE TABLE.

        Raises
        ------
        SchemaConflictError
            If creation failed because the table already exists.
        """
        try:
            with self.engine.begin() as conn:
                table.create(conn, checkfirst=False)
        except (OperationalError, ProgrammingError) as exc:
            # Decide by asking the engine, not by parsing the error message.
            if inspect(self.engine).has_table(table.name):
                raise SchemaConflictError(table.name) from exc
            raise

    def insert_rows(self, table: Table, rows: Sequence[Row]) -> tuple[int, int]:
        """
        Insert rows chunk by chunk inside a single transaction.

        Returns
        -------
        tuple[int, int]
            (rows inserted, chunks executed)
        """
        inserted = 0
        chunks = 0
        with self.engine.begin() as conn:
            for chunk in chunked(rows, self.chunk_size):
                conn.execute(table.insert().values(_normalize_chunk(table, chunk)))
                inserted += len(chunk)
                chunks += 1
        return inserted, chunks

    def materialize(
        self,
        table_name: str,
        columns: Sequence[ColumnSpec],
        rows: Optional[Sequence[Row]] = None,
        after_migrate: Optional[Callable[[Table], None]] = None,
    ) -> MaterializeResult:
        """
        Create `table_name` with `columns` and insert `rows`.

        `after_migrate` receives the table definition before it is created so
        callers can append columns or indexes.
        """
        table = build_table(table_name, columns)
        if after_migrate is not None:
            after_migrate(table)

        with profile_block(f"materialize:{table_name}") as stats:
            try:
                self.create_table(table)
            except SchemaConflictError as conflict:
                log.warning(
                    "Table created concurrently; skipping materialization",
                    extra={"table": conflict.table_name},
                )
                return MaterializeResult(table_name=table_name, created=False, rows_inserted=0, chunks=0)

            inserted, chunks = (0, 0)
            if rows:
                try:
                    inserted, chunks = self.insert_rows(table, rows)
                except DBAPIError:
                    log.error(
                        "Bulk insert failed; transaction rolled back",
                        extra={"table": table_name, "rows": len(rows)},
                    )
                    raise

        log.info(
            "Materialized table",
            extra={
                "table": table_name,
                "rows": inserted,
                "chunks": chunks,
                "duration_seconds": round(stats.duration_seconds, 4),
            },
        )
        return MaterializeResult(
            table_name=table_name,
            created=True,
            rows_inserted=inserted,
            chunks=chunks,
            duration_seconds=stats.duration_seconds,
        )


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "LenientDate",
    "LenientDateTime",
    "MaterializeResult",
    "TableMaterializer",
    "build_table",
    "chunked",
    "reflect_table",
    "sql_column",
]
