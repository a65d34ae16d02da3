"""Local embedded engine backed by an in-process DuckDB database.

This module owns the DuckDB connection, the virtual file registry that
maps logical file names to Parquet locations, and the session coercions
applied to every Arrow result.
"""

from __future__ import annotations

import asyncio
import fnmatch
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import duckdb
import pyarrow as pa
import pyarrow.compute as pc

from universal_sql.engine.platform import EngineBundle, EngineOptions

logger = logging.getLogger(__name__)

R = TypeVar("R")

LocalConnectFactory = Callable[[str], duckdb.DuckDBPyConnection]


@dataclass
class VirtualFile:
    """Entry of the virtual file registry.

    Attributes:
        file_name: Logical name the file is registered under.
        location: Path or URL DuckDB reads the bytes from.
        views: Qualified names of views reading this file.
    """

    file_name: str
    location: str
    views: set[str] = field(default_factory=set)


def quote_identifier(name: str) -> str:
    """Quote a DuckDB identifier."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote a DuckDB string literal."""
    return "'" + value.replace("'", "''") + "'"


def _coerce_column(column: pa.ChunkedArray, options: EngineOptions) -> pa.ChunkedArray:
    data_type = column.type
    if options.cast_bigint_to_double and (
        pa.types.is_int64(data_type) or pa.types.is_uint64(data_type)
    ):
        return pc.cast(column, pa.float64(), safe=False)
    if options.cast_decimal_to_double and pa.types.is_decimal(data_type):
        return pc.cast(column, pa.float64(), safe=False)
    if options.cast_timestamp_to_date and pa.types.is_timestamp(data_type):
        return pc.cast(column, pa.date64(), safe=False)
    if options.cast_duration_to_time64 and pa.types.is_duration(data_type):
        # Arrow has no duration->time cast; both are 64-bit microsecond counts
        micros = pc.cast(column, pa.duration("us"), safe=False).combine_chunks()
        return pa.chunked_array([micros.view(pa.time64("us"))])
    return column


def apply_session_options(table: pa.Table, options: EngineOptions) -> pa.Table:
    """Coerce top-level columns of ``table`` per the session options."""
    columns = []
    fields = []
    for schema_field, column in zip(table.schema, table.columns, strict=True):
        coerced = _coerce_column(column, options)
        columns.append(coerced)
        fields.append(pa.field(schema_field.name, coerced.type, schema_field.nullable))
    return pa.Table.from_arrays(columns, schema=pa.schema(fields))


class LocalEngine:
    """Async wrapper around an in-process DuckDB database.

    With the ``eh`` bundle each call runs on a worker thread against its own
    cursor (DuckDB's per-thread connection to the same database); the
    ``mvp`` bundle runs calls inline.

    Attributes:
        bundle: Selected engine variant.
        database: DuckDB database path.
        memory_limit: DuckDB memory limit string (e.g., "1GB").
        search_path: Schemas applied as search_path to every statement.
    """

    def __init__(
        self,
        bundle: EngineBundle,
        database: str = ":memory:",
        memory_limit: str = "1GB",
        connect: LocalConnectFactory | None = None,
    ) -> None:
        self.bundle = bundle
        self.database = database
        self.memory_limit = memory_limit
        self.search_path: list[str] = []
        self._connect = connect or duckdb.connect
        self._connection: duckdb.DuckDBPyConnection | None = None
        self._files: dict[str, VirtualFile] = {}

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """The underlying DuckDB connection."""
        if self._connection is None:
            raise RuntimeError("Local engine is not open")
        return self._connection

    async def _run(self, fn: Callable[..., R], *args: Any) -> R:
        if self.bundle.offload:
            return await asyncio.to_thread(fn, *args)
        return fn(*args)

    def _open_sync(self) -> duckdb.DuckDBPyConnection:
        conn = self._connect(self.database)
        conn.execute(f"SET memory_limit = {quote_literal(self.memory_limit)};")
        conn.execute(f"SET threads = {self.bundle.threads};")
        return conn

    async def open(self) -> None:
        """Start the database and open the shared connection."""
        self._connection = await self._run(self._open_sync)
        logger.info(
            "Local engine opened",
            extra={
                "variant": self.bundle.variant.value,
                "database": self.database,
                "threads": self.bundle.threads,
            },
        )

    @staticmethod
    def _prepare(cursor: duckdb.DuckDBPyConnection, search_path: tuple[str, ...]) -> None:
        if search_path:
            cursor.execute(f"SET search_path = {quote_literal(','.join(search_path))};")

    @classmethod
    def _execute_sync(
        cls,
        cursor: duckdb.DuckDBPyConnection,
        search_path: tuple[str, ...],
        sql: str,
    ) -> None:
        with cursor:
            cls._prepare(cursor, search_path)
            cursor.execute(sql)

    @classmethod
    def _query_sync(
        cls,
        cursor: duckdb.DuckDBPyConnection,
        search_path: tuple[str, ...],
        sql: str,
        options: EngineOptions,
    ) -> pa.Table:
        with cursor:
            cls._prepare(cursor, search_path)
            table = cursor.execute(sql).to_arrow_reader().read_all()
        return apply_session_options(table, options)

    async def execute(self, sql: str) -> None:
        """Run a statement whose result is not needed (DDL, SET, ...)."""
        # Cursors are created on the loop thread, then used by one worker only
        await self._run(
            self._execute_sync, self.connection.cursor(), tuple(self.search_path), sql
        )

    async def query(self, sql: str) -> pa.Table:
        """Run a query and materialize its Arrow batches into a table."""
        return await self._run(
            self._query_sync,
            self.connection.cursor(),
            tuple(self.search_path),
            sql,
            self.bundle.options,
        )

    async def set_search_path(self, schemas: list[str]) -> None:
        """Resolve unqualified names against ``schemas`` from now on."""
        self.search_path = list(schemas)
        await self.execute(f"SET search_path = {quote_literal(','.join(self.search_path))};")

    # Virtual file registry

    def register_file_url(self, file_name: str, location: str) -> VirtualFile:
        """Register ``location`` under ``file_name``, replacing any previous entry."""
        previous = self._files.get(file_name)
        entry = VirtualFile(file_name=file_name, location=location)
        if previous is not None:
            entry.views = previous.views
        self._files[file_name] = entry
        logger.debug(
            "Registered virtual file",
            extra={"file_name": file_name, "location": location},
        )
        return entry

    def read_expression(self, file_name: str) -> str:
        """SQL table function call reading a registered file."""
        entry = self._files.get(file_name)
        if entry is None:
            raise FileNotFoundError(f"Virtual file not registered: {file_name}")
        return f"read_parquet({quote_literal(entry.location)})"

    def bind_view(self, file_name: str, view_name: str) -> None:
        """Record that ``view_name`` reads ``file_name``."""
        self._files[file_name].views.add(view_name)

    def glob_files(self, pattern: str) -> list[VirtualFile]:
        """List registered files whose name matches ``pattern``."""
        return [
            entry
            for name, entry in self._files.items()
            if fnmatch.fnmatchcase(name, pattern)
        ]

    async def drop_file(self, file_name: str) -> None:
        """Remove a registered file and the views reading it."""
        entry = self._files.pop(file_name, None)
        if entry is None:
            return
        for view_name in sorted(entry.views):
            await self.execute(f"DROP VIEW IF EXISTS {view_name};")
        logger.debug(
            "Dropped virtual file",
            extra={"file_name": file_name, "views": sorted(entry.views)},
        )

    def close(self) -> None:
        """Close the connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        self._files.clear()
        logger.debug("Local engine closed")
