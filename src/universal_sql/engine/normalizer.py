"""Conversion of Arrow results into JSON-safe rows with column types."""

from __future__ import annotations

import json
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from universal_sql.models.results import ColumnType, NormalizedType, QueryResult, TypeFidelity


def to_normalized_type(data_type: pa.DataType) -> NormalizedType:
    """Map an Arrow type to its engine-independent type."""
    if pa.types.is_dictionary(data_type):
        return to_normalized_type(data_type.value_type)
    if pa.types.is_boolean(data_type):
        return NormalizedType.BOOLEAN
    if (
        pa.types.is_integer(data_type)
        or pa.types.is_floating(data_type)
        or pa.types.is_decimal(data_type)
    ):
        return NormalizedType.NUMBER
    if (
        pa.types.is_date(data_type)
        or pa.types.is_timestamp(data_type)
        or pa.types.is_time(data_type)
    ):
        return NormalizedType.DATE
    return NormalizedType.STRING


def _is_wide_integer(data_type: pa.DataType) -> bool:
    return pa.types.is_int64(data_type) or pa.types.is_uint64(data_type)


def _sanitize_value(value: Any) -> Any:
    """Convert a Python value from Arrow into a JSON-serializable one.

    Handles NaN/infinity, temporal types, Decimal, bytes and nesting.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    if isinstance(value, timedelta):
        return value.total_seconds()

    if isinstance(value, Decimal):
        return float(value)

    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()

    if isinstance(value, dict):
        return {str(key): _sanitize_value(item) for key, item in value.items()}

    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]

    return str(value)


def _column_values(column: pa.ChunkedArray) -> list[Any]:
    """Python values of one column.

    Temporal values outside Python's datetime range (DuckDB's 'infinity'
    dates and timestamps) keep Arrow's text rendering instead.
    """
    if _is_wide_integer(column.type):
        return [None if value is None else str(value) for value in column.to_pylist()]
    try:
        values = column.to_pylist()
    except (OverflowError, ValueError):
        if not pa.types.is_temporal(column.type):
            raise
        return pc.cast(column, pa.string()).to_pylist()
    return [_sanitize_value(value) for value in values]


class ResultNormalizer:
    """Turns engine-native tables into QueryResult objects."""

    def column_types(self, schema: pa.Schema) -> list[ColumnType]:
        return [
            ColumnType(
                name=schema_field.name,
                normalized_type=to_normalized_type(schema_field.type),
                fidelity=TypeFidelity.PRECISE,
            )
            for schema_field in schema
        ]

    def normalize(self, table: pa.Table, engine: str | None = None) -> QueryResult:
        """Convert ``table`` into rows plus column descriptors.

        Values of 64-bit integer columns are stringified before
        serialization so no precision is lost on the JSON round trip.

        Args:
            table: Materialized Arrow table.
            engine: Engine that produced the table.

        Returns:
            QueryResult whose items survive ``json.dumps`` unchanged.
        """
        names = table.column_names
        columns = [_column_values(column) for column in table.columns]
        rows = [dict(zip(names, values, strict=True)) for values in zip(*columns)]

        payload = json.dumps(rows, allow_nan=False)
        return QueryResult(
            json.loads(payload),
            column_types=self.column_types(table.schema),
            engine=engine,
        )
