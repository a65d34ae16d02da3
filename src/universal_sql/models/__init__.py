"""Pydantic models and result types."""

from universal_sql.models.results import (
    ColumnType,
    NormalizedType,
    QueryResult,
    TypeFidelity,
)

__all__ = [
    "ColumnType",
    "NormalizedType",
    "QueryResult",
    "TypeFidelity",
]
