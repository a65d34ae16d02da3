"""Normalized query result models.

A QueryResult is a plain list of row dicts, so it serializes exactly like
the rows it holds. Column type descriptors ride along as attributes, where
``json.dumps`` never sees them.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class NormalizedType(StrEnum):
    """Engine-independent column type."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    DATE = "date"


class TypeFidelity(StrEnum):
    """Whether a column type was declared by the engine or inferred."""

    PRECISE = "precise"
    INFERRED = "inferred"


class ColumnType(BaseModel):
    """Type descriptor for one result column.

    Attributes:
        name: Column name as reported by the engine.
        normalized_type: Engine-independent type.
        fidelity: Always 'precise' for engine-reported types.
    """

    name: str = Field(..., description="Column name")
    normalized_type: NormalizedType = Field(..., description="Normalized column type")
    fidelity: TypeFidelity = Field(
        default=TypeFidelity.PRECISE,
        description="Type fidelity",
    )

    model_config = {"frozen": True}


class QueryResult(list[dict[str, Any]]):
    """Ordered JSON-safe rows with out-of-band column type metadata.

    Attributes:
        column_types: One descriptor per result column, in column order.
        engine: Engine that produced the rows ('remote' or 'local').
    """

    def __init__(
        self,
        rows: Iterable[dict[str, Any]] = (),
        column_types: Iterable[ColumnType] = (),
        engine: str | None = None,
    ) -> None:
        super().__init__(rows)
        self.column_types: list[ColumnType] = list(column_types)
        self.engine = engine

    @property
    def columns(self) -> list[str]:
        """Column names in result order."""
        return [column.name for column in self.column_types]

    def column_type(self, name: str) -> ColumnType | None:
        """Look up the descriptor for a column by name."""
        for column in self.column_types:
            if column.name == name:
                return column
        return None

    def __repr__(self) -> str:
        return (
            f"QueryResult(rows={len(self)}, columns={self.columns!r}, "
            f"engine={self.engine!r})"
        )
