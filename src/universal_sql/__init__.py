"""Universal SQL: one query interface over a local DuckDB and a remote MotherDuck engine."""

from universal_sql.client import UniversalSQL, get_client
from universal_sql.core.config import Settings, get_settings
from universal_sql.core.exceptions import (
    InitializationError,
    LocalQueryError,
    QueryError,
    ReadinessTimeoutError,
    RegistrationError,
    UniversalSQLError,
)
from universal_sql.models.results import ColumnType, NormalizedType, QueryResult

__version__ = "0.1.0"

__all__ = [
    "UniversalSQL",
    "get_client",
    "Settings",
    "get_settings",
    "QueryResult",
    "ColumnType",
    "NormalizedType",
    "UniversalSQLError",
    "InitializationError",
    "ReadinessTimeoutError",
    "RegistrationError",
    "QueryError",
    "LocalQueryError",
]
