"""Core utilities: configuration, logging, telemetry, exceptions."""

from universal_sql.core.config import Settings, get_settings
from universal_sql.core.exceptions import (
    ConfigurationError,
    InitializationError,
    LocalQueryError,
    QueryError,
    ReadinessTimeoutError,
    RegistrationError,
    RemoteQueryError,
    UniversalSQLError,
)

__all__ = [
    "Settings",
    "get_settings",
    "UniversalSQLError",
    "InitializationError",
    "ReadinessTimeoutError",
    "RegistrationError",
    "QueryError",
    "RemoteQueryError",
    "LocalQueryError",
    "ConfigurationError",
]
