"""Custom exceptions for the Universal SQL layer."""

from typing import Any


class UniversalSQLError(Exception):
    """Base exception for all errors raised by this package."""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class InitializationError(UniversalSQLError):
    """Raised when an engine fails to start or open."""

    def __init__(
        self,
        message: str,
        engine: str = "local",
        original_error: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INITIALIZATION_ERROR",
            details={"engine": engine, "original_error": original_error},
        )
        self.engine = engine
        self.original_error = original_error


class ReadinessTimeoutError(UniversalSQLError, TimeoutError):
    """Raised when a readiness wait exceeds its bound."""

    def __init__(self, gate: str, timeout: float) -> None:
        super().__init__(
            message=f"Timed out after {timeout}s waiting for '{gate}' readiness",
            error_code="READINESS_TIMEOUT",
            details={"gate": gate, "timeout": timeout},
        )
        self.gate = gate
        self.timeout = timeout


class RegistrationError(UniversalSQLError):
    """Raised when schema, file or view registration fails."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        location: str | None = None,
        original_error: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="REGISTRATION_ERROR",
            details={
                "source": source,
                "location": location,
                "original_error": original_error,
            },
        )
        self.source = source
        self.location = location
        self.original_error = original_error


class QueryError(UniversalSQLError):
    """Raised when a query cannot be served."""

    def __init__(
        self,
        message: str,
        sql: str,
        original_error: str | None = None,
        engine: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="QUERY_ERROR",
            details={"sql": sql, "original_error": original_error, "engine": engine},
        )
        self.sql = sql
        self.original_error = original_error
        self.engine = engine


class RemoteQueryError(QueryError):
    """Remote attempt failed. Never surfaced; it triggers the local fallback."""

    def __init__(self, message: str, sql: str, original_error: str | None = None) -> None:
        super().__init__(message, sql=sql, original_error=original_error, engine="remote")


class LocalQueryError(QueryError):
    """Local attempt failed after the remote attempt was not usable."""

    def __init__(self, message: str, sql: str, original_error: str | None = None) -> None:
        super().__init__(message, sql=sql, original_error=original_error, engine="local")


class ConfigurationError(UniversalSQLError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={"config_key": config_key},
        )
        self.config_key = config_key
