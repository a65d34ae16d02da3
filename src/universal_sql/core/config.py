"""Application configuration using Pydantic Settings with multi-file support."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration loaded from environment variables.

    Pydantic-settings natively loads from multiple .env files in priority order.
    Later files override earlier ones. Secrets use SecretStr for security.

    Priority (lowest to highest):
    1. .env (base defaults)
    2. env-files/dev.env (development overrides)
    3. env-files/secrets/secrets.env (secrets, never committed)
    4. OS environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "env-files/dev.env", "env-files/secrets/secrets.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Universal SQL"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Local engine (DuckDB)
    DUCKDB_DATABASE: str = Field(
        default=":memory:",
        description="DuckDB database path for the local engine",
    )
    DUCKDB_MEMORY_LIMIT: str = "1GB"
    DUCKDB_THREADS: int = Field(default=4, ge=1, le=64)
    ENGINE_VARIANT: Literal["auto", "eh", "mvp"] = Field(
        default="auto",
        description="Engine build variant; 'auto' selects from the platform probe",
    )

    # Remote engine (MotherDuck)
    MOTHERDUCK_TOKEN: SecretStr | None = None
    MOTHERDUCK_DATABASE: str = Field(
        default="",
        description="MotherDuck database to attach (empty for the default database)",
    )
    REMOTE_ENABLED: bool = Field(default=True, description="Attempt a remote session")
    REMOTE_CONNECT_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    REMOTE_READY_TIMEOUT_SECONDS: float = Field(
        default=1.0,
        gt=0,
        description="How long a query waits for the remote session before falling back",
    )

    # Readiness
    READINESS_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Bound on waits for engine initialization and view registration",
    )

    # Data sources
    STATIC_DIR: str = Field(
        default="static",
        description="Local directory served at the root for relative file locations",
    )
    STATIC_PREFIX: str = Field(
        default="/static",
        description="Public asset prefix stripped from file locations",
    )
    ASSET_BASE_URL: str | None = Field(
        default=None,
        description="Base URL for root-absolute file locations (overrides STATIC_DIR)",
    )

    @field_validator("STATIC_PREFIX")
    @classmethod
    def normalize_static_prefix(cls, v: str) -> str:
        """Ensure the static prefix is root-absolute without a trailing slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    @property
    def remote_configured(self) -> bool:
        """Check if a remote session can be attempted."""
        return self.REMOTE_ENABLED and self.MOTHERDUCK_TOKEN is not None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
