"""Pytest fixtures for the test suite."""

from pathlib import Path

import pyarrow as pa
import pytest

from universal_sql.core.config import Settings


@pytest.fixture
def mock_settings(tmp_path: Path) -> Settings:
    """Create settings isolated from the environment for testing."""
    return Settings(
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        DUCKDB_DATABASE=":memory:",
        DUCKDB_MEMORY_LIMIT="256MB",
        DUCKDB_THREADS=2,
        ENGINE_VARIANT="auto",
        MOTHERDUCK_TOKEN=None,
        REMOTE_ENABLED=True,
        REMOTE_CONNECT_TIMEOUT_SECONDS=5.0,
        REMOTE_READY_TIMEOUT_SECONDS=1.0,
        READINESS_TIMEOUT_SECONDS=2.0,
        STATIC_DIR=str(tmp_path),
        STATIC_PREFIX="/static",
        ASSET_BASE_URL=None,
    )


@pytest.fixture
def sample_table() -> pa.Table:
    """Arrow table as the remote engine would return it."""
    return pa.table(
        {
            "id": pa.array([1, 2], type=pa.int32()),
            "big": pa.array([9007199254740993, None], type=pa.int64()),
            "label": pa.array(["a", "b"], type=pa.string()),
            "flag": pa.array([True, False], type=pa.bool_()),
        }
    )
