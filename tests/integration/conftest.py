"""Integration test fixtures.

The remote engine is stood in for by a second in-memory DuckDB database
returned from the remote connect factory.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import duckdb
import pytest
import pytest_asyncio

from tests.fixtures.data.sample_data import generate_sample_files
from tests.fixtures.engines import failing_remote_connect, seeded_remote_connect
from universal_sql.client import UniversalSQL
from universal_sql.core.config import Settings


@pytest.fixture
def sample_files(tmp_path: Path) -> dict[str, str]:
    """Parquet files under the static directory of ``mock_settings``."""
    return generate_sample_files(tmp_path)


@pytest.fixture
def remote_calls() -> list[dict[str, Any]]:
    return []


@pytest.fixture
def fake_remote_connect(
    remote_calls: list[dict[str, Any]],
) -> Callable[..., duckdb.DuckDBPyConnection]:
    """Remote factory recording its arguments."""

    def connect(database: str, config: dict[str, Any]) -> duckdb.DuckDBPyConnection:
        remote_calls.append({"database": database, "config": config})
        return seeded_remote_connect(database, config)

    return connect


@pytest_asyncio.fixture
async def client(mock_settings: Settings) -> AsyncIterator[UniversalSQL]:
    """Client with no remote credential: every query runs locally."""
    sql = UniversalSQL(settings=mock_settings)
    yield sql
    await sql.close()


@pytest_asyncio.fixture
async def remote_client(
    mock_settings: Settings,
    fake_remote_connect: Callable[..., duckdb.DuckDBPyConnection],
) -> AsyncIterator[UniversalSQL]:
    """Client whose remote session opens successfully."""
    sql = UniversalSQL(
        settings=mock_settings,
        token="test-token",
        remote_connect=fake_remote_connect,
    )
    yield sql
    await sql.close()


@pytest_asyncio.fixture
async def broken_remote_client(mock_settings: Settings) -> AsyncIterator[UniversalSQL]:
    """Client whose remote session always fails to open."""
    sql = UniversalSQL(
        settings=mock_settings,
        token="test-token",
        remote_connect=failing_remote_connect,
    )
    yield sql
    await sql.close()
