"""Remote managed engine: a MotherDuck session opened through DuckDB.

Query attempts never raise. They return ``Ok(table)`` or
``Err(RemoteQueryError)`` so the router can fall back explicitly.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import duckdb
import pyarrow as pa

from universal_sql.core.exceptions import RemoteQueryError
from universal_sql.engine.outcome import Err, Ok

logger = logging.getLogger(__name__)

RemoteConnectFactory = Callable[..., duckdb.DuckDBPyConnection]

RemoteOutcome = Ok[pa.Table] | Err[RemoteQueryError]


def _default_connect(database: str, config: dict[str, Any]) -> duckdb.DuckDBPyConnection:
    return duckdb.connect(database, config=config)


class RemoteSession:
    """Authenticated session against the remote engine.

    Attributes:
        database: MotherDuck database name ('' for the default database).
    """

    def __init__(
        self,
        token: str,
        database: str = "",
        connect: RemoteConnectFactory | None = None,
    ) -> None:
        self.database = database
        self._token = token
        self._connect = connect or _default_connect
        self._connection: duckdb.DuckDBPyConnection | None = None

    @property
    def dsn(self) -> str:
        return f"md:{self.database}"

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    def _open_sync(self) -> duckdb.DuckDBPyConnection:
        conn = self._connect(self.dsn, config={"motherduck_token": self._token})
        # Round trip so authentication errors surface here, not on the first query
        conn.execute("SELECT 1").fetchall()
        return conn

    async def open(self) -> None:
        """Connect and wait until the session answers."""
        self._connection = await asyncio.to_thread(self._open_sync)
        logger.info("Remote session opened", extra={"dsn": self.dsn})

    @staticmethod
    def _query_sync(cursor: duckdb.DuckDBPyConnection, sql: str) -> pa.Table:
        with cursor:
            return cursor.execute(sql).to_arrow_reader().read_all()

    async def evaluate(self, sql: str) -> RemoteOutcome:
        """Run ``sql`` remotely and materialize the streamed batches."""
        if self._connection is None:
            return Err(RemoteQueryError("Remote session is not open", sql=sql))
        try:
            table = await asyncio.to_thread(self._query_sync, self._connection.cursor(), sql)
        except Exception as e:
            return Err(
                RemoteQueryError("Remote query failed", sql=sql, original_error=str(e))
            )
        return Ok(table)

    def close(self) -> None:
        """Close the session."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        logger.debug("Remote session closed")
