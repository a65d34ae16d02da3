"""Query routing: remote engine first, local engine as the source of truth.

The remote session is a best-effort accelerator. Whenever it is missing,
unauthenticated, slow to start or rejects the query, the same SQL runs
against the views registered on the local engine.
"""

from __future__ import annotations

import time

import pyarrow as pa

from universal_sql.core.exceptions import LocalQueryError, RemoteQueryError, UniversalSQLError
from universal_sql.core.logging import get_logger
from universal_sql.core.metrics import record_fallback, record_query
from universal_sql.core.telemetry import create_span
from universal_sql.engine.context import QueryContext
from universal_sql.engine.initializer import EngineInitializer
from universal_sql.engine.normalizer import ResultNormalizer
from universal_sql.engine.outcome import Err, Ok
from universal_sql.engine.remote import RemoteOutcome
from universal_sql.models.results import QueryResult

logger = get_logger(__name__)


class QueryRouter:
    """Public query entry point."""

    def __init__(
        self,
        context: QueryContext,
        initializer: EngineInitializer,
        normalizer: ResultNormalizer | None = None,
    ) -> None:
        self.context = context
        self.initializer = initializer
        self.normalizer = normalizer or ResultNormalizer()

    async def query(self, sql: str) -> QueryResult:
        """Run ``sql`` and return normalized rows.

        Waits for engine startup and for view registration first; a query
        issued before any registration blocks until one completes or the
        readiness bound expires.

        Raises:
            InitializationError: If the local engine cannot start.
            RegistrationError: If the last registration pass failed.
            ReadinessTimeoutError: If no registration completes in time.
            LocalQueryError: If the local fallback fails too.
        """
        ctx = self.context
        await self.initializer.ensure_initialized()
        await ctx.views_ready.wait_with_timeout(ctx.settings.READINESS_TIMEOUT_SECONDS)

        start_time = time.perf_counter()
        with create_span("universal_sql.query", {"sql.length": len(sql)}):
            outcome = await self.query_remote(sql)
            if isinstance(outcome, Ok):
                outcome = self._normalize_remote(sql, outcome.value)

            match outcome:
                case Ok(value=result):
                    self._record("remote", start_time, len(result))
                    return result
                case Err(error=error):
                    record_fallback(error.error_code)
                    logger.info(
                        "Remote query failed, falling back to local engine",
                        error=error.message,
                        original_error=error.original_error,
                    )

            try:
                table = await self.query_local(sql)
                result = self._normalize_local(sql, table)
            except LocalQueryError:
                record_query("local", False, (time.perf_counter() - start_time) * 1000)
                raise

            self._record("local", start_time, len(result))
            return result

    def _normalize_remote(
        self, sql: str, table: pa.Table
    ) -> Ok[QueryResult] | Err[RemoteQueryError]:
        try:
            return Ok(self.normalizer.normalize(table, engine="remote"))
        except Exception as e:
            return Err(
                RemoteQueryError(
                    "Remote result could not be normalized",
                    sql=sql,
                    original_error=str(e),
                )
            )

    def _normalize_local(self, sql: str, table: pa.Table) -> QueryResult:
        try:
            return self.normalizer.normalize(table, engine="local")
        except Exception as e:
            logger.error("Local result normalization failed", error=str(e))
            raise LocalQueryError(
                "Local result could not be normalized",
                sql=sql,
                original_error=str(e),
            ) from e

    async def query_remote(self, sql: str) -> RemoteOutcome:
        """Attempt ``sql`` on the remote session without raising."""
        ctx = self.context
        try:
            session = await ctx.remote_ready.wait_with_timeout(
                ctx.settings.REMOTE_READY_TIMEOUT_SECONDS
            )
        except UniversalSQLError as e:
            return Err(
                RemoteQueryError(
                    "Remote session not ready",
                    sql=sql,
                    original_error=e.message,
                )
            )
        return await session.evaluate(sql)

    async def query_local(self, sql: str) -> pa.Table:
        """Run ``sql`` on the local engine.

        Raises:
            LocalQueryError: If the local engine rejects the query.
        """
        engine = self.context.local
        if engine is None:
            raise LocalQueryError("Local engine is not open", sql=sql)
        try:
            return await engine.query(sql)
        except Exception as e:
            logger.error("Local query failed", error=str(e))
            raise LocalQueryError(
                "Query failed on both engines",
                sql=sql,
                original_error=str(e),
            ) from e

    def _record(self, engine: str, start_time: float, row_count: int) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        record_query(engine, True, duration_ms)
        logger.debug(
            "Query served",
            engine=engine,
            row_count=row_count,
            execution_time_ms=round(duration_ms, 2),
        )
