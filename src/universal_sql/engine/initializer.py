"""Lazy, single-flight startup of the local and remote engines."""

from __future__ import annotations

import asyncio

from universal_sql.core.exceptions import InitializationError
from universal_sql.core.logging import get_logger
from universal_sql.engine.context import QueryContext
from universal_sql.engine.gate import GateState, ReadinessGate
from universal_sql.engine.local import LocalEngine
from universal_sql.engine.platform import get_platform_features, select_bundle
from universal_sql.engine.remote import RemoteSession

logger = get_logger(__name__)


class EngineInitializer:
    """Starts the engines exactly once per context.

    The local engine gates everything else: ``init_ready`` resolves as soon
    as it is open. The remote session is opened afterwards in the
    background and reports through its own ``remote_ready`` gate, so a
    remote failure never makes the local engine unusable.
    """

    def __init__(self, context: QueryContext) -> None:
        self.context = context

    async def ensure_initialized(self) -> None:
        """Start the engines, or wait for the startup already in flight.

        Raises:
            InitializationError: If the local engine fails to start.
            ReadinessTimeoutError: If an in-flight startup does not finish
                within READINESS_TIMEOUT_SECONDS.
        """
        ctx = self.context
        if ctx.local is not None:
            return

        if ctx.initializing:
            await ctx.init_ready.wait_with_timeout(ctx.settings.READINESS_TIMEOUT_SECONDS)
            return

        ctx.initializing = True
        if ctx.init_ready.state is GateState.REJECTED:
            ctx.init_ready = ReadinessGate("init")
        gate = ctx.init_ready

        try:
            features = get_platform_features()
            bundle = select_bundle(features, ctx.settings)
            logger.debug(
                "Selected engine bundle",
                variant=bundle.variant.value,
                threads=bundle.threads,
                offload=bundle.offload,
            )
            engine = LocalEngine(
                bundle,
                database=ctx.settings.DUCKDB_DATABASE,
                memory_limit=ctx.settings.DUCKDB_MEMORY_LIMIT,
                connect=ctx.local_connect,
            )
            await engine.open()
        except Exception as e:
            error = InitializationError(
                "Local engine failed to start",
                engine="local",
                original_error=str(e),
            )
            ctx.initializing = False
            gate.reject(error)
            logger.error("Engine initialization failed", error=str(e))
            raise error from e

        ctx.local = engine
        gate.resolve(engine)
        logger.info("Local engine ready", variant=bundle.variant.value)

        self._start_remote()

    async def local_engine(self) -> LocalEngine:
        """Start the engines if needed and return the open local engine.

        Raises:
            InitializationError: If the local engine is not open afterwards.
        """
        await self.ensure_initialized()
        engine = self.context.local
        if engine is None:
            raise InitializationError("Local engine is not open", engine="local")
        return engine

    def _remote_token(self) -> str | None:
        ctx = self.context
        if ctx.token:
            return ctx.token
        if ctx.settings.MOTHERDUCK_TOKEN is not None:
            return ctx.settings.MOTHERDUCK_TOKEN.get_secret_value() or None
        return None

    def _start_remote(self) -> None:
        ctx = self.context
        token = self._remote_token()
        if not ctx.settings.REMOTE_ENABLED or token is None:
            ctx.remote_ready.reject(
                InitializationError(
                    "Remote session not configured",
                    engine="remote",
                )
            )
            logger.info("Remote session disabled", remote_enabled=ctx.settings.REMOTE_ENABLED)
            return
        ctx.remote_task = asyncio.create_task(self._open_remote(token))

    async def _open_remote(self, token: str) -> None:
        ctx = self.context
        session = RemoteSession(
            token,
            database=ctx.settings.MOTHERDUCK_DATABASE,
            connect=ctx.remote_connect,
        )
        try:
            await asyncio.wait_for(
                session.open(),
                timeout=ctx.settings.REMOTE_CONNECT_TIMEOUT_SECONDS,
            )
        except Exception as e:
            error = InitializationError(
                "Remote session failed to start",
                engine="remote",
                original_error=str(e) or type(e).__name__,
            )
            error.__cause__ = e
            ctx.remote_ready.reject(error)
            logger.warning("Remote session unavailable", error=error.original_error)
            return

        ctx.remote = session
        ctx.remote_ready.resolve(session)
        logger.info("Remote session ready", dsn=session.dsn)
