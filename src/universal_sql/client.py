"""Single logical SQL interface over the local and remote engines."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from universal_sql.core.config import Settings, get_settings
from universal_sql.engine.context import QueryContext
from universal_sql.engine.initializer import EngineInitializer
from universal_sql.engine.registrar import SourceMap, ViewRegistrar
from universal_sql.engine.router import QueryRouter

if TYPE_CHECKING:
    from universal_sql.engine.local import LocalConnectFactory
    from universal_sql.engine.remote import RemoteConnectFactory
    from universal_sql.models.results import QueryResult


class UniversalSQL:
    """Facade wiring the initializer, registrar and router to one context.

    Example:
        async with UniversalSQL(token=token) as sql:
            await sql.register_sources({"orders": ["static/data/orders/items.parquet"]})
            rows = await sql.query("SELECT * FROM orders.items")
    """

    def __init__(
        self,
        settings: Settings | None = None,
        token: str | None = None,
        local_connect: LocalConnectFactory | None = None,
        remote_connect: RemoteConnectFactory | None = None,
    ) -> None:
        """Initialize the client. Nothing is started until first use.

        Args:
            settings: Settings instance (uses cached settings if omitted).
            token: Remote session credential, overriding MOTHERDUCK_TOKEN.
            local_connect: Factory opening the local DuckDB database.
            remote_connect: Factory opening the remote connection.
        """
        self.context = QueryContext(
            settings=settings or get_settings(),
            token=token,
            local_connect=local_connect,
            remote_connect=remote_connect,
        )
        self.initializer = EngineInitializer(self.context)
        self.registrar = ViewRegistrar(self.context, self.initializer)
        self.router = QueryRouter(self.context, self.initializer)

    async def ensure_initialized(self) -> None:
        await self.initializer.ensure_initialized()

    async def register_sources(self, sources: SourceMap, append: bool = False) -> None:
        await self.registrar.register_sources(sources, append=append)

    async def clear_virtual_files(self, pattern: str) -> int:
        return await self.registrar.clear_virtual_files(pattern)

    async def update_search_path(self, schemas: list[str]) -> None:
        """Resolve unqualified table names against ``schemas`` on the local engine."""
        engine = await self.initializer.local_engine()
        await engine.set_search_path(schemas)

    async def query(self, sql: str) -> QueryResult:
        return await self.router.query(sql)

    async def close(self) -> None:
        await self.context.close()

    async def __aenter__(self) -> UniversalSQL:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


@lru_cache
def get_client() -> UniversalSQL:
    """Get the process-wide client built from cached settings."""
    return UniversalSQL(settings=get_settings())
