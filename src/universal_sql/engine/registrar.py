"""Registration of external Parquet files as schema-qualified views.

Each source becomes a schema and each file location under it becomes a
view named after the file stem::

    {"orders": ["static/data/orders/items.parquet"]}
        -> virtual file  orders_items.parquet
        -> view          "orders"."items"
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlsplit

from universal_sql.core.exceptions import RegistrationError
from universal_sql.core.logging import get_logger
from universal_sql.engine.context import QueryContext
from universal_sql.engine.gate import GateState, ReadinessGate
from universal_sql.engine.initializer import EngineInitializer
from universal_sql.engine.local import LocalEngine, quote_identifier

if TYPE_CHECKING:
    from universal_sql.core.config import Settings

logger = get_logger(__name__)

SourceMap = Mapping[str, Sequence[str]]

_PATH_SEPARATORS = re.compile(r"[\\/]")


@dataclass(frozen=True)
class ViewDescriptor:
    """Names derived from one file location.

    Attributes:
        schema_name: Source name; one schema per source.
        table_name: File stem without its extension.
        file_name: Virtual file name, unique per (source, table).
        location: Location as supplied by the caller.
        path: Normalized location.
    """

    schema_name: str
    table_name: str
    file_name: str
    location: str
    path: str

    @property
    def qualified_name(self) -> str:
        return f"{quote_identifier(self.schema_name)}.{quote_identifier(self.table_name)}"


def has_url_scheme(location: str) -> bool:
    """True for network locations such as http://, https:// or s3://."""
    # Single letters are Windows drive letters, not schemes
    return len(urlsplit(location).scheme) > 1


def table_stem(location: str) -> str:
    """Last path segment with exactly one trailing extension removed."""
    base = _PATH_SEPARATORS.split(location)[-1]
    stem, dot, _ = base.rpartition(".")
    return stem if dot else base


def normalize_path(location: str, static_prefix: str = "/static") -> str:
    """Normalize a file location.

    Network locations pass through. Anything else becomes root-absolute,
    and the public asset prefix is stripped because that directory is
    served at the root.
    """
    if has_url_scheme(location):
        return location
    path = location if location.startswith("/") else f"/{location}"
    if static_prefix and (path == static_prefix or path.startswith(f"{static_prefix}/")):
        path = path[len(static_prefix) :] or "/"
    return path


def describe_view(source: str, location: str, static_prefix: str = "/static") -> ViewDescriptor:
    """Derive the view names for one file location."""
    table = table_stem(location)
    if not table:
        raise ValueError(f"Cannot derive a table name from location: {location!r}")
    return ViewDescriptor(
        schema_name=source,
        table_name=table,
        file_name=f"{source}_{table}.parquet",
        location=location,
        path=normalize_path(location, static_prefix),
    )


def resolve_location(path: str, settings: Settings) -> str:
    """Turn a normalized path into something DuckDB can read."""
    if has_url_scheme(path):
        return path
    if settings.ASSET_BASE_URL:
        return urljoin(settings.ASSET_BASE_URL.rstrip("/") + "/", path.lstrip("/"))
    return str(Path(settings.STATIC_DIR) / path.lstrip("/"))


class ViewRegistrar:
    """Maps source files into views on the local engine."""

    def __init__(self, context: QueryContext, initializer: EngineInitializer) -> None:
        self.context = context
        self.initializer = initializer

    async def _engine(self) -> LocalEngine:
        return await self.initializer.local_engine()

    async def clear_virtual_files(self, pattern: str) -> int:
        """Remove every virtual file whose name matches ``pattern``.

        Views reading a removed file are dropped with it.

        Returns:
            Number of files removed.
        """
        engine = await self._engine()
        files = engine.glob_files(pattern)
        for entry in files:
            await engine.drop_file(entry.file_name)
        return len(files)

    async def register_sources(self, sources: SourceMap, append: bool = False) -> None:
        """Register every file of every source as a view.

        Without ``append`` all previously registered files are discarded
        first, including those of sources absent from ``sources``.
        Registration passes never interleave. A failure leaves whatever was
        already registered in place.

        Args:
            sources: Source name -> ordered file locations.
            append: Keep earlier registrations.

        Raises:
            RegistrationError: If a schema, file or view cannot be created.
        """
        engine = await self._engine()
        ctx = self.context

        async with ctx.registration_lock:
            if ctx.views_ready.state is GateState.REJECTED:
                ctx.views_ready = ReadinessGate("views")
            gate = ctx.views_ready

            if ctx.settings.DEBUG:
                logger.debug(
                    "Updating Parquet URLs",
                    sources=list(sources),
                    append=append,
                )

            source: str | None = None
            location: str | None = None
            try:
                if not append:
                    await self.clear_virtual_files("*")

                for source, locations in sources.items():
                    await engine.execute(
                        f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(source)};"
                    )
                    for location in locations:
                        await self._register_file(engine, source, location, append)
            except Exception as e:
                error = RegistrationError(
                    "View registration failed",
                    source=source,
                    location=location,
                    original_error=str(e),
                )
                gate.reject(error)
                logger.error(
                    "View registration failed",
                    source=source,
                    location=location,
                    error=str(e),
                )
                raise error from e

            gate.resolve()
            logger.info(
                "Views registered",
                sources=len(sources),
                files=sum(len(locations) for locations in sources.values()),
            )

    async def _register_file(
        self, engine: LocalEngine, source: str, location: str, append: bool
    ) -> None:
        descriptor = describe_view(source, location, self.context.settings.STATIC_PREFIX)

        if append:
            await self.clear_virtual_files(descriptor.file_name)
            await self.clear_virtual_files(location)

        engine.register_file_url(
            descriptor.file_name,
            resolve_location(descriptor.path, self.context.settings),
        )
        await engine.execute(
            f"CREATE OR REPLACE VIEW {descriptor.qualified_name} AS "
            f"SELECT * FROM {engine.read_expression(descriptor.file_name)};"
        )
        engine.bind_view(descriptor.file_name, descriptor.qualified_name)

        if self.context.settings.DEBUG:
            logger.debug(
                "Registered view",
                view=descriptor.qualified_name,
                file_name=descriptor.file_name,
                path=descriptor.path,
            )
