"""Explicit per-process state shared by the engine components."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass, field

from universal_sql.core.config import Settings
from universal_sql.engine.gate import ReadinessGate
from universal_sql.engine.local import LocalConnectFactory, LocalEngine
from universal_sql.engine.remote import RemoteConnectFactory, RemoteSession


@dataclass
class QueryContext:
    """Handles, gates and locks for one logical SQL interface.

    Build one per process (or per test) and pass it to every component.

    Attributes:
        settings: Configuration.
        token: Credential for the remote session, overriding MOTHERDUCK_TOKEN.
        local_connect: Factory opening the local DuckDB database.
        remote_connect: Factory opening the remote session connection.
        local: Local engine handle once open.
        remote: Remote session handle once open.
        init_ready: Resolved when the local engine is usable.
        remote_ready: Resolved when the remote session is usable.
        views_ready: Resolved when registered views are queryable.
        initializing: Set while (or after) a startup attempt runs.
        registration_lock: Serializes registration passes.
        remote_task: Background task opening the remote session.
    """

    settings: Settings
    token: str | None = None
    local_connect: LocalConnectFactory | None = None
    remote_connect: RemoteConnectFactory | None = None
    local: LocalEngine | None = None
    remote: RemoteSession | None = None
    init_ready: ReadinessGate = field(default_factory=lambda: ReadinessGate("init"))
    remote_ready: ReadinessGate = field(default_factory=lambda: ReadinessGate("remote"))
    views_ready: ReadinessGate = field(default_factory=lambda: ReadinessGate("views"))
    initializing: bool = False
    registration_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    remote_task: asyncio.Task[None] | None = None

    async def close(self) -> None:
        """Cancel pending remote startup and close both handles.

        The context returns to its unstarted state, so the next use opens
        fresh engines and waits for a fresh registration.
        """
        if self.remote_task is not None and not self.remote_task.done():
            self.remote_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.remote_task
        self.remote_task = None
        if self.remote is not None:
            self.remote.close()
            self.remote = None
        if self.local is not None:
            self.local.close()
            self.local = None

        self.initializing = False
        self.init_ready = ReadinessGate("init")
        self.remote_ready = ReadinessGate("remote")
        self.views_ready = ReadinessGate("views")
