"""Platform feature probe and engine bundle selection.

The local engine comes in two variants:

- ``eh``: engine calls are offloaded to worker threads and errors raised
  there propagate back to the awaiting task.
- ``mvp``: engine calls run inline on the event loop thread with a single
  DuckDB thread, for hosts without worker threads (e.g. Pyodide).
"""

from __future__ import annotations

import os
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from universal_sql.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from universal_sql.core.config import Settings

THREADLESS_PLATFORMS = frozenset({"emscripten", "wasi"})


class EngineVariant(StrEnum):
    """Build variant of the local engine."""

    EH = "eh"
    MVP = "mvp"


@dataclass(frozen=True)
class PlatformFeatures:
    """Capabilities of the hosting runtime.

    Attributes:
        threads: Whether worker threads can be started.
        worker_exceptions: Whether exceptions raised in a worker thread
            reach the caller that awaits the result.
        cpu_count: Logical CPUs available.
    """

    threads: bool
    worker_exceptions: bool
    cpu_count: int


@dataclass(frozen=True)
class EngineOptions:
    """Fixed session options of the local engine.

    Wide integers, decimals, timestamps and durations are coerced to
    simpler portable types on every local result.
    """

    cast_bigint_to_double: bool = True
    cast_timestamp_to_date: bool = True
    cast_decimal_to_double: bool = True
    cast_duration_to_time64: bool = True


@dataclass(frozen=True)
class EngineBundle:
    """Selected local engine variant and its execution parameters."""

    variant: EngineVariant
    offload: bool
    threads: int
    options: EngineOptions = EngineOptions()


class _ProbeError(Exception):
    pass


def _raise_probe() -> None:
    raise _ProbeError


def _probe_worker_exceptions() -> bool:
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="usql-probe") as pool:
        future = pool.submit(_raise_probe)
        try:
            future.result(timeout=5)
        except _ProbeError:
            return True
        except Exception:
            return False
    return False


def get_platform_features() -> PlatformFeatures:
    """Probe the hosting runtime."""
    threads = sys.platform not in THREADLESS_PLATFORMS
    return PlatformFeatures(
        threads=threads,
        worker_exceptions=threads and _probe_worker_exceptions(),
        cpu_count=os.cpu_count() or 1,
    )


def select_bundle(features: PlatformFeatures, settings: Settings) -> EngineBundle:
    """Pick the engine variant for this runtime.

    Args:
        features: Result of the platform probe.
        settings: ENGINE_VARIANT may force a variant; DUCKDB_THREADS caps
            the thread count of the ``eh`` variant.

    Raises:
        ConfigurationError: If ``eh`` is forced on a runtime without
            worker exception support.
    """
    requested = settings.ENGINE_VARIANT
    supports_eh = features.threads and features.worker_exceptions

    if requested == EngineVariant.EH and not supports_eh:
        raise ConfigurationError(
            "Engine variant 'eh' requires worker threads with exception propagation",
            config_key="ENGINE_VARIANT",
        )

    if requested == EngineVariant.MVP or (requested == "auto" and not supports_eh):
        return EngineBundle(variant=EngineVariant.MVP, offload=False, threads=1)

    return EngineBundle(
        variant=EngineVariant.EH,
        offload=True,
        threads=min(settings.DUCKDB_THREADS, features.cpu_count),
    )
