"""Dual-engine coordination layer.

This package provides:
- One-shot readiness gates
- Single-flight startup of the local DuckDB engine and the remote session
- Registration of Parquet files as schema-qualified views
- Remote-first query routing with local fallback
- Normalization of Arrow results into JSON-safe rows
"""

from universal_sql.engine.context import QueryContext
from universal_sql.engine.gate import GateState, ReadinessGate, wait_with_timeout
from universal_sql.engine.initializer import EngineInitializer
from universal_sql.engine.local import LocalEngine, VirtualFile
from universal_sql.engine.normalizer import ResultNormalizer, to_normalized_type
from universal_sql.engine.outcome import Err, Ok
from universal_sql.engine.platform import (
    EngineBundle,
    EngineOptions,
    EngineVariant,
    PlatformFeatures,
    get_platform_features,
    select_bundle,
)
from universal_sql.engine.registrar import (
    ViewDescriptor,
    ViewRegistrar,
    describe_view,
    normalize_path,
    table_stem,
)
from universal_sql.engine.remote import RemoteSession
from universal_sql.engine.router import QueryRouter

__all__ = [
    # Readiness
    "GateState",
    "ReadinessGate",
    "wait_with_timeout",
    # Engines
    "QueryContext",
    "EngineInitializer",
    "LocalEngine",
    "VirtualFile",
    "RemoteSession",
    "EngineBundle",
    "EngineOptions",
    "EngineVariant",
    "PlatformFeatures",
    "get_platform_features",
    "select_bundle",
    # Registration
    "ViewDescriptor",
    "ViewRegistrar",
    "describe_view",
    "normalize_path",
    "table_stem",
    # Querying
    "QueryRouter",
    "ResultNormalizer",
    "to_normalized_type",
    "Ok",
    "Err",
]
