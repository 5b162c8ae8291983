"""Plan sources and query validation."""

from .engine import (
    ConnectionConfig,
    DatabaseEngine,
    DatabaseFeature,
    DatabaseInfo,
    EngineFactory,
    EngineType,
    QueryCategory,
    SampleQuery,
)
from .validator import ensure_read_only, validate_query_syntax

__all__ = [
    'ConnectionConfig',
    'DatabaseEngine',
    'DatabaseFeature',
    'DatabaseInfo',
    'EngineFactory',
    'EngineType',
    'QueryCategory',
    'SampleQuery',
    'ensure_read_only',
    'validate_query_syntax',
]
