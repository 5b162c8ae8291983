"""Database engine interface shared by every plan source."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.errors import ConfigurationError
from ..models.plan import ExecutionPlan


class EngineType(Enum):
    """Database engines SQLTrace can talk to."""
    POSTGRESQL = "PostgreSQL"
    MYSQL = "MySQL"
    SQLITE = "SQLite"

    def __str__(self) -> str:
        return self.value


class DatabaseFeature(Enum):
    DETAILED_EXECUTION_PLAN = "DetailedExecutionPlan"
    ACTUAL_ROW_COUNTS = "ActualRowCounts"
    COST_ESTIMATION = "CostEstimation"
    INDEX_SUGGESTIONS = "IndexSuggestions"
    QUERY_OPTIMIZATION_HINTS = "QueryOptimizationHints"
    PARALLEL_EXECUTION = "ParallelExecution"
    PARTITIONED_TABLES = "PartitionedTables"


class QueryCategory(Enum):
    BASIC_SELECT = "BasicSelect"
    JOIN = "Join"
    AGGREGATION = "Aggregation"
    SUBQUERY = "Subquery"
    CTE = "CTE"
    WINDOW = "Window"
    PERFORMANCE = "Performance"


@dataclass
class SampleQuery:
    """Demonstration query shipped with an engine."""
    name: str
    description: str
    query: str
    category: QueryCategory

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "query": self.query,
            "category": self.category.value,
        }


@dataclass
class DatabaseInfo:
    engine_type: EngineType
    version: str
    connection_status: str
    features_supported: List[DatabaseFeature] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "engine_type": self.engine_type.value,
            "version": self.version,
            "connection_status": self.connection_status,
            "features_supported": [f.value for f in self.features_supported],
        }


@dataclass
class ConnectionConfig:
    """How to reach a database. `timeout_seconds` bounds every statement."""
    engine_type: EngineType
    connection_string: str
    max_connections: Optional[int] = None
    timeout_seconds: Optional[float] = None


class DatabaseEngine:
    """Base class for database engines.

    Subclasses produce ExecutionPlans from SQL text. All database round trips
    are coroutines; the descriptive methods are plain calls.
    """

    def __init__(self, config: ConnectionConfig):
        self.config = config

    @property
    def engine_type(self) -> EngineType:
        raise NotImplementedError("Subclass must implement engine_type")

    async def connect(self) -> None:
        """Open connections. Called once by EngineFactory.create_engine()."""

    async def test_connection(self) -> bool:
        raise NotImplementedError("Subclass must implement test_connection()")

    async def explain_query(self, query: str) -> ExecutionPlan:
        """Run the query under EXPLAIN ANALYZE and return the parsed plan."""
        raise NotImplementedError("Subclass must implement explain_query()")

    async def validate_query(self, query: str) -> None:
        """Ask the database to plan the query without executing it."""
        raise NotImplementedError("Subclass must implement validate_query()")

    async def get_version_info(self) -> DatabaseInfo:
        raise NotImplementedError("Subclass must implement get_version_info()")

    def get_sample_queries(self) -> List[SampleQuery]:
        return []

    def supports_feature(self, feature: DatabaseFeature) -> bool:
        return False

    async def close(self) -> None:
        """Release connections held by the engine."""


class EngineFactory:
    """Builds engines from connection settings."""

    @staticmethod
    def detect_engine_type(connection_string: str) -> EngineType:
        if connection_string.startswith(("postgres://", "postgresql://")):
            return EngineType.POSTGRESQL
        if connection_string.startswith("mysql://"):
            return EngineType.MYSQL
        if connection_string.startswith("sqlite://") or connection_string.endswith((".db", ".sqlite")):
            return EngineType.SQLITE
        raise ConfigurationError("Unable to detect database engine type from connection string")

    @staticmethod
    async def create_engine(config: ConnectionConfig) -> DatabaseEngine:
        """Create and connect the engine matching `config.engine_type`."""
        from .engines.mysql import MySQLEngine
        from .engines.postgresql import PostgreSQLEngine
        from .engines.sqlite import SQLiteEngine

        engines = {
            EngineType.POSTGRESQL: PostgreSQLEngine,
            EngineType.MYSQL: MySQLEngine,
            EngineType.SQLITE: SQLiteEngine,
        }
        engine = engines[config.engine_type](config)
        await engine.connect()
        return engine
