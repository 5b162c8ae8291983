"""PostgreSQL engine over an asyncpg connection pool."""

import asyncio
from typing import List, Optional

import asyncpg

from ...core.errors import DatabaseConnectionError, QueryExecutionError
from ...models.plan import ExecutionPlan, parse_execution_plan
from ...utils.dev_logger import get_dev_logger
from ..engine import (
    ConnectionConfig,
    DatabaseEngine,
    DatabaseFeature,
    DatabaseInfo,
    EngineType,
    QueryCategory,
    SampleQuery,
)
from ..validator import ensure_read_only


DEFAULT_MAX_CONNECTIONS = 5

SAMPLE_QUERIES = [
    SampleQuery(
        name="Simple Select",
        description="Basic table scan with filtering",
        query="SELECT * FROM customers WHERE country = 'USA';",
        category=QueryCategory.BASIC_SELECT,
    ),
    SampleQuery(
        name="Inner Join",
        description="Join two tables with performance considerations",
        query="SELECT c.name, o.total FROM customers c JOIN orders o ON c.id = o.customer_id WHERE o.total > 100;",
        category=QueryCategory.JOIN,
    ),
    SampleQuery(
        name="Complex Join",
        description="Multi-table join with aggregation",
        query=(
            "SELECT c.name, COUNT(o.id) as order_count, SUM(oi.quantity * p.price) as total_spent "
            "FROM customers c LEFT JOIN orders o ON c.id = o.customer_id "
            "LEFT JOIN order_items oi ON o.id = oi.order_id "
            "LEFT JOIN products p ON oi.product_id = p.id "
            "GROUP BY c.id, c.name HAVING SUM(oi.quantity * p.price) > 500 ORDER BY total_spent DESC;"
        ),
        category=QueryCategory.JOIN,
    ),
    SampleQuery(
        name="Aggregation Query",
        description="Grouping and aggregation with sorting",
        query=(
            "SELECT category, COUNT(*) as product_count, AVG(price) as avg_price "
            "FROM products GROUP BY category ORDER BY avg_price DESC;"
        ),
        category=QueryCategory.AGGREGATION,
    ),
    SampleQuery(
        name="Subquery Example",
        description="Correlated subquery performance analysis",
        query=(
            "SELECT * FROM products p WHERE p.price > "
            "(SELECT AVG(price) FROM products p2 WHERE p2.category = p.category);"
        ),
        category=QueryCategory.SUBQUERY,
    ),
    SampleQuery(
        name="Window Function",
        description="Window function with partitioning",
        query=(
            "SELECT name, price, category, ROW_NUMBER() OVER "
            "(PARTITION BY category ORDER BY price DESC) as price_rank FROM products;"
        ),
        category=QueryCategory.WINDOW,
    ),
    SampleQuery(
        name="Performance Test",
        description="Large table scan for performance testing",
        query="SELECT c.*, COUNT(o.id) FROM customers c LEFT JOIN orders o ON c.id = o.customer_id GROUP BY c.id;",
        category=QueryCategory.PERFORMANCE,
    ),
]


class PostgreSQLEngine(DatabaseEngine):
    """Captures plans with `EXPLAIN (ANALYZE, BUFFERS, FORMAT JSON)`."""

    def __init__(self, config: ConnectionConfig):
        super().__init__(config)
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = get_dev_logger()

    @property
    def engine_type(self) -> EngineType:
        return EngineType.POSTGRESQL

    async def connect(self) -> None:
        try:
            self.pool = await asyncpg.create_pool(
                dsn=self.config.connection_string,
                min_size=1,
                max_size=max(1, self.config.max_connections or DEFAULT_MAX_CONNECTIONS),
                command_timeout=self.config.timeout_seconds,
            )
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            self.logger.log_error("POSTGRESQL", str(e), "Failed to create connection pool")
            raise DatabaseConnectionError(f"Failed to connect to PostgreSQL: {e}") from e

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    async def test_connection(self) -> bool:
        try:
            await self._fetchval("SELECT 1")
        except QueryExecutionError as e:
            raise DatabaseConnectionError(f"Connection test failed: {e}") from e
        return True

    async def explain_query(self, query: str) -> ExecutionPlan:
        ensure_read_only(query)
        explain_sql = f"EXPLAIN (ANALYZE, BUFFERS, FORMAT JSON) {query}"

        try:
            raw = await self._fetchval(explain_sql)
        except QueryExecutionError as e:
            self.logger.log_explain(query, str(self.engine_type), error=str(e))
            raise

        self.logger.log_explain(query, str(self.engine_type), raw_output=raw)
        plan = parse_execution_plan(raw)
        self.logger.log_plan_summary(plan.node_count(), plan.root.node_type, plan.root.total_cost,
                                     plan.planning_time, plan.execution_time)
        return plan

    async def validate_query(self, query: str) -> None:
        try:
            await self._fetchval(f"EXPLAIN {query}")
        except QueryExecutionError as e:
            raise QueryExecutionError(f"Query validation failed: {e}") from e

    async def get_version_info(self) -> DatabaseInfo:
        try:
            version = await self._fetchval("SELECT version()")
        except QueryExecutionError as e:
            raise DatabaseConnectionError(f"Failed to get version: {e}") from e

        return DatabaseInfo(
            engine_type=EngineType.POSTGRESQL,
            version=str(version),
            connection_status="Connected",
            features_supported=list(DatabaseFeature),
        )

    def get_sample_queries(self) -> List[SampleQuery]:
        return list(SAMPLE_QUERIES)

    def supports_feature(self, feature: DatabaseFeature) -> bool:
        return True

    async def _fetchval(self, sql: str):
        """Run one statement on a pooled connection, mapping driver errors."""
        if self.pool is None:
            raise DatabaseConnectionError("Not connected to PostgreSQL")

        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchval(sql)
        except asyncio.TimeoutError as e:
            raise QueryExecutionError(
                f"Query execution timeout after {self.config.timeout_seconds} seconds"
            ) from e
        except asyncpg.PostgresError as e:
            raise QueryExecutionError(f"Database error: {e}") from e
        except (OSError, asyncpg.InterfaceError) as e:
            raise DatabaseConnectionError(f"Connection error: {e}") from e
