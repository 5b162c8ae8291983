"""SQLite engine placeholder. Plan capture is not implemented yet."""

from typing import List

from ...core.errors import UnsupportedOperationError
from ...models.plan import ExecutionPlan
from ..engine import DatabaseEngine, DatabaseFeature, DatabaseInfo, EngineType, QueryCategory, SampleQuery


class SQLiteEngine(DatabaseEngine):

    @property
    def engine_type(self) -> EngineType:
        return EngineType.SQLITE

    async def test_connection(self) -> bool:
        raise UnsupportedOperationError("SQLite support is not yet implemented")

    async def explain_query(self, query: str) -> ExecutionPlan:
        raise UnsupportedOperationError("SQLite EXPLAIN support is not yet implemented")

    async def validate_query(self, query: str) -> None:
        raise UnsupportedOperationError("SQLite query validation is not yet implemented")

    async def get_version_info(self) -> DatabaseInfo:
        raise UnsupportedOperationError("SQLite version info is not yet implemented")

    def get_sample_queries(self) -> List[SampleQuery]:
        return [
            SampleQuery(
                name="Simple Select",
                description="Basic SQLite table scan",
                query="SELECT * FROM customers WHERE country = 'USA';",
                category=QueryCategory.BASIC_SELECT,
            ),
            SampleQuery(
                name="Common Table Expression",
                description="SQLite CTE example",
                query=(
                    "WITH customer_totals AS (SELECT customer_id, SUM(total) as total_spent "
                    "FROM orders GROUP BY customer_id) SELECT c.name, ct.total_spent FROM customers c "
                    "JOIN customer_totals ct ON c.id = ct.customer_id WHERE ct.total_spent > 500;"
                ),
                category=QueryCategory.CTE,
            ),
        ]

    def supports_feature(self, feature: DatabaseFeature) -> bool:
        return False
