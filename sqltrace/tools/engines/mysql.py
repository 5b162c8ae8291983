"""MySQL engine placeholder. Plan capture is not implemented yet."""

from typing import List

from ...core.errors import UnsupportedOperationError
from ...models.plan import ExecutionPlan
from ..engine import DatabaseEngine, DatabaseFeature, DatabaseInfo, EngineType, QueryCategory, SampleQuery


class MySQLEngine(DatabaseEngine):

    @property
    def engine_type(self) -> EngineType:
        return EngineType.MYSQL

    async def test_connection(self) -> bool:
        raise UnsupportedOperationError("MySQL support is not yet implemented")

    async def explain_query(self, query: str) -> ExecutionPlan:
        raise UnsupportedOperationError("MySQL EXPLAIN support is not yet implemented")

    async def validate_query(self, query: str) -> None:
        raise UnsupportedOperationError("MySQL query validation is not yet implemented")

    async def get_version_info(self) -> DatabaseInfo:
        raise UnsupportedOperationError("MySQL version info is not yet implemented")

    def get_sample_queries(self) -> List[SampleQuery]:
        return [
            SampleQuery(
                name="Simple Select",
                description="Basic MySQL table scan",
                query="SELECT * FROM customers WHERE country = 'USA';",
                category=QueryCategory.BASIC_SELECT,
            ),
            SampleQuery(
                name="Subquery with EXISTS",
                description="MySQL subquery optimization",
                query=(
                    "SELECT * FROM customers c WHERE EXISTS "
                    "(SELECT 1 FROM orders o WHERE o.customer_id = c.id AND o.total > 1000);"
                ),
                category=QueryCategory.SUBQUERY,
            ),
        ]

    def supports_feature(self, feature: DatabaseFeature) -> bool:
        return False
