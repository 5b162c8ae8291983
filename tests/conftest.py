"""Pytest configuration and fixtures for sqltrace tests."""

import pytest
from typing import Any, Dict, List, Optional

from sqltrace.core.errors import QueryExecutionError
from sqltrace.models.plan import ExecutionPlan, parse_execution_plan
from sqltrace.tools.engine import ConnectionConfig, DatabaseEngine, DatabaseInfo, EngineType
from sqltrace.utils.dev_logger import init_dev_logger


@pytest.fixture(autouse=True)
def dev_logger(tmp_path):
    """Route the development log into the test's temp directory."""
    return init_dev_logger(str(tmp_path / "reports" / "sqltrace_test.log"))


# =============================================================================
# SAMPLE PLAN FIXTURES
# =============================================================================

def make_node(node_type: str, startup: float = 0.0, total: float = 10.0,
              rows: int = 100, loops: int = 1, children: Optional[List[Dict[str, Any]]] = None,
              **extra) -> Dict[str, Any]:
    """One EXPLAIN JSON node; `extra` keys are passed through verbatim."""
    node = {
        "Node Type": node_type,
        "Startup Cost": startup,
        "Total Cost": total,
        "Actual Startup Time": 0.01,
        "Actual Total Time": 0.5,
        "Actual Rows": rows,
        "Actual Loops": loops,
    }
    node.update(extra)
    if children:
        node["Plans"] = children
    return node


def make_explain(root: Dict[str, Any], planning: float = 0.1, execution: float = 1.0) -> List[Dict[str, Any]]:
    return [{"Plan": root, "Planning Time": planning, "Execution Time": execution}]


@pytest.fixture
def simple_scan_json() -> List[Dict[str, Any]]:
    """A cheap single-node sequential scan."""
    return make_explain(make_node("Seq Scan", total=35.5, rows=1000,
                                  **{"Relation Name": "customers", "Alias": "c"}))


@pytest.fixture
def join_plan_json() -> List[Dict[str, Any]]:
    """Hash Join over two scans; the outer scan carries a Filter."""
    outer = make_node(
        "Seq Scan", total=20.0, rows=500,
        **{"Relation Name": "orders", "Alias": "o", "Parent Relationship": "Outer",
           "Filter": "(total > '100'::numeric)"}
    )
    hash_node = make_node(
        "Hash", startup=12.0, total=12.0, rows=300,
        **{"Parent Relationship": "Inner"},
        children=[make_node("Seq Scan", total=12.0, rows=300,
                            **{"Relation Name": "customers", "Alias": "c",
                               "Parent Relationship": "Outer"})]
    )
    root = make_node("Hash Join", startup=12.5, total=45.0, rows=480,
                     children=[outer, hash_node], **{"Hash Cond": "(o.customer_id = c.id)"})
    return make_explain(root, planning=0.2, execution=2.5)


@pytest.fixture
def simple_scan_plan(simple_scan_json) -> ExecutionPlan:
    return parse_execution_plan(simple_scan_json)


@pytest.fixture
def join_plan(join_plan_json) -> ExecutionPlan:
    return parse_execution_plan(join_plan_json)


# =============================================================================
# FAKE ENGINE
# =============================================================================

class FakeEngine(DatabaseEngine):
    """In-memory plan source.

    `outcomes` is consumed one entry per explain_query() call and repeats
    its last entry once exhausted. An entry is either an ExecutionPlan to
    return or an exception to raise.
    """

    def __init__(self, outcomes: List[Any], connected: bool = True):
        super().__init__(ConnectionConfig(EngineType.POSTGRESQL, "postgresql://fake/db"))
        self.outcomes = list(outcomes)
        self.connected = connected
        self.calls: List[str] = []
        self.closed = False

    @property
    def engine_type(self) -> EngineType:
        return EngineType.POSTGRESQL

    async def test_connection(self) -> bool:
        if not self.connected:
            raise QueryExecutionError("connection refused")
        return True

    async def explain_query(self, query: str) -> ExecutionPlan:
        self.calls.append(query)
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def validate_query(self, query: str) -> None:
        return None

    async def get_version_info(self) -> DatabaseInfo:
        return DatabaseInfo(EngineType.POSTGRESQL, "PostgreSQL 16.0 (fake)", "Connected")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_engine_factory():
    """Build a FakeEngine from a list of outcomes."""
    return FakeEngine
