"""
Execution plan model.

Turns PostgreSQL `EXPLAIN (ANALYZE, BUFFERS, FORMAT JSON)` output into a typed,
immutable tree. Keys that are not promoted to attributes stay in `extra`
verbatim so advisor rules can look at fields such as "Filter".
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from ..core.errors import PlanParsingError, QueryExecutionError


# EXPLAIN keys promoted to first-class PlanNode attributes
PROMOTED_KEYS = (
    "Node Type",
    "Relation Name",
    "Alias",
    "Startup Cost",
    "Total Cost",
    "Actual Startup Time",
    "Actual Total Time",
    "Actual Rows",
    "Actual Loops",
    "Plans",
)


@dataclass(frozen=True)
class PlanNode:
    """A single operator in an execution plan."""
    node_type: str
    startup_cost: float
    total_cost: float
    relation_name: Optional[str] = None
    alias: Optional[str] = None
    actual_startup_time: Optional[float] = None
    actual_total_time: float = 0.0
    actual_rows: int = 0
    actual_loops: int = 1
    plans: Tuple['PlanNode', ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    @property
    def actual_duration_ms(self) -> float:
        """Time spent in this node across all loops, in milliseconds."""
        return self.actual_total_time * self.actual_loops

    def iter_preorder(self) -> Iterator['PlanNode']:
        """Yield this node and its descendants depth-first, parents first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.plans))

    def node_count(self) -> int:
        return sum(1 for _ in self.iter_preorder())

    def to_explain_dict(self) -> Dict[str, Any]:
        """Serialize back into the EXPLAIN JSON node shape."""
        data: Dict[str, Any] = {"Node Type": self.node_type}
        if self.relation_name is not None:
            data["Relation Name"] = self.relation_name
        if self.alias is not None:
            data["Alias"] = self.alias
        data["Startup Cost"] = self.startup_cost
        data["Total Cost"] = self.total_cost
        if self.actual_startup_time is not None:
            data["Actual Startup Time"] = self.actual_startup_time
        data["Actual Total Time"] = self.actual_total_time
        data["Actual Rows"] = self.actual_rows
        data["Actual Loops"] = self.actual_loops
        data.update(self.extra)
        if self.plans:
            data["Plans"] = [child.to_explain_dict() for child in self.plans]
        return data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_type": self.node_type,
            "relation_name": self.relation_name,
            "alias": self.alias,
            "startup_cost": self.startup_cost,
            "total_cost": self.total_cost,
            "actual_startup_time": self.actual_startup_time,
            "actual_total_time": self.actual_total_time,
            "actual_rows": self.actual_rows,
            "actual_loops": self.actual_loops,
            "plans": [child.to_dict() for child in self.plans],
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlanNode':
        """Rebuild a node from `to_dict()` output."""
        try:
            return cls(
                node_type=data["node_type"],
                relation_name=data.get("relation_name"),
                alias=data.get("alias"),
                startup_cost=float(data["startup_cost"]),
                total_cost=float(data["total_cost"]),
                actual_startup_time=data.get("actual_startup_time"),
                actual_total_time=float(data.get("actual_total_time", 0.0)),
                actual_rows=int(data.get("actual_rows", 0)),
                actual_loops=int(data.get("actual_loops", 1)),
                plans=tuple(cls.from_dict(child) for child in data.get("plans", [])),
                extra=dict(data.get("extra", {})),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PlanParsingError(f"Invalid serialized plan node: {e}") from e


@dataclass(frozen=True)
class ExecutionPlan:
    """A complete execution plan: root node plus planner/executor timings (ms)."""
    root: PlanNode
    planning_time: float = 0.0
    execution_time: float = 0.0

    def iter_nodes(self) -> Iterator[PlanNode]:
        return self.root.iter_preorder()

    def node_count(self) -> int:
        return self.root.node_count()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root.to_dict(),
            "planning_time": self.planning_time,
            "execution_time": self.execution_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExecutionPlan':
        if not isinstance(data, dict) or "root" not in data:
            raise PlanParsingError("Serialized plan has no 'root'")
        return cls(
            root=PlanNode.from_dict(data["root"]),
            planning_time=_coerce_float(data.get("planning_time", 0.0), "planning_time"),
            execution_time=_coerce_float(data.get("execution_time", 0.0), "execution_time"),
        )

    def to_explain_json(self) -> List[Dict[str, Any]]:
        """Re-emit the plan in the shape PostgreSQL returns from EXPLAIN FORMAT JSON."""
        return [{
            "Plan": self.root.to_explain_dict(),
            "Planning Time": self.planning_time,
            "Execution Time": self.execution_time,
        }]


def parse_execution_plan(raw: Union[str, bytes, list, dict]) -> ExecutionPlan:
    """
    Parse EXPLAIN output into an ExecutionPlan.

    Accepts the standard array form, a bare `{"Plan": ..., "Planning Time": ...}`
    object, or a JSON string holding either. An "error" entry is reported as a
    database-side QueryExecutionError rather than a parse failure.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise PlanParsingError(f"EXPLAIN output is not valid JSON: {e}") from e

    if isinstance(raw, list):
        if not raw:
            raise PlanParsingError("EXPLAIN output is an empty array")
        entry = raw[0]
    elif isinstance(raw, dict):
        entry = raw
    else:
        raise PlanParsingError(f"Unexpected EXPLAIN output format: {type(raw).__name__}")

    if not isinstance(entry, dict):
        raise PlanParsingError("Unexpected EXPLAIN output format: first element is not an object")

    if "error" in entry:
        raise QueryExecutionError(f"Database error: {entry['error']}")

    if "Plan" in entry:
        root = parse_plan_node(entry["Plan"])
    elif "Node Type" in entry:
        # some drivers hand back the plan node itself
        root = parse_plan_node(entry)
    else:
        raise PlanParsingError("No 'Plan' field in EXPLAIN output")

    planning_time = _coerce_float(entry.get("Planning Time", 0.0), "Planning Time")
    execution_time = _coerce_float(entry.get("Execution Time", 0.0), "Execution Time")
    if planning_time < 0 or execution_time < 0:
        raise PlanParsingError("Planning/Execution Time must not be negative")

    return ExecutionPlan(root=root, planning_time=planning_time, execution_time=execution_time)


def parse_plan_node(data: Any, path: str = "Plan") -> PlanNode:
    """Recursively parse one EXPLAIN node and its "Plans" children."""
    if not isinstance(data, dict):
        raise PlanParsingError(f"{path}: expected an object, got {type(data).__name__}")

    node_type = data.get("Node Type")
    if not isinstance(node_type, str) or not node_type:
        raise PlanParsingError(f"{path}: missing 'Node Type'")

    if "Startup Cost" not in data or "Total Cost" not in data:
        raise PlanParsingError(f"{path}: missing 'Startup Cost' or 'Total Cost'")
    startup_cost = _coerce_float(data["Startup Cost"], f"{path}.Startup Cost")
    total_cost = _coerce_float(data["Total Cost"], f"{path}.Total Cost")
    if startup_cost < 0:
        raise PlanParsingError(f"{path}: 'Startup Cost' must not be negative")
    if total_cost < startup_cost:
        raise PlanParsingError(f"{path}: 'Total Cost' ({total_cost}) is below 'Startup Cost' ({startup_cost})")

    actual_startup_time = None
    if data.get("Actual Startup Time") is not None:
        actual_startup_time = _coerce_float(data["Actual Startup Time"], f"{path}.Actual Startup Time")

    actual_rows = _coerce_count(data.get("Actual Rows", 0), f"{path}.Actual Rows")
    # never-executed nodes report zero loops
    actual_loops = max(1, _coerce_count(data.get("Actual Loops", 1), f"{path}.Actual Loops"))

    children = data.get("Plans", [])
    if not isinstance(children, list):
        raise PlanParsingError(f"{path}: 'Plans' must be an array")

    return PlanNode(
        node_type=node_type,
        relation_name=_optional_str(data.get("Relation Name")),
        alias=_optional_str(data.get("Alias")),
        startup_cost=startup_cost,
        total_cost=total_cost,
        actual_startup_time=actual_startup_time,
        actual_total_time=_coerce_float(data.get("Actual Total Time", 0.0), f"{path}.Actual Total Time"),
        actual_rows=actual_rows,
        actual_loops=actual_loops,
        plans=tuple(parse_plan_node(child, f"{path}.Plans[{i}]") for i, child in enumerate(children)),
        extra={k: v for k, v in data.items() if k not in PROMOTED_KEYS},
    )


def _coerce_float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PlanParsingError(f"{name}: expected a number, got {value!r}")
    return float(value)


def _coerce_count(value: Any, name: str) -> int:
    number = _coerce_float(value, name)
    if number < 0:
        raise PlanParsingError(f"{name}: expected a non-negative count, got {value!r}")
    # PostgreSQL 18 reports per-loop row averages with decimals
    return int(number)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)
