"""
Index-addressed projection of an execution plan for interactive display.

The tree is an arena: `PlanTree.nodes` owns every entry and entries refer to
their children by index only. There are no parent pointers; use
`find_parent()` or `parent_map()` when a parent is needed.
"""

import json
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.plan import ExecutionPlan, PlanNode


@dataclass
class ExpansionPolicy:
    """Which nodes start expanded when a tree is built."""
    expand_all: bool = False
    expand_levels: int = 2

    def is_expanded(self, level: int) -> bool:
        return self.expand_all or level < self.expand_levels


@dataclass
class PlanNodeUI:
    """One entry of the flattened tree."""
    plan_node: PlanNode
    expanded: bool = True
    children: List[int] = field(default_factory=list)
    level: int = 0

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def to_dict(self) -> Dict[str, Any]:
        node = self.plan_node
        return {
            "node_type": node.node_type,
            "relation_name": node.relation_name,
            "alias": node.alias,
            "startup_cost": node.startup_cost,
            "total_cost": node.total_cost,
            "actual_total_time": node.actual_total_time,
            "actual_rows": node.actual_rows,
            "actual_loops": node.actual_loops,
            "extra": dict(node.extra),
            "expanded": self.expanded,
            "children": list(self.children),
            "level": self.level,
        }


@dataclass
class PlanTree:
    """Flat tree of PlanNodeUI entries plus change-detection state."""
    nodes: List[PlanNodeUI] = field(default_factory=list)
    root_indices: List[int] = field(default_factory=list)
    last_plan_hash: Optional[int] = None
    policy: ExpansionPolicy = field(default_factory=ExpansionPolicy)

    def reset(self):
        self.nodes = []
        self.root_indices = []
        self.last_plan_hash = None

    def update(self, plan: ExecutionPlan) -> bool:
        """
        Rebuild the tree from `plan` unless it is unchanged since the last build.

        Returns True when the tree was rebuilt. Expansion state survives calls
        that are skipped.
        """
        digest = plan_hash(plan)
        if digest == self.last_plan_hash and self.nodes:
            return False

        self.nodes = []
        self.root_indices = []
        build_tree(plan.root, self, 0, None)
        self.last_plan_hash = digest
        return True

    def node_count(self) -> int:
        return len(self.nodes)

    def find_parent(self, index: int) -> Optional[int]:
        """Scan for the entry whose child list holds `index`."""
        if index in self.root_indices:
            return None
        for i, node in enumerate(self.nodes):
            if index in node.children:
                return i
        return None

    def parent_map(self) -> Dict[int, int]:
        """Reverse index child -> parent, for callers doing many lookups."""
        parents = {}
        for i, node in enumerate(self.nodes):
            for child in node.children:
                parents[child] = i
        return parents

    def expand_all(self):
        for node in self.nodes:
            node.expanded = True

    def collapse_all(self):
        for node in self.nodes:
            node.expanded = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "root_indices": list(self.root_indices),
            "last_plan_hash": self.last_plan_hash,
        }


def build_tree(node: PlanNode, tree: PlanTree, level: int, parent_index: Optional[int]) -> int:
    """
    Append `node` and its subtree to `tree` in pre-order and return its index.

    The index is the length of `tree.nodes` at append time. Children are
    built first and the child-index list is filled in afterwards. Nodes
    without a parent are recorded in `tree.root_indices`.
    """
    current_index = len(tree.nodes)
    tree.nodes.append(PlanNodeUI(
        plan_node=node,
        expanded=tree.policy.is_expanded(level),
        level=level,
    ))

    child_indices = [build_tree(child, tree, level + 1, current_index) for child in node.plans]
    tree.nodes[current_index].children = child_indices

    if parent_index is None:
        tree.root_indices.append(current_index)

    return current_index


def build_plan_tree(plan: ExecutionPlan, policy: Optional[ExpansionPolicy] = None) -> PlanTree:
    """Convenience wrapper: a fresh PlanTree built from `plan`."""
    tree = PlanTree(policy=policy or ExpansionPolicy())
    tree.update(plan)
    return tree


def plan_hash(plan: ExecutionPlan) -> int:
    """Non-cryptographic content hash of the serialized plan."""
    payload = json.dumps(plan.to_dict(), sort_keys=True, default=str)
    return zlib.crc32(payload.encode('utf-8'))
