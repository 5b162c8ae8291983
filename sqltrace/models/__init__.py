"""Plan model package for SQLTrace."""

from .plan import ExecutionPlan, PlanNode, parse_execution_plan, parse_plan_node

__all__ = ['ExecutionPlan', 'PlanNode', 'parse_execution_plan', 'parse_plan_node']
