"""
Rule-based query advisor.

Walks an execution plan depth-first (parents before children) and applies a
set of independent heuristics to every node. Each rule only appends to the
suggestion list, so the order in which rules run does not matter.
"""

from typing import Dict, List, Optional

from ..models.plan import ExecutionPlan, PlanNode
from .models import (
    AdvisorAnalysis,
    AdvisorConfig,
    AnalysisSummary,
    OptimizationSuggestion,
    Severity,
)


MIN_SCORE = 10
SLOW_EXECUTION_MS = 1000.0


class QueryAdvisor:
    """Stateless apart from its configuration; safe to share between callers."""

    def __init__(self, config: Optional[AdvisorConfig] = None):
        self.config = config or AdvisorConfig()
        self.rules = [
            self._check_sequential_scan,
            self._check_expensive_operation,
            self._check_nested_loop,
            self._check_large_sort,
            self._check_filter_index,
            self._check_expensive_join,
        ]

    def analyze_plan(self, plan: ExecutionPlan) -> AdvisorAnalysis:
        """Analyze a plan and return suggestions, a score and a summary."""
        suggestions: List[OptimizationSuggestion] = []
        node_costs: Dict[str, float] = {}

        # node_index is this visit counter, not a PlanTree index
        visited = 0
        for node in plan.root.iter_preorder():
            node_costs[node.node_type] = node.total_cost
            for rule in self.rules:
                suggestion = rule(node, visited)
                if suggestion is not None:
                    suggestions.append(suggestion)
            visited += 1

        return AdvisorAnalysis(
            suggestions=suggestions,
            performance_score=self._calculate_performance_score(suggestions, plan),
            summary=self._generate_summary(suggestions, node_costs, plan),
            nodes_visited=visited,
        )

    def _check_sequential_scan(self, node: PlanNode, node_index: int) -> Optional[OptimizationSuggestion]:
        if node.node_type != "Seq Scan" or node.total_cost <= self.config.expensive_cost_threshold:
            return None
        return OptimizationSuggestion(
            suggestion_type="Index",
            severity=Severity.HIGH,
            title="Expensive Sequential Scan Detected",
            description=(
                f"Sequential scan on table '{node.relation_name or 'unknown'}' has high cost "
                f"({node.total_cost:.2f}). This indicates the entire table is being scanned."
            ),
            recommendation=(
                "Consider adding an index on frequently queried columns or adding WHERE clauses "
                "to reduce rows scanned."
            ),
            impact="High - Could significantly reduce query execution time",
            node_index=node_index,
        )

    def _check_expensive_operation(self, node: PlanNode, node_index: int) -> Optional[OptimizationSuggestion]:
        if node.total_cost <= self.config.expensive_cost_threshold * 2:
            return None
        return OptimizationSuggestion(
            suggestion_type="Performance",
            severity=Severity.MEDIUM,
            title=f"Expensive {node.node_type} Operation",
            description=(
                f"{node.node_type} operation has very high cost ({node.total_cost:.2f}). "
                "This is significantly above average."
            ),
            recommendation="Review query logic, consider query rewriting, or check if statistics are up to date.",
            impact="Medium - May benefit from optimization",
            node_index=node_index,
        )

    def _check_nested_loop(self, node: PlanNode, node_index: int) -> Optional[OptimizationSuggestion]:
        if node.node_type != "Nested Loop" or node.actual_rows <= self.config.large_scan_threshold:
            return None
        return OptimizationSuggestion(
            suggestion_type="Join",
            severity=Severity.HIGH,
            title="Inefficient Nested Loop Join",
            description=(
                f"Nested loop join processing {node.actual_rows} rows. "
                "This join method is inefficient for large datasets."
            ),
            recommendation=(
                "Consider adding indexes on join columns or restructuring the query to use "
                "hash or merge joins."
            ),
            impact="High - Could dramatically improve join performance",
            node_index=node_index,
        )

    def _check_large_sort(self, node: PlanNode, node_index: int) -> Optional[OptimizationSuggestion]:
        if node.node_type != "Sort" or node.actual_rows <= self.config.large_scan_threshold:
            return None
        return OptimizationSuggestion(
            suggestion_type="Index",
            severity=Severity.MEDIUM,
            title="Large Sort Operation",
            description=(
                f"Sort operation processing {node.actual_rows} rows. "
                "Large sorts can be memory intensive."
            ),
            recommendation="Consider adding an index on the ORDER BY columns to avoid sorting, or limit result sets.",
            impact="Medium - Could reduce memory usage and improve performance",
            node_index=node_index,
        )

    def _check_filter_index(self, node: PlanNode, node_index: int) -> Optional[OptimizationSuggestion]:
        if not self.config.enable_index_suggestions or "Filter" not in node.extra:
            return None
        condition = node.extra["Filter"]
        if not isinstance(condition, str):
            condition = "complex condition"
        return OptimizationSuggestion(
            suggestion_type="Index",
            severity=Severity.MEDIUM,
            title="Potential Index Opportunity",
            description=f"Filter condition detected: {condition}. This might benefit from an index.",
            recommendation="Consider creating an index on the filtered column(s) to improve query performance.",
            impact="Medium - Could improve filtering performance",
            node_index=node_index,
        )

    def _check_expensive_join(self, node: PlanNode, node_index: int) -> Optional[OptimizationSuggestion]:
        if "Join" not in node.node_type or node.total_cost <= self.config.expensive_cost_threshold:
            return None
        return OptimizationSuggestion(
            suggestion_type="Join",
            severity=Severity.MEDIUM,
            title=f"Expensive {node.node_type} Operation",
            description=(
                f"{node.node_type} has high cost ({node.total_cost:.2f}). "
                "The join strategy may not be optimal."
            ),
            recommendation=(
                "Consider adding indexes on join columns, updating table statistics, "
                "or restructuring the query."
            ),
            impact="Medium to High - Join optimization can significantly improve performance",
            node_index=node_index,
        )

    def _generate_summary(self, suggestions: List[OptimizationSuggestion],
                          node_costs: Dict[str, float], plan: ExecutionPlan) -> AnalysisSummary:
        high_severity_count = sum(1 for s in suggestions if s.severity == Severity.HIGH)

        if node_costs:
            most_expensive_operation = max(node_costs, key=node_costs.get)
        else:
            most_expensive_operation = "Unknown"

        if high_severity_count == 0:
            potential_improvement = "Low - Query appears well optimized"
        elif high_severity_count <= 2:
            potential_improvement = "Medium - Some optimization opportunities available"
        else:
            potential_improvement = "High - Significant optimization potential"

        return AnalysisSummary(
            total_suggestions=len(suggestions),
            high_severity_count=high_severity_count,
            most_expensive_operation=most_expensive_operation,
            total_cost=plan.root.total_cost,
            potential_improvement=potential_improvement,
        )

    def _calculate_performance_score(self, suggestions: List[OptimizationSuggestion],
                                     plan: ExecutionPlan) -> int:
        score = 100
        for suggestion in suggestions:
            score = max(0, score - suggestion.severity.deduction)

        if plan.execution_time > SLOW_EXECUTION_MS:
            score = max(0, score - 10)

        return max(score, MIN_SCORE)
