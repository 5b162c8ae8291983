"""Result types produced by the query advisor."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Severity(Enum):
    """Severity of a suggestion. HIGH outranks MEDIUM outranks LOW."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        return {Severity.HIGH: 3, Severity.MEDIUM: 2, Severity.LOW: 1}[self]

    @property
    def deduction(self) -> int:
        """Points taken off the performance score per suggestion."""
        return {Severity.HIGH: 20, Severity.MEDIUM: 10, Severity.LOW: 5}[self]


@dataclass
class OptimizationSuggestion:
    suggestion_type: str
    severity: Severity
    title: str
    description: str
    recommendation: str
    impact: str
    node_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestion_type": self.suggestion_type,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "recommendation": self.recommendation,
            "node_index": self.node_index,
            "impact": self.impact,
        }


@dataclass
class AnalysisSummary:
    total_suggestions: int
    high_severity_count: int
    most_expensive_operation: str
    total_cost: float
    potential_improvement: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_suggestions": self.total_suggestions,
            "high_severity_count": self.high_severity_count,
            "most_expensive_operation": self.most_expensive_operation,
            "total_cost": self.total_cost,
            "potential_improvement": self.potential_improvement,
        }


@dataclass
class AdvisorAnalysis:
    """Suggestions in traversal order, plus the score and summary."""
    suggestions: List[OptimizationSuggestion]
    performance_score: int
    summary: AnalysisSummary
    nodes_visited: int = 0

    def by_severity(self) -> List[OptimizationSuggestion]:
        """Suggestions sorted highest severity first; ties keep traversal order."""
        return sorted(self.suggestions, key=lambda s: -s.severity.rank)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggestions": [s.to_dict() for s in self.suggestions],
            "performance_score": self.performance_score,
            "summary": self.summary.to_dict(),
            "nodes_visited": self.nodes_visited,
        }


@dataclass
class AdvisorConfig:
    """Thresholds and toggles for the advisor rules."""
    expensive_cost_threshold: float = 1000.0
    large_scan_threshold: int = 10000
    enable_index_suggestions: bool = True
