"""Benchmark configuration and result types. Durations are integer nanoseconds."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..advisor.models import AdvisorAnalysis
from ..models.plan import ExecutionPlan


NS_PER_MS = 1_000_000


@dataclass
class BenchmarkConfig:
    warmup_runs: int = 2
    benchmark_runs: int = 5
    include_execution_plans: bool = True
    include_advisor_analysis: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "warmup_runs": self.warmup_runs,
            "benchmark_runs": self.benchmark_runs,
            "include_execution_plans": self.include_execution_plans,
            "include_advisor_analysis": self.include_advisor_analysis,
        }


@dataclass
class BenchmarkRun:
    """One measured iteration."""
    execution_time_ns: int
    execution_plan: Optional[ExecutionPlan] = None
    advisor_analysis: Optional[AdvisorAnalysis] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def execution_time_ms(self) -> float:
        return self.execution_time_ns / NS_PER_MS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "execution_time_ns": self.execution_time_ns,
            "execution_plan": self.execution_plan.to_dict() if self.execution_plan else None,
            "advisor_analysis": self.advisor_analysis.to_dict() if self.advisor_analysis else None,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class BenchmarkStatistics:
    avg_execution_time_ns: int
    min_execution_time_ns: int
    max_execution_time_ns: int
    std_deviation_ns: int
    p95_execution_time_ns: int
    successful_runs: int
    failed_runs: int
    avg_cost: Optional[float] = None
    avg_advisor_score: Optional[float] = None

    @property
    def avg_execution_time_ms(self) -> float:
        return self.avg_execution_time_ns / NS_PER_MS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_execution_time_ns": self.avg_execution_time_ns,
            "min_execution_time_ns": self.min_execution_time_ns,
            "max_execution_time_ns": self.max_execution_time_ns,
            "std_deviation_ns": self.std_deviation_ns,
            "p95_execution_time_ns": self.p95_execution_time_ns,
            "successful_runs": self.successful_runs,
            "failed_runs": self.failed_runs,
            "avg_cost": self.avg_cost,
            "avg_advisor_score": self.avg_advisor_score,
        }


@dataclass
class BenchmarkResult:
    query: str
    runs: List[BenchmarkRun]
    statistics: BenchmarkStatistics
    config: BenchmarkConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "runs": [run.to_dict() for run in self.runs],
            "statistics": self.statistics.to_dict(),
            "config": self.config.to_dict(),
        }


class StatisticalSignificance(Enum):
    HIGHLY_SIGNIFICANT = "HighlySignificant"  # p < 0.01
    SIGNIFICANT = "Significant"  # p < 0.05
    MARGINALLY_SIGNIFICANT = "MarginallySignificant"  # p < 0.1
    NOT_SIGNIFICANT = "NotSignificant"


@dataclass
class ComparisonMetrics:
    avg_time_diff_ns: int
    confidence_interval_ns: Tuple[int, int]
    cost_diff: Optional[float] = None
    advisor_score_diff: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "avg_time_diff_ns": self.avg_time_diff_ns,
            "cost_diff": self.cost_diff,
            "advisor_score_diff": self.advisor_score_diff,
            "confidence_interval_ns": list(self.confidence_interval_ns),
        }


@dataclass
class BenchmarkComparison:
    """A vs B. Positive performance_improvement means B is faster."""
    label_a: str
    label_b: str
    performance_improvement: float
    statistical_significance: StatisticalSignificance
    metrics: ComparisonMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label_a": self.label_a,
            "label_b": self.label_b,
            "performance_improvement": self.performance_improvement,
            "statistical_significance": self.statistical_significance.value,
            "metrics": self.metrics.to_dict(),
        }
