"""
Descriptive statistics over benchmark runs and the A/B comparison math.

The significance test and confidence interval are approximations: the
pooled deviation is the plain average of both deviations and the critical
values are fixed normal quantiles.
"""

import math
import statistics
from typing import List, Optional, Sequence, Tuple

from .models import (
    BenchmarkResult,
    BenchmarkRun,
    BenchmarkStatistics,
    StatisticalSignificance,
)


MIN_RUNS_FOR_SIGNIFICANCE = 3

# two-sided normal quantiles for p < 0.01, 0.05, 0.1
SIGNIFICANCE_THRESHOLDS = (
    (2.576, StatisticalSignificance.HIGHLY_SIGNIFICANT),
    (1.96, StatisticalSignificance.SIGNIFICANT),
    (1.645, StatisticalSignificance.MARGINALLY_SIGNIFICANT),
)


def mean_ns(durations: Sequence[int]) -> int:
    if not durations:
        return 0
    return sum(durations) // len(durations)


def std_deviation_ns(durations: Sequence[int]) -> int:
    """Sample standard deviation (n - 1); 0 for fewer than two samples."""
    if len(durations) < 2:
        return 0
    return int(statistics.stdev(durations))


def percentile_ns(durations: Sequence[int], percentile: float) -> int:
    """Nearest-rank percentile: sorted[floor(p * (n - 1))]."""
    if not durations:
        return 0
    ordered = sorted(durations)
    return ordered[int(percentile * (len(ordered) - 1))]


def average_cost(runs: Sequence[BenchmarkRun]) -> Optional[float]:
    costs = [run.execution_plan.root.total_cost for run in runs if run.execution_plan is not None]
    return sum(costs) / len(costs) if costs else None


def average_advisor_score(runs: Sequence[BenchmarkRun]) -> Optional[float]:
    scores = [run.advisor_analysis.performance_score for run in runs if run.advisor_analysis is not None]
    return sum(scores) / len(scores) if scores else None


def calculate_statistics(runs: List[BenchmarkRun], failed_runs: int) -> BenchmarkStatistics:
    durations = [run.execution_time_ns for run in runs]
    return BenchmarkStatistics(
        avg_execution_time_ns=mean_ns(durations),
        min_execution_time_ns=min(durations) if durations else 0,
        max_execution_time_ns=max(durations) if durations else 0,
        std_deviation_ns=std_deviation_ns(durations),
        p95_execution_time_ns=percentile_ns(durations, 0.95),
        successful_runs=len(runs),
        failed_runs=failed_runs,
        avg_cost=average_cost(runs),
        avg_advisor_score=average_advisor_score(runs),
    )


def performance_improvement(result_a: BenchmarkResult, result_b: BenchmarkResult) -> float:
    """Percentage by which B beats A; 0 when A's mean is 0."""
    time_a = result_a.statistics.avg_execution_time_ns
    time_b = result_b.statistics.avg_execution_time_ns
    if time_a <= 0:
        return 0.0
    return (time_a - time_b) / time_a * 100.0


def statistical_significance(result_a: BenchmarkResult, result_b: BenchmarkResult) -> StatisticalSignificance:
    stats_a = result_a.statistics
    stats_b = result_b.statistics
    n_a = stats_a.successful_runs
    n_b = stats_b.successful_runs

    if n_a < MIN_RUNS_FOR_SIGNIFICANCE or n_b < MIN_RUNS_FOR_SIGNIFICANCE:
        return StatisticalSignificance.NOT_SIGNIFICANT

    mean_diff = abs(stats_a.avg_execution_time_ns - stats_b.avg_execution_time_ns)
    pooled_std = (stats_a.std_deviation_ns + stats_b.std_deviation_ns) / 2.0
    if pooled_std == 0:
        return StatisticalSignificance.NOT_SIGNIFICANT

    t_stat = mean_diff / (pooled_std * math.sqrt(1.0 / n_a + 1.0 / n_b))
    for threshold, level in SIGNIFICANCE_THRESHOLDS:
        if t_stat > threshold:
            return level
    return StatisticalSignificance.NOT_SIGNIFICANT


def confidence_interval(result_a: BenchmarkResult, result_b: BenchmarkResult) -> Tuple[int, int]:
    """Mean difference (A - B) plus/minus the averaged deviations, floored at zero."""
    diff = result_a.statistics.avg_execution_time_ns - result_b.statistics.avg_execution_time_ns
    margin = (result_a.statistics.std_deviation_ns + result_b.statistics.std_deviation_ns) // 2
    return max(0, diff - margin), max(0, diff + margin)
