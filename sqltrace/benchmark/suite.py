"""
Benchmark suite: repeated EXPLAIN ANALYZE runs against a plan source.

Warmup runs are executed and thrown away, then the measured runs execute one
at a time. A run that fails is counted and skipped; only when every measured
run fails does the benchmark itself fail.
"""

import time
from typing import Dict, Optional

from ..advisor.advisor import QueryAdvisor
from ..core.errors import BenchmarkError, ConfigurationError, SQLTraceError
from ..utils.dev_logger import get_dev_logger
from . import stats
from .models import (
    BenchmarkComparison,
    BenchmarkConfig,
    BenchmarkResult,
    BenchmarkRun,
    ComparisonMetrics,
)


class BenchmarkSuite:
    """Benchmarks queries through an engine's `explain_query` coroutine."""

    def __init__(self, engine, advisor: Optional[QueryAdvisor] = None,
                 config: Optional[BenchmarkConfig] = None):
        self.engine = engine
        self.advisor = advisor or QueryAdvisor()
        self.config = config or BenchmarkConfig()
        self.logger = get_dev_logger()

        if self.config.benchmark_runs < 1:
            raise ConfigurationError(
                f"benchmark_runs must be at least 1, got {self.config.benchmark_runs}")
        if self.config.warmup_runs < 0:
            raise ConfigurationError(
                f"warmup_runs must not be negative, got {self.config.warmup_runs}")

    async def benchmark_query(self, query: str) -> BenchmarkResult:
        """Run warmups, then the measured runs, and summarize them."""
        self.logger.log_stage_detail(
            "benchmark",
            f"Benchmarking query ({self.config.warmup_runs} warmup, {self.config.benchmark_runs} measured): {query[:100]}"
        )

        for i in range(self.config.warmup_runs):
            try:
                warmup = await self._execute_single_run(query)
                self.logger.log_benchmark_run("warmup", i + 1, self.config.warmup_runs,
                                              elapsed_ms=warmup.execution_time_ms)
            except SQLTraceError as e:
                self.logger.log_benchmark_run("warmup", i + 1, self.config.warmup_runs, error=str(e))

        runs = []
        failed_runs = 0
        last_error = None
        for i in range(self.config.benchmark_runs):
            try:
                run = await self._execute_single_run(query)
            except SQLTraceError as e:
                failed_runs += 1
                last_error = e
                self.logger.log_benchmark_run("run", i + 1, self.config.benchmark_runs, error=str(e))
                continue
            runs.append(run)
            self.logger.log_benchmark_run("run", i + 1, self.config.benchmark_runs,
                                          elapsed_ms=run.execution_time_ms)

        if not runs:
            self.logger.log_error("BENCHMARK", "All benchmark runs failed", f"{failed_runs} failures, last: {last_error}")
            raise BenchmarkError("All benchmark runs failed", failed_runs=failed_runs,
                                 last_error=last_error) from last_error

        statistics = stats.calculate_statistics(runs, failed_runs)
        self.logger.log_benchmark_statistics(query, statistics.to_dict())

        return BenchmarkResult(
            query=query,
            runs=runs,
            statistics=statistics,
            config=self.config,
        )

    async def _execute_single_run(self, query: str) -> BenchmarkRun:
        start = time.perf_counter_ns()
        plan = await self.engine.explain_query(query)
        elapsed_ns = time.perf_counter_ns() - start

        execution_plan = plan if self.config.include_execution_plans else None

        advisor_analysis = None
        if self.config.include_advisor_analysis and execution_plan is not None:
            advisor_analysis = self.advisor.analyze_plan(execution_plan)

        return BenchmarkRun(
            execution_time_ns=elapsed_ns,
            execution_plan=execution_plan,
            advisor_analysis=advisor_analysis,
        )

    def compare_benchmarks(self, result_a: BenchmarkResult, result_b: BenchmarkResult,
                           label_a: str = "Query A", label_b: str = "Query B") -> BenchmarkComparison:
        return compare_benchmarks(result_a, result_b, label_a, label_b)

    async def run_benchmark_suite(self, queries: Dict[str, str]) -> Dict[str, BenchmarkResult]:
        """Benchmark each named query in turn; the first failure propagates."""
        results = {}
        for name, query in queries.items():
            self.logger.log_stage_detail("benchmark", f"Suite entry: {name}")
            results[name] = await self.benchmark_query(query)
        return results


def compare_benchmarks(result_a: BenchmarkResult, result_b: BenchmarkResult,
                       label_a: str = "Query A", label_b: str = "Query B") -> BenchmarkComparison:
    """Reduce two benchmark results to a comparison of B against A."""
    stats_a = result_a.statistics
    stats_b = result_b.statistics

    cost_diff = None
    if stats_a.avg_cost is not None and stats_b.avg_cost is not None:
        cost_diff = stats_b.avg_cost - stats_a.avg_cost

    advisor_score_diff = None
    if stats_a.avg_advisor_score is not None and stats_b.avg_advisor_score is not None:
        advisor_score_diff = stats_b.avg_advisor_score - stats_a.avg_advisor_score

    comparison = BenchmarkComparison(
        label_a=label_a,
        label_b=label_b,
        performance_improvement=stats.performance_improvement(result_a, result_b),
        statistical_significance=stats.statistical_significance(result_a, result_b),
        metrics=ComparisonMetrics(
            avg_time_diff_ns=abs(stats_b.avg_execution_time_ns - stats_a.avg_execution_time_ns),
            confidence_interval_ns=stats.confidence_interval(result_a, result_b),
            cost_diff=cost_diff,
            advisor_score_diff=advisor_score_diff,
        ),
    )
    get_dev_logger().log_comparison(comparison.to_dict())
    return comparison
