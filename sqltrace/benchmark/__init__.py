"""Query benchmarking and A/B comparison."""

from .models import (
    BenchmarkComparison,
    BenchmarkConfig,
    BenchmarkResult,
    BenchmarkRun,
    BenchmarkStatistics,
    ComparisonMetrics,
    StatisticalSignificance,
)
from .suite import BenchmarkSuite, compare_benchmarks

__all__ = [
    'BenchmarkComparison',
    'BenchmarkConfig',
    'BenchmarkResult',
    'BenchmarkRun',
    'BenchmarkStatistics',
    'ComparisonMetrics',
    'StatisticalSignificance',
    'BenchmarkSuite',
    'compare_benchmarks',
]
