"""
Query Analysis Workflow

This package implements the stages SQLTrace runs for a query:
1. Plan Capture - Validate syntax, EXPLAIN ANALYZE, index the plan tree
2. Advisory - Rule-based optimization suggestions and a performance score
3. Benchmark - Repeated timed runs, statistics and A/B comparison
"""

from .base import StageResult, StageOutput
from .plan_capture import PlanCaptureStage
from .advisory import AdvisoryStage
from .benchmark import BenchmarkStage

__all__ = [
    'StageResult',
    'StageOutput',
    'PlanCaptureStage',
    'AdvisoryStage',
    'BenchmarkStage'
]
