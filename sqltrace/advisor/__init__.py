"""Rule-based optimization advice for execution plans."""

from .advisor import QueryAdvisor
from .models import (
    AdvisorAnalysis,
    AdvisorConfig,
    AnalysisSummary,
    OptimizationSuggestion,
    Severity,
)

__all__ = [
    'QueryAdvisor',
    'AdvisorAnalysis',
    'AdvisorConfig',
    'AnalysisSummary',
    'OptimizationSuggestion',
    'Severity',
]
