"""SQLTrace: PostgreSQL execution plan analysis, advice and benchmarking."""

__version__ = "0.1.0"
