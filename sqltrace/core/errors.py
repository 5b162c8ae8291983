"""Error types for SQLTrace.

Every error raised by the plan model, the engines and the benchmark engine
derives from SQLTraceError so callers can catch the whole family at once.
"""

from typing import Optional


class SQLTraceError(Exception):
    """Base class for all SQLTrace errors."""


class PlanParsingError(SQLTraceError):
    """EXPLAIN output could not be turned into an ExecutionPlan."""


class DatabaseError(SQLTraceError):
    """Failure reported by the database or the driver talking to it."""


class DatabaseConnectionError(DatabaseError):
    """Could not connect to (or lost the connection to) the database."""


class QueryExecutionError(DatabaseError):
    """The database rejected or failed to run a statement."""


class InvalidQueryError(SQLTraceError):
    """The query is not acceptable for explanation."""


class QuerySyntaxError(InvalidQueryError):
    """The query does not parse."""


class ConfigurationError(SQLTraceError):
    """Invalid configuration or setup."""


class UnsupportedOperationError(SQLTraceError):
    """The selected engine does not implement the requested capability."""


class BenchmarkError(SQLTraceError):
    """Every measured run of a benchmark failed."""

    def __init__(self, message: str, failed_runs: int = 0, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.failed_runs = failed_runs
        self.last_error = last_error
