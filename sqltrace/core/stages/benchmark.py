"""
Stage 3: Benchmark

Time repeated EXPLAIN ANALYZE runs of one query, or of two queries that are
then compared against each other.
"""

from .base import BaseStage, StageOutput
from ..errors import BenchmarkError, SQLTraceError
from ...advisor.advisor import QueryAdvisor
from ...benchmark.suite import BenchmarkSuite
from ...utils.dev_logger import get_dev_logger


class BenchmarkStage(BaseStage):
    """Stage 3: Benchmark"""

    name = "benchmark"

    def __init__(self, engine, config):
        super().__init__(engine, config)
        self.suite = BenchmarkSuite(
            engine,
            advisor=QueryAdvisor(config.advisor_config()),
            config=config.benchmark_config(),
        )
        self.logger = get_dev_logger()

    async def execute(self, query: str) -> StageOutput:
        start_time = self._clock()

        try:
            result = await self.suite.benchmark_query(query)
        except BenchmarkError as e:
            return self._create_error_output(
                f"Benchmark failed: {e} (last error: {e.last_error})",
                start_time,
                data={"failed_runs": e.failed_runs},
            )
        except SQLTraceError as e:
            self.logger.log_error("BENCHMARK", str(e), "Benchmark aborted")
            return self._create_error_output(f"Benchmark failed: {e}", start_time)

        return self._create_success_output({"benchmark_result": result}, start_time)

    async def compare(self, query_a: str, query_b: str,
                      label_a: str = "Query A", label_b: str = "Query B") -> StageOutput:
        """Benchmark both queries in turn, then compare B against A."""
        start_time = self._clock()

        results = []
        for label, query in ((label_a, query_a), (label_b, query_b)):
            try:
                results.append(await self.suite.benchmark_query(query))
            except SQLTraceError as e:
                self.logger.log_error("BENCHMARK", str(e), f"Benchmark of {label} failed")
                return self._create_error_output(
                    f"Benchmark of {label} failed: {e}",
                    start_time,
                    data={"completed": [r.to_dict() for r in results]},
                )

        result_a, result_b = results
        comparison = self.suite.compare_benchmarks(result_a, result_b, label_a, label_b)
        return self._create_success_output({
            "result_a": result_a,
            "result_b": result_b,
            "comparison": comparison,
        }, start_time)
