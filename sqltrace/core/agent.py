"""TraceAgent: plan capture, advisory and benchmarking for PostgreSQL queries."""

import time
from typing import Optional

from .config import Config
from .errors import ConfigurationError, SQLTraceError
from .stages import AdvisoryStage, BenchmarkStage, PlanCaptureStage, StageOutput
from ..tools.engine import DatabaseEngine, EngineFactory
from ..utils.dev_logger import get_dev_logger


class TraceAgent:
    """Runs the analysis workflow against a single database engine."""

    def __init__(self, config: Optional[Config] = None, engine: Optional[DatabaseEngine] = None):
        self.config = config or Config()
        self.logger = get_dev_logger()

        self.logger.log_config(self.config.to_dict())

        self.engine = engine
        self.plan_capture_stage = None
        self.advisory_stage = None
        self.benchmark_stage = None

    async def initialize(self) -> bool:
        """Connect to the database and set up the stages."""
        try:
            self.config.validate()
            if self.engine is None:
                self.engine = await EngineFactory.create_engine(self.config.connection_config())

            await self.engine.test_connection()
        except SQLTraceError as e:
            self.logger.log_error("AGENT", str(e), "Failed to initialize")
            print(f"Failed to initialize: {e}")
            return False

        self.plan_capture_stage = PlanCaptureStage(self.engine, self.config)
        self.advisory_stage = AdvisoryStage(self.engine, self.config)
        self.benchmark_stage = BenchmarkStage(self.engine, self.config)
        return True

    async def close(self):
        if self.engine is not None:
            await self.engine.close()

    def _require_initialized(self):
        if self.plan_capture_stage is None:
            raise ConfigurationError("Agent not initialized; call initialize() first")

    async def analyze_query(self, query: str) -> dict:
        """Capture the plan for a query and run the advisor over it."""
        self._require_initialized()
        start_time = time.time()
        self.logger.log_query_start(query)

        capture = await self._run_stage("plan_capture", 1, self.plan_capture_stage.execute(query))
        if not capture.succeeded:
            self.logger.log_session_end(False, time.time() - start_time)
            return self._failure(capture, query)

        plan = capture.data["execution_plan"]
        tree = capture.data["plan_tree"]
        print(f"✅ Plan captured: {plan.node_count()} nodes, root {plan.root.node_type}")

        advisory = await self._run_stage("advisory", 2, self.advisory_stage.execute(plan))
        analysis = advisory.data["advisor_analysis"]
        print(f"✅ Advisor: {len(analysis.suggestions)} suggestions, score {analysis.performance_score}/100")

        self.logger.log_session_end(True, time.time() - start_time)
        return {
            "success": True,
            "stages_completed": ["plan_capture", "advisory"],
            "execution_plan": plan.to_dict(),
            "plan_tree": tree.to_dict(),
            "advisor_analysis": analysis.to_dict(),
            "original_query": query
        }

    async def benchmark_query(self, query: str) -> dict:
        self._require_initialized()
        start_time = time.time()
        self.logger.log_query_start(query)

        output = await self._run_stage("benchmark", 3, self.benchmark_stage.execute(query))
        if not output.succeeded:
            self.logger.log_session_end(False, time.time() - start_time)
            return self._failure(output, query)

        result = output.data["benchmark_result"]
        print(f"✅ Benchmark: avg {result.statistics.avg_execution_time_ms:.2f}ms over "
              f"{result.statistics.successful_runs} runs ({result.statistics.failed_runs} failed)")

        self.logger.log_session_end(True, time.time() - start_time)
        return {
            "success": True,
            "stages_completed": ["benchmark"],
            "benchmark_result": result.to_dict(),
            "original_query": query
        }

    async def compare_queries(self, query_a: str, query_b: str,
                              label_a: str = "Query A", label_b: str = "Query B") -> dict:
        """Benchmark two queries and report how B performs relative to A."""
        self._require_initialized()
        start_time = time.time()
        self.logger.log_query_start(f"-- {label_a}\n{query_a}\n-- {label_b}\n{query_b}")

        output = await self._run_stage("benchmark", 3,
                                       self.benchmark_stage.compare(query_a, query_b, label_a, label_b))
        if not output.succeeded:
            self.logger.log_session_end(False, time.time() - start_time)
            return self._failure(output, query_a)

        comparison = output.data["comparison"]
        print(f"✅ {label_b} vs {label_a}: {comparison.performance_improvement:+.1f}% "
              f"({comparison.statistical_significance.value})")

        self.logger.log_session_end(True, time.time() - start_time)
        return {
            "success": True,
            "stages_completed": ["benchmark"],
            "result_a": output.data["result_a"].to_dict(),
            "result_b": output.data["result_b"].to_dict(),
            "comparison": comparison.to_dict(),
        }

    async def _run_stage(self, stage_name: str, stage_number: int, stage_coro) -> StageOutput:
        """Await a stage, logging its start, end and data."""
        stage_start = time.time()
        self.logger.log_stage_start(stage_name, stage_number)

        output = await stage_coro

        self.logger.log_stage_end(output.stage, stage_number, output.succeeded, time.time() - stage_start)
        if output.succeeded:
            self.logger.log_complete_stage_data(output.stage, {
                k: v.to_dict() if hasattr(v, "to_dict") else v for k, v in output.data.items()
            })
        else:
            self.logger.log_error(output.stage.upper(), output.error)
            print(f"❌ {output.stage} failed: {output.error}")
        return output

    def _failure(self, output: StageOutput, query: str) -> dict:
        return {
            "success": False,
            "stage": output.stage,
            "error": output.error,
            "details": output.data,
            "original_query": query
        }
