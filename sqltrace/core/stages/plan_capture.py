"""
Stage 1: Plan Capture

Check that the query parses, run it under EXPLAIN ANALYZE and index the
resulting plan for tree display.
"""

from .base import BaseStage, StageOutput
from ..errors import InvalidQueryError, SQLTraceError
from ...tools.validator import validate_query_syntax
from ...ui.plan_tree import PlanTree
from ...utils.dev_logger import get_dev_logger


class PlanCaptureStage(BaseStage):
    """Stage 1: Plan Capture"""

    name = "plan_capture"

    def __init__(self, engine, config):
        super().__init__(engine, config)
        self.tree = PlanTree(policy=config.expansion_policy())
        self.logger = get_dev_logger()

    async def execute(self, query: str) -> StageOutput:
        """Capture and index the plan for `query`.

        The stage keeps one PlanTree across calls, so re-capturing an
        unchanged plan leaves expansion state alone.
        """
        start_time = self._clock()

        try:
            validate_query_syntax(query)
        except InvalidQueryError as e:
            self.logger.log_error("PLAN_CAPTURE", str(e), "Query rejected before EXPLAIN")
            return self._create_error_output(f"Invalid query: {e}", start_time)

        try:
            plan = await self.engine.explain_query(query)
        except SQLTraceError as e:
            self.logger.log_error("PLAN_CAPTURE", str(e), "EXPLAIN failed")
            return self._create_error_output(f"Plan capture failed: {e}", start_time)

        rebuilt = self.tree.update(plan)
        self.logger.log_stage_detail(
            self.name,
            f"Plan captured: {plan.node_count()} nodes, tree {'rebuilt' if rebuilt else 'unchanged'}"
        )

        return self._create_success_output({
            "execution_plan": plan,
            "plan_tree": self.tree,
            "tree_rebuilt": rebuilt,
        }, start_time)
