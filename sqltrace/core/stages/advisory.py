"""
Stage 2: Advisory

Run the rule-based advisor over a captured plan.
"""

from .base import BaseStage, StageOutput
from ...advisor.advisor import QueryAdvisor
from ...models.plan import ExecutionPlan
from ...utils.dev_logger import get_dev_logger


class AdvisoryStage(BaseStage):
    """Stage 2: Advisory"""

    name = "advisory"

    def __init__(self, engine, config):
        super().__init__(engine, config)
        self.advisor = QueryAdvisor(config.advisor_config())
        self.logger = get_dev_logger()

    async def execute(self, plan: ExecutionPlan) -> StageOutput:
        start_time = self._clock()

        analysis = self.advisor.analyze_plan(plan)
        self.logger.log_suggestions([s.to_dict() for s in analysis.suggestions], analysis.performance_score)

        return self._create_success_output({"advisor_analysis": analysis}, start_time)
