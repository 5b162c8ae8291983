"""
Shared pieces for the trace workflow stages.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class StageResult(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class StageOutput:
    """What a stage hands back to the agent."""
    stage: str
    result: StageResult
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    execution_time_ms: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.result is StageResult.SUCCESS


class BaseStage:
    """A single step of the workflow, bound to one engine and config."""

    name = "stage"

    def __init__(self, engine, config):
        self.engine = engine
        self.config = config

    @staticmethod
    def _clock() -> float:
        return asyncio.get_running_loop().time()

    def _elapsed_ms(self, start_time: float) -> int:
        return int((self._clock() - start_time) * 1000)

    def _output(self, result: StageResult, start_time: float, data: Optional[Dict[str, Any]] = None,
                error: Optional[str] = None) -> StageOutput:
        return StageOutput(
            stage=self.name,
            result=result,
            data=data or {},
            error=error,
            execution_time_ms=self._elapsed_ms(start_time),
        )

    def _create_error_output(self, error: str, start_time: float, data: Dict[str, Any] = None) -> StageOutput:
        return self._output(StageResult.FAILURE, start_time, data, error)

    def _create_success_output(self, data: Dict[str, Any], start_time: float) -> StageOutput:
        return self._output(StageResult.SUCCESS, start_time, data)
