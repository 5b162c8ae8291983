"""
Session log for SQLTrace runs.

Every EXPLAIN call, parsed plan summary, advisor suggestion and benchmark
iteration ends up in reports/sqltrace_dev_<session>.log so a run can be
replayed after the fact.
"""

import json
import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

LOGGER_NAME = 'sqltrace_dev'
LOG_FORMAT = '%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)s | %(message)s'
WIDE = 80
NARROW = 60


class DevLogger:
    """Writes one log file per session through the `sqltrace_dev` logger."""

    def __init__(self, log_file: str = None):
        self.session_id = time.strftime("session_%Y%m%d_%H%M%S")
        self.log_file = Path(log_file or f"reports/sqltrace_dev_{self.session_id}.log")
        self.log_file.parent.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self._replace_handlers()

        self.log_session_start()

    def _replace_handlers(self):
        # A new session owns the logger; handlers from an older one are closed
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        handler = logging.FileHandler(self.log_file, mode='w', encoding='utf-8')
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        self.logger.addHandler(handler)

    def _rule(self, char: str = "=", width: int = WIDE):
        self.logger.info(char * width)

    def _dump(self, payload: Any, level: int = logging.INFO):
        self.logger.log(level, json.dumps(payload, default=str, indent=2))

    def log_session_start(self):
        self._rule()
        self.logger.info(f"SQLTRACE SESSION {self.session_id}")
        self.logger.info(f"Writing to {self.log_file.absolute()}")
        self._rule()

    def log_query_start(self, query: str):
        self._rule("-", NARROW)
        self.logger.info("QUERY:")
        self.logger.info(query)
        self._rule("-", NARROW)

    def log_stage_start(self, stage_name: str, stage_number: int):
        self.logger.info(f"[{stage_number}] {stage_name} started")

    def log_stage_end(self, stage_name: str, stage_number: int, success: bool, duration: float = None):
        outcome = "ok" if success else "failed"
        if duration is not None:
            outcome += f" in {duration * 1000:.1f}ms"
        self.logger.info(f"[{stage_number}] {stage_name} {outcome}")

    def log_stage_detail(self, stage_name: str, detail: str):
        self.logger.debug(f"{stage_name}: {detail}")

    def log_explain(self, query: str, engine: str, error: str = None, raw_output: Any = None):
        """Record one call to the plan source, with its raw JSON when there is one."""
        self.logger.debug(f"EXPLAIN via {engine}: {query}")
        if raw_output is not None:
            self.logger.debug(f"  raw: {json.dumps(raw_output, default=str)}")
        if error:
            self.logger.error(f"  explain failed: {error}")

    def log_plan_summary(self, node_count: int, root_type: str, total_cost: float,
                         planning_time: float, execution_time: float):
        self.logger.debug(
            f"PLAN: root={root_type} nodes={node_count} total_cost={total_cost:.2f} "
            f"planning={planning_time:.3f}ms execution={execution_time:.3f}ms"
        )

    def log_suggestions(self, suggestions: List[Dict[str, Any]], score: int):
        self.logger.info(f"ADVISOR: score {score}, {len(suggestions)} suggestion(s)")
        for number, suggestion in enumerate(suggestions, 1):
            self.logger.info(
                f"  #{number} [{suggestion.get('severity')}] {suggestion.get('suggestion_type')}: "
                f"{suggestion.get('title')} (node {suggestion.get('node_index')})"
            )
            self.logger.debug(f"      {suggestion.get('description', '')}")

    def log_benchmark_run(self, phase: str, run_number: int, total_runs: int,
                          elapsed_ms: float = None, error: str = None):
        prefix = f"BENCHMARK {phase} {run_number}/{total_runs}"
        if error:
            self.logger.warning(f"{prefix} failed: {error}")
        else:
            self.logger.debug(f"{prefix} took {elapsed_ms:.3f}ms")

    def log_benchmark_statistics(self, query: str, statistics: Dict[str, Any]):
        self.logger.info(f"BENCHMARK STATISTICS ({query[:100]}):")
        self._dump(statistics)

    def log_comparison(self, comparison: Dict[str, Any]):
        self.logger.info(
            f"COMPARISON {comparison.get('label_a')} -> {comparison.get('label_b')}: "
            f"{comparison.get('performance_improvement', 0):+.1f}% "
            f"({comparison.get('statistical_significance')})"
        )

    def log_error(self, component: str, error: str, details: str = None):
        self.logger.error(f"{component} error: {error}")
        if details:
            self.logger.error(f"  {details}")

    def log_config(self, config_data: Dict[str, Any]):
        """Log configuration values with credentials masked."""
        self.logger.info("CONFIG:")
        for key, value in config_data.items():
            if 'password' in key.lower() or 'secret' in key.lower():
                value = "[REDACTED]"
            self.logger.info(f"  {key} = {_redact_urls(value)}")

    def log_complete_stage_data(self, stage_name: str, stage_data: Dict[str, Any]):
        self.logger.info(f"{stage_name} output:")
        self._dump(stage_data, logging.DEBUG)

    def log_session_end(self, success: bool, total_duration: float = None):
        self._rule("-", NARROW)
        summary = "completed" if success else "failed"
        if total_duration is not None:
            summary += f" after {total_duration:.2f}s"
        self.logger.info(f"SQLTRACE SESSION {summary}")
        self._rule()

    def get_log_file_path(self) -> str:
        return str(self.log_file.absolute())


_URL_PASSWORD = re.compile(r'(://[^:/@\s]+:)[^@\s]+@')


def _redact_urls(value: Any) -> Any:
    """Mask the password part of connection URLs."""
    if isinstance(value, str):
        return _URL_PASSWORD.sub(r'\1***@', value)
    if isinstance(value, dict):
        return {k: _redact_urls(v) for k, v in value.items()}
    return value


_dev_logger: Optional[DevLogger] = None


def get_dev_logger() -> DevLogger:
    """Return the session logger, creating one on first use."""
    global _dev_logger
    if _dev_logger is None:
        _dev_logger = DevLogger()
    return _dev_logger


def init_dev_logger(log_file: str = None) -> DevLogger:
    """Start a fresh session logger, e.g. one per test."""
    global _dev_logger
    _dev_logger = DevLogger(log_file)
    return _dev_logger
