"""Simple configuration for SQLTrace."""

import os
from pathlib import Path

import yaml

from .errors import ConfigurationError


class Config:
    """Settings for the database, advisor, benchmark and plan tree."""

    def __init__(self, config_file: str = None):
        # Set defaults
        self.database_url = 'postgresql://localhost:5432/postgres'
        self.database_max_connections = 5
        self.database_timeout_seconds = 30

        self.advisor_expensive_cost_threshold = 1000.0
        self.advisor_large_scan_threshold = 10000
        self.advisor_enable_index_suggestions = True

        self.benchmark_warmup_runs = 2
        self.benchmark_runs = 5
        self.benchmark_include_execution_plans = True
        self.benchmark_include_advisor_analysis = True

        self.tree_expand_all = False
        self.tree_expand_levels = 2

        # Initialize logger after setting defaults
        from ..utils.dev_logger import get_dev_logger
        self.logger = get_dev_logger()

        self.logger.log_config({"source": "defaults", "config_file": config_file})

        if config_file:
            self._load_from_file(config_file)

        env_url = os.getenv("DATABASE_URL")
        if env_url:
            self.database_url = env_url
            self.logger.log_config({"source": "environment", "database_url": env_url})

    def _load_from_file(self, config_file: str):
        """Load configuration from YAML file."""
        config_path = Path(config_file).expanduser()
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")

        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.log_error("CONFIG", str(e), f"Failed to load config file: {config_file}")
            raise ConfigurationError(f"Could not parse config file {config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_file} must contain a mapping")

        if 'database' in data:
            db = data['database'] or {}
            self.database_url = db.get('url', self.database_url)
            self.database_max_connections = db.get('max_connections', self.database_max_connections)
            self.database_timeout_seconds = db.get('timeout_seconds', self.database_timeout_seconds)

        if 'advisor' in data:
            advisor = data['advisor'] or {}
            self.advisor_expensive_cost_threshold = advisor.get(
                'expensive_cost_threshold', self.advisor_expensive_cost_threshold)
            self.advisor_large_scan_threshold = advisor.get(
                'large_scan_threshold', self.advisor_large_scan_threshold)
            self.advisor_enable_index_suggestions = advisor.get(
                'enable_index_suggestions', self.advisor_enable_index_suggestions)

        if 'benchmark' in data:
            bench = data['benchmark'] or {}
            self.benchmark_warmup_runs = bench.get('warmup_runs', self.benchmark_warmup_runs)
            self.benchmark_runs = bench.get('benchmark_runs', self.benchmark_runs)
            self.benchmark_include_execution_plans = bench.get(
                'include_execution_plans', self.benchmark_include_execution_plans)
            self.benchmark_include_advisor_analysis = bench.get(
                'include_advisor_analysis', self.benchmark_include_advisor_analysis)

        if 'tree' in data:
            tree = data['tree'] or {}
            self.tree_expand_all = tree.get('expand_all', self.tree_expand_all)
            self.tree_expand_levels = tree.get('expand_levels', self.tree_expand_levels)

        self.logger.log_config({"source": "file", "file_path": config_file, "data_loaded": data})

    def validate(self):
        """Raise ConfigurationError if any value is out of range."""
        if not isinstance(self.database_url, str) or not self.database_url:
            raise ConfigurationError("database.url must be a non-empty string")
        if not _is_number(self.database_max_connections) or self.database_max_connections < 1:
            raise ConfigurationError("database.max_connections must be at least 1")
        if not _is_number(self.database_timeout_seconds) or self.database_timeout_seconds <= 0:
            raise ConfigurationError("database.timeout_seconds must be positive")
        if not _is_number(self.advisor_expensive_cost_threshold) or self.advisor_expensive_cost_threshold < 0:
            raise ConfigurationError("advisor.expensive_cost_threshold must be a non-negative number")
        if not _is_number(self.advisor_large_scan_threshold) or self.advisor_large_scan_threshold < 0:
            raise ConfigurationError("advisor.large_scan_threshold must be a non-negative number")
        if not _is_number(self.benchmark_warmup_runs) or self.benchmark_warmup_runs < 0:
            raise ConfigurationError("benchmark.warmup_runs must be a non-negative integer")
        if not _is_number(self.benchmark_runs) or self.benchmark_runs < 1:
            raise ConfigurationError("benchmark.benchmark_runs must be at least 1")
        if not _is_number(self.tree_expand_levels) or self.tree_expand_levels < 0:
            raise ConfigurationError("tree.expand_levels must be a non-negative integer")

    def to_dict(self) -> dict:
        return {k: v for k, v in self.__dict__.items() if k != 'logger'}

    def advisor_config(self):
        from ..advisor.models import AdvisorConfig
        return AdvisorConfig(
            expensive_cost_threshold=float(self.advisor_expensive_cost_threshold),
            large_scan_threshold=int(self.advisor_large_scan_threshold),
            enable_index_suggestions=bool(self.advisor_enable_index_suggestions),
        )

    def benchmark_config(self):
        from ..benchmark.models import BenchmarkConfig
        return BenchmarkConfig(
            warmup_runs=int(self.benchmark_warmup_runs),
            benchmark_runs=int(self.benchmark_runs),
            include_execution_plans=bool(self.benchmark_include_execution_plans),
            include_advisor_analysis=bool(self.benchmark_include_advisor_analysis),
        )

    def expansion_policy(self):
        from ..ui.plan_tree import ExpansionPolicy
        return ExpansionPolicy(expand_all=bool(self.tree_expand_all),
                               expand_levels=int(self.tree_expand_levels))

    def connection_config(self):
        """Connection settings; the engine type is sniffed from the URL."""
        from ..tools.engine import ConnectionConfig, EngineFactory
        return ConnectionConfig(
            engine_type=EngineFactory.detect_engine_type(self.database_url),
            connection_string=self.database_url,
            max_connections=int(self.database_max_connections),
            timeout_seconds=float(self.database_timeout_seconds),
        )

    @classmethod
    def load(cls, config_file: str = None) -> 'Config':
        """Load configuration from default locations."""
        if config_file:
            return cls(config_file)

        default_locations = [
            './sqltrace.yaml'
        ]

        temp_config = cls()
        temp_config.logger.log_config({"action": "searching_default_locations", "locations": default_locations})

        for location in default_locations:
            path = Path(location).expanduser()
            if path.exists():
                temp_config.logger.log_config({"action": "found_config_file", "location": str(path)})
                return cls(str(path))

        temp_config.logger.log_config({"action": "using_defaults", "reason": "no_config_file_found"})
        return temp_config


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
