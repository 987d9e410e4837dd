from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict
import yaml

from railplan.core_types import OutputFormat

SEARCH_DEFAULTS = {
    'max_expanded_states': 2000000,
    'time_limit_sec': None,
    'progress_interval': 50000,
}

LIMIT_DEFAULTS = {
    'max_stations': 200,
    'max_packages': 12,
    'max_trains': 6,
}


@dataclass
class Parameters:
    """Configuration parameters for the delivery planner"""
    search: Dict = field(default_factory=dict)
    limits: Dict = field(default_factory=dict)
    validate_plan: bool = True
    format: str = 'excel'
    results_dir: str = 'results'

    @classmethod
    def from_yaml(cls, path: Path | str = None) -> 'Parameters':
        """Load parameters from YAML file"""
        if path is None:
            path = Path(__file__).parent / 'default_config.yaml'

        with open(path) as f:
            data = yaml.safe_load(f) or {}
            return cls(**data)

    def __post_init__(self):
        """Fill in missing nested keys and validate parameters"""
        unknown = set(self.search or {}) - set(SEARCH_DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown search parameters: {sorted(unknown)}")
        unknown = set(self.limits or {}) - set(LIMIT_DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown limit parameters: {sorted(unknown)}")

        self.search = {**SEARCH_DEFAULTS, **(self.search or {})}
        self.limits = {**LIMIT_DEFAULTS, **(self.limits or {})}

        max_states = self.search['max_expanded_states']
        if max_states is None:
            self.search['max_expanded_states'] = max_states = 0
        if not isinstance(max_states, int) or max_states < 0:
            raise ValueError(
                f"max_expanded_states must be a non-negative integer. Got: {max_states}"
            )

        time_limit = self.search['time_limit_sec']
        if time_limit is not None and (not isinstance(time_limit, (int, float)) or time_limit < 0):
            raise ValueError(
                f"time_limit_sec must be a non-negative number or null. Got: {time_limit}"
            )

        interval = self.search['progress_interval']
        if not isinstance(interval, int) or interval <= 0:
            raise ValueError(
                f"progress_interval must be a positive integer. Got: {interval}"
            )

        for key, value in self.limits.items():
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{key} must be a positive integer. Got: {value}")

        formats = [f.value for f in OutputFormat]
        if self.format not in formats:
            raise ValueError(f"format must be one of {formats}. Got: {self.format}")

    @property
    def max_expanded_states(self) -> int:
        return self.search['max_expanded_states']

    @property
    def time_limit_sec(self) -> float | None:
        limit = self.search['time_limit_sec']
        return None if not limit else float(limit)
