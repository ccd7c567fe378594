"""
Configuration management for PECS Analytics.

This module centralizes every tunable heuristic used by the analytics core:
- Adaptive difficulty thresholds and window sizes
- Engagement baselines, sub-score weights and level cut-offs
- Session optimizer and trend analyzer constants
- Filesystem paths for persisted history and rendered reports
- Logging level and format

Values that are commonly tuned per deployment are read from the environment
(a local .env file is honoured).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


MINUTE_MS = 60 * 1000


@dataclass
class AdaptiveConfig:
    """Adaptive difficulty (array size) controller settings."""

    # Array size bounds (number of picture cards shown at once)
    min_array_size: int = 2
    max_array_size: int = 5

    # Zone of proximal development
    target_success_rate: float = 0.80
    window_size: int = field(
        default_factory=lambda: int(os.getenv("PECS_WINDOW_SIZE", "10"))
    )
    increase_threshold: float = 0.85  # rate >= this -> harder
    decrease_threshold: float = 0.65  # rate <= this -> easier
    min_trials_before_adjust: int = 5

    # Streak confirmation
    consecutive_correct_to_increase: int = 3
    consecutive_incorrect_to_decrease: int = 3
    struggling_success_rate: float = 0.50  # decrease even without a losing streak

    # Trial history is capped at window_size * history_multiplier
    history_multiplier: int = 3

    # Performance summary trend (difference between half-windows)
    trend_threshold: float = 0.10

    @property
    def max_history_size(self) -> int:
        """Maximum number of trials kept in an adaptive state."""
        return self.window_size * self.history_multiplier

    def clamp(self, difficulty: int) -> int:
        """Clamp a difficulty into [min_array_size, max_array_size]."""
        return max(self.min_array_size, min(self.max_array_size, difficulty))


@dataclass
class EngagementConfig:
    """Engagement predictor baseline (can be personalised per child)."""

    avg_response_time_ms: float = 3000.0
    optimal_session_duration_ms: float = 15 * MINUTE_MS
    max_activities_per_session: int = 20
    response_time_threshold_slow: float = 2.0  # 2x slower than average
    response_time_threshold_fast: float = 0.5  # 2x faster than average

    # Rolling history of snapshots/scores
    history_size: int = 10
    min_history_for_trend: int = 3
    trend_window: int = 5
    min_history_for_baseline: int = 5

    # Sub-score weights (normalised by the sum of weights present)
    weights: Dict[str, float] = field(
        default_factory=lambda: {
            "response_score": 0.25,
            "success_score": 0.25,
            "fatigue_score": 0.20,
            "volume_score": 0.15,
            "trend_score": 0.15,
        }
    )

    # Level cut-offs on the 0-100 score
    high_threshold: float = 70.0
    medium_threshold: float = 50.0
    low_threshold: float = 30.0

    # Break durations suggested by the action table
    short_break_ms: int = 2 * MINUTE_MS
    medium_break_ms: int = 5 * MINUTE_MS
    long_break_ms: int = 10 * MINUTE_MS


@dataclass
class OptimizerConfig:
    """Session optimizer settings."""

    # Time slot ranking
    min_sessions_for_slots: int = 5
    min_samples_per_slot: int = 2
    slot_hours: int = 2

    # Duration recommendation
    min_sessions_for_duration: int = 3
    successful_session_rate: float = 0.7
    min_successful_sessions: int = 3
    default_duration_ms: int = 10 * MINUTE_MS
    default_min_duration_ms: int = 5 * MINUTE_MS
    default_max_duration_ms: int = 15 * MINUTE_MS
    absolute_min_duration_ms: int = 5 * MINUTE_MS
    absolute_max_duration_ms: int = 30 * MINUTE_MS
    min_duration_factor: float = 0.6
    max_duration_factor: float = 1.4

    # Phase sequencing
    phase_duration_ms: int = 5 * MINUTE_MS
    warmup_success_rate: float = 0.8
    challenge_success_rate: float = 0.85
    max_phase: int = 6

    # Weekly schedule
    min_sessions_for_weekly_pattern: int = 7
    default_weekly_sessions: int = 5
    rest_day_success_rate: float = 0.5
    rest_day_min_samples: int = 3
    default_rest_day: int = 0  # Sunday


@dataclass
class TrendConfig:
    """Performance trend analyzer settings."""

    min_data_points: int = 5
    min_phase_data_points: int = 3
    mastery_threshold: float = field(
        default_factory=lambda: float(os.getenv("PECS_MASTERY_THRESHOLD", "0.85"))
    )

    # % change per week
    direction_threshold: float = 2.0
    moderate_threshold: float = 3.0
    strong_threshold: float = 5.0

    # Per-phase skill breakdown
    mastered_success_rate: float = 0.85
    developing_success_rate: float = 0.60
    skill_trend_window: int = 5
    skill_trend_slope: float = 0.02

    # Weekly comparison: rough minutes estimate per completed activity
    minutes_per_activity: int = 2


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("PECS_DATA_DIR", str(Path(__file__).parent.parent / "data"))
        )
    )

    history_dir: Path = field(init=False)
    reports_dir: Path = field(init=False)
    schemas_dir: Path = field(init=False)
    session_schema: Path = field(init=False)
    data_point_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.data_dir = Path(self.data_dir)
        self.history_dir = self.data_dir / "history"
        self.reports_dir = self.data_dir / "reports"
        self.schemas_dir = Path(__file__).parent / "schemas"
        self.session_schema = self.schemas_dir / "session_history.schema.json"
        self.data_point_schema = self.schemas_dir / "performance_data_point.schema.json"

    def prepare_filesystem(self):
        """
        Create data directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        """
        for directory in [self.data_dir, self.history_dir, self.reports_dir]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(
        default_factory=lambda: os.getenv("PECS_LOG_LEVEL", "INFO")
    )
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from pecs_analytics.config import config

        window = config.adaptive.window_size
        threshold = config.trend.mastery_threshold

        # Prepare filesystem (call once at startup)
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.adaptive = AdaptiveConfig()
            cls._instance.engagement = EngagementConfig()
            cls._instance.optimizer = OptimizerConfig()
            cls._instance.trend = TrendConfig()
            cls._instance.logging = LoggingConfig()

        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        # Adaptive validation
        adaptive = self.adaptive
        if adaptive.min_array_size < 1:
            errors.append(f"min_array_size must be >= 1, got {adaptive.min_array_size}")

        if adaptive.min_array_size > adaptive.max_array_size:
            errors.append(
                f"min_array_size ({adaptive.min_array_size}) must be <= "
                f"max_array_size ({adaptive.max_array_size})"
            )

        if adaptive.window_size < 1:
            errors.append(f"window_size must be >= 1, got {adaptive.window_size}")

        for name in ("increase_threshold", "decrease_threshold", "target_success_rate"):
            value = getattr(adaptive, name)
            if not (0 <= value <= 1):
                errors.append(f"Adaptive {name} must be in [0, 1], got {value}")

        if adaptive.decrease_threshold >= adaptive.increase_threshold:
            errors.append(
                f"decrease_threshold ({adaptive.decrease_threshold}) must be < "
                f"increase_threshold ({adaptive.increase_threshold})"
            )

        # Engagement validation
        engagement = self.engagement
        if engagement.avg_response_time_ms <= 0:
            errors.append(
                f"avg_response_time_ms must be > 0, got {engagement.avg_response_time_ms}"
            )

        if engagement.optimal_session_duration_ms <= 0:
            errors.append(
                "optimal_session_duration_ms must be > 0, "
                f"got {engagement.optimal_session_duration_ms}"
            )

        if any(weight < 0 for weight in engagement.weights.values()):
            errors.append("Engagement weights must be non-negative")

        if sum(engagement.weights.values()) <= 0:
            errors.append("Engagement weights must not all be zero")

        if not (
            engagement.high_threshold
            > engagement.medium_threshold
            > engagement.low_threshold
        ):
            errors.append("Engagement level thresholds must be strictly decreasing")

        # Optimizer validation
        optimizer = self.optimizer
        if optimizer.absolute_min_duration_ms > optimizer.absolute_max_duration_ms:
            errors.append("absolute_min_duration_ms must be <= absolute_max_duration_ms")

        if not (1 <= optimizer.slot_hours <= 24):
            errors.append(f"slot_hours must be in [1, 24], got {optimizer.slot_hours}")

        # Trend validation
        if not (0 < self.trend.mastery_threshold <= 1):
            errors.append(
                f"mastery_threshold must be in (0, 1], got {self.trend.mastery_threshold}"
            )

        if self.trend.min_data_points < 2:
            errors.append(
                f"Trend min_data_points must be >= 2, got {self.trend.min_data_points}"
            )

        # Path validation
        for schema in (self.paths.session_schema, self.paths.data_point_schema):
            if not schema.exists():
                errors.append(f"Schema not found: {schema}")

        return errors


# Global config instance
config = Config()
