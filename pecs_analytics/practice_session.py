"""
Practice Session - owns the live adaptive and engagement state of one child.

Wraps the pure difficulty controller and a per-session engagement predictor,
and turns the finished session into history records for the optimizer and
trend analyzer.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .analytics.adaptive import create_adaptive_state, get_performance_summary, update_adaptive_state
from .analytics.engagement import EngagementPredictor
from .config import AdaptiveConfig, EngagementConfig, config
from .models.common import day_of_week, ensure_utc, utc_now
from .models.engagement import EngagementMetrics, EngagementPrediction
from .models.performance import PerformanceDataPoint
from .models.sessions import SessionHistory
from .models.trials import DifficultyChange, PerformanceSummary
from .utils.logger import get_logger

logger = get_logger(__name__)

DifficultyCallback = Callable[[int, str], None]


class PracticeSession:
    """
    One child practising one PECS phase.

    Features:
    - Record trials and adapt the array size
    - Predict engagement from the live session
    - Produce SessionHistory / PerformanceDataPoint records on completion

    Usage:
        session = PracticeSession("child-1", phase=3)
        change = session.record_trial(True, 2100)
        prediction = session.predict_engagement()
        history, point = session.complete()
    """

    def __init__(
        self,
        child_id: str,
        phase: int = 1,
        initial_difficulty: int = 2,
        session_id: Optional[str] = None,
        started_at: Optional[datetime] = None,
        prompt_level: str = "independent",
        settings: Optional[AdaptiveConfig] = None,
        baseline: Optional[EngagementConfig] = None,
        on_difficulty_change: Optional[DifficultyCallback] = None,
    ):
        """
        Initialize practice session.

        Args:
            child_id: Child practising
            phase: PECS phase (1-6)
            initial_difficulty: Starting array size
            session_id: Session ID (auto-generated if None)
            started_at: Session start (default: now)
            prompt_level: Prompting level recorded on the data point
            settings: Adaptive settings (default: config.adaptive)
            baseline: Engagement baseline (default: copy of config.engagement)
            on_difficulty_change: Called with (new_difficulty, message) after an adjustment

        Raises:
            ValueError: If phase is outside 1-6
        """
        if not 1 <= phase <= 6:
            raise ValueError(f"Phase must be between 1 and 6, got {phase}")

        self.child_id = child_id
        self.session_id = session_id or f"ps-{uuid.uuid4()}"
        self.phase = phase
        self.prompt_level = prompt_level
        self.settings = settings if settings is not None else config.adaptive
        self.initial_difficulty = initial_difficulty
        self.on_difficulty_change = on_difficulty_change

        self.started_at = ensure_utc(started_at) if started_at is not None else utc_now()
        self.completed_at: Optional[datetime] = None

        self.state = create_adaptive_state(initial_difficulty, self.settings)
        self.engagement = EngagementPredictor(baseline)

        # Whole-session counters (trial history in the state is capped)
        self.trials = 0
        self.successes = 0
        self.total_response_time_ms = 0.0
        self.difficulty_changes = 0
        self.prompt_level_changes = 0
        self.consecutive_successes = 0
        self.consecutive_failures = 0
        self.last_response_time_ms = 0.0

    @property
    def current_difficulty(self) -> int:
        return self.state.current_difficulty

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def _check_active(self):
        if self.is_completed:
            raise ValueError(f"Session {self.session_id} is already completed")

    def record_trial(
        self,
        success: bool,
        response_time_ms: float,
        timestamp: Optional[int] = None,
    ) -> DifficultyChange:
        """
        Record one trial at the current difficulty.

        Args:
            success: Whether the child picked the target card
            response_time_ms: Response latency
            timestamp: Epoch milliseconds (default: now)

        Returns:
            DifficultyChange describing any adjustment

        Raises:
            ValueError: If the response time is negative or the session is completed
        """
        self._check_active()
        if response_time_ms < 0:
            raise ValueError(f"Response time cannot be negative: {response_time_ms}")

        self.state, change = update_adaptive_state(
            self.state,
            success,
            response_time_ms,
            settings=self.settings,
            timestamp=timestamp,
        )

        self.trials += 1
        self.total_response_time_ms += response_time_ms
        self.last_response_time_ms = response_time_ms
        if success:
            self.successes += 1
            self.consecutive_successes += 1
            self.consecutive_failures = 0
        else:
            self.consecutive_successes = 0
            self.consecutive_failures += 1

        if change.changed:
            self.difficulty_changes += 1
            logger.info(
                "Session %s: difficulty now %d (%s)",
                self.session_id, change.new_difficulty, change.message,
            )
            if self.on_difficulty_change:
                self.on_difficulty_change(change.new_difficulty, change.message)

        return change

    def set_difficulty(self, difficulty: int):
        """Manually set the array size (clamped into bounds)."""
        self._check_active()
        self.state = replace(self.state, current_difficulty=self.settings.clamp(difficulty))

    def set_prompt_level(self, prompt_level: str) -> bool:
        """
        Switch the prompting level used for the rest of the session.

        Args:
            prompt_level: New level, e.g. "independent", "gestural", "physical"

        Returns:
            True if the level actually changed
        """
        self._check_active()
        if prompt_level == self.prompt_level:
            return False

        logger.info(
            "Session %s: prompt level %s -> %s", self.session_id, self.prompt_level, prompt_level
        )
        self.prompt_level = prompt_level
        self.prompt_level_changes += 1
        return True

    def reset(self, initial_difficulty: Optional[int] = None):
        """
        Start over with a fresh adaptive state and engagement history.

        Args:
            initial_difficulty: New starting difficulty (default: the original one)
        """
        if initial_difficulty is not None:
            self.initial_difficulty = initial_difficulty

        self.state = create_adaptive_state(self.initial_difficulty, self.settings)
        self.engagement.reset()
        self.trials = 0
        self.successes = 0
        self.total_response_time_ms = 0.0
        self.difficulty_changes = 0
        self.prompt_level_changes = 0
        self.consecutive_successes = 0
        self.consecutive_failures = 0
        self.last_response_time_ms = 0.0
        self.completed_at = None

    def get_performance(self) -> PerformanceSummary:
        """Summary over the configured window."""
        return get_performance_summary(self.state, self.settings.window_size, settings=self.settings)

    @property
    def success_rate(self) -> float:
        """Whole-session success rate (0-1)."""
        return self.successes / self.trials if self.trials else 0.0

    @property
    def avg_response_time_ms(self) -> float:
        return self.total_response_time_ms / self.trials if self.trials else 0.0

    def elapsed_ms(self, now: Optional[datetime] = None) -> float:
        now = ensure_utc(now) if now is not None else utc_now()
        return max(0.0, (now - self.started_at).total_seconds() * 1000)

    def current_metrics(self, now: Optional[datetime] = None) -> EngagementMetrics:
        """Engagement snapshot of the live session."""
        return EngagementMetrics(
            response_time_ms=self.last_response_time_ms,
            consecutive_successes=self.consecutive_successes,
            consecutive_failures=self.consecutive_failures,
            time_in_session_ms=self.elapsed_ms(now),
            activities_completed=self.trials,
            prompt_level_changes=self.prompt_level_changes,
        )

    def predict_engagement(self, now: Optional[datetime] = None) -> EngagementPrediction:
        """Score engagement for the current moment of the session."""
        return self.engagement.predict(self.current_metrics(now))

    def complete(
        self,
        ended_at: Optional[datetime] = None,
        completed_successfully: bool = True,
        local_start: Optional[datetime] = None,
    ) -> tuple[SessionHistory, PerformanceDataPoint]:
        """
        Finish the session and build its history records.

        Args:
            ended_at: Session end (default: now)
            completed_successfully: False if the session was abandoned
            local_start: Start time in the family's local time, used for the
                weekday/hour slot (default: started_at in the host timezone)

        Returns:
            Tuple of (SessionHistory, PerformanceDataPoint)

        Raises:
            ValueError: If no trials were recorded or the session is completed
        """
        self._check_active()
        if self.trials == 0:
            raise ValueError(f"Session {self.session_id} has no trials to complete")

        self.completed_at = ensure_utc(ended_at) if ended_at is not None else utc_now()
        local = local_start if local_start is not None else self.started_at.astimezone()

        history = SessionHistory(
            id=self.session_id,
            date=self.started_at,
            day_of_week=day_of_week(local),
            hour_of_day=local.hour,
            duration_ms=self.elapsed_ms(self.completed_at),
            activities_completed=self.trials,
            success_rate=self.success_rate,
            avg_response_time_ms=self.avg_response_time_ms,
            phase=self.phase,
            completed_successfully=completed_successfully,
        )
        point = PerformanceDataPoint(
            date=self.started_at,
            success_rate=self.success_rate,
            avg_response_time_ms=self.avg_response_time_ms,
            phase=self.phase,
            prompt_level=self.prompt_level,
            activities_completed=self.trials,
        )

        logger.info(
            "Session %s completed: %d trials, %.0f%% success",
            self.session_id, self.trials, self.success_rate * 100,
        )
        return history, point

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "session_id": self.session_id,
            "child_id": self.child_id,
            "phase": self.phase,
            "prompt_level": self.prompt_level,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "current_difficulty": self.current_difficulty,
            "trials": self.trials,
            "successes": self.successes,
            "success_rate": self.success_rate,
            "avg_response_time_ms": self.avg_response_time_ms,
            "difficulty_changes": self.difficulty_changes,
            "prompt_level_changes": self.prompt_level_changes,
            "adaptive_state": self.state.to_dict(),
        }
