"""
Trial and adaptive-state records for the difficulty controller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Tuple

from .common import InsufficientDataReason, SufficiencyMixin

AdjustmentDirection = Literal["increase", "decrease", "none"]
PerformanceTrend = Literal["improving", "declining", "stable"]


@dataclass(frozen=True)
class TrialResult:
    """
    One discrimination attempt.

    Attributes:
        success: Whether the child picked the target card
        response_time_ms: Latency from presentation to selection
        difficulty: Array size shown for this trial
        timestamp: Epoch milliseconds when the trial was recorded
    """
    success: bool
    response_time_ms: float
    difficulty: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "response_time_ms": self.response_time_ms,
            "difficulty": self.difficulty,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class AdaptiveState:
    """
    Difficulty controller state for one practice activity.

    Replaced, never mutated: update_adaptive_state() returns a new instance.
    """
    trial_history: Tuple[TrialResult, ...] = ()
    current_difficulty: int = 2
    last_adjustment: Optional[int] = None
    total_trials: int = 0
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "trial_history": [t.to_dict() for t in self.trial_history],
            "current_difficulty": self.current_difficulty,
            "last_adjustment": self.last_adjustment,
            "total_trials": self.total_trials,
            "consecutive_correct": self.consecutive_correct,
            "consecutive_incorrect": self.consecutive_incorrect,
        }


@dataclass
class AdjustmentDecision:
    """Outcome of the adjustment policy for one state."""
    adjust: bool
    direction: AdjustmentDirection
    reason: str


@dataclass
class DifficultyChange:
    """What the last recorded trial did to the difficulty."""
    changed: bool
    new_difficulty: int
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "changed": self.changed,
            "new_difficulty": self.new_difficulty,
            "message": self.message,
        }


@dataclass
class PerformanceSummary(SufficiencyMixin):
    """Rolling-window performance for the current activity."""
    success_rate: float
    avg_response_time: float
    current_difficulty: int
    total_trials: int
    trend: PerformanceTrend
    sample_size: int = 0
    insufficient_data: Optional[InsufficientDataReason] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success_rate": self.success_rate,
            "avg_response_time": self.avg_response_time,
            "current_difficulty": self.current_difficulty,
            "total_trials": self.total_trials,
            "trend": self.trend,
            "sample_size": self.sample_size,
            "insufficient_data": self.insufficient_data.value if self.insufficient_data else None,
        }
