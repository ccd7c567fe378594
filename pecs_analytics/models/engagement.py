"""
Engagement snapshot and prediction records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from .common import InsufficientDataReason, SufficiencyMixin

EngagementLevel = Literal["high", "medium", "low", "critical"]
ActionType = Literal["continue", "change_activity", "take_break", "end_session", "simplify"]
Priority = Literal["low", "medium", "high"]


@dataclass
class EngagementMetrics:
    """
    Point-in-time snapshot of a live session.

    Attributes:
        response_time_ms: Latency of the most recent response
        consecutive_successes: Current success streak
        consecutive_failures: Current failure streak
        time_in_session_ms: Elapsed session time
        activities_completed: Activities finished so far
        prompt_level_changes: Number of prompt level changes so far
    """
    response_time_ms: float
    consecutive_successes: int = 0
    consecutive_failures: int = 0
    time_in_session_ms: float = 0.0
    activities_completed: int = 0
    prompt_level_changes: int = 0


@dataclass
class EngagementAction:
    """Suggested next step for the caregiver."""
    type: ActionType
    message: str
    priority: Priority
    break_duration_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "message": self.message, "priority": self.priority}
        if self.break_duration_ms is not None:
            data["break_duration_ms"] = self.break_duration_ms
        return data


@dataclass
class EngagementPrediction(SufficiencyMixin):
    """Derived engagement estimate, recomputed on every predict() call."""
    level: EngagementLevel
    score: int
    confidence: float
    suggested_action: EngagementAction
    reasoning: str
    sub_scores: Dict[str, float] = field(default_factory=dict)
    sample_size: int = 0
    insufficient_data: Optional[InsufficientDataReason] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "score": self.score,
            "confidence": self.confidence,
            "suggested_action": self.suggested_action.to_dict(),
            "reasoning": self.reasoning,
            "sub_scores": dict(self.sub_scores),
            "sample_size": self.sample_size,
            "insufficient_data": self.insufficient_data.value if self.insufficient_data else None,
        }
