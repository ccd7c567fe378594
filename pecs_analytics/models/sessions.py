"""
Session history records and session optimizer results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .common import InsufficientDataReason, SufficiencyMixin, ensure_utc


@dataclass
class SessionHistory:
    """
    One completed practice session, as read from storage.

    Attributes:
        id: Session identifier
        date: When the session started (aware datetime)
        day_of_week: 0 = Sunday ... 6 = Saturday
        hour_of_day: 0-23, local to the family
        duration_ms: Session length
        activities_completed: Activities finished
        success_rate: Share of successful trials (0-1)
        avg_response_time_ms: Mean response latency
        phase: PECS phase practised (1-6)
        completed_successfully: Whether the session ended normally
    """
    id: str
    date: datetime
    day_of_week: int
    hour_of_day: int
    duration_ms: float
    activities_completed: int
    success_rate: float
    avg_response_time_ms: float
    phase: int
    completed_successfully: bool = True

    def __post_init__(self):
        self.date = ensure_utc(self.date)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "day_of_week": self.day_of_week,
            "hour_of_day": self.hour_of_day,
            "duration_ms": self.duration_ms,
            "activities_completed": self.activities_completed,
            "success_rate": self.success_rate,
            "avg_response_time_ms": self.avg_response_time_ms,
            "phase": self.phase,
            "completed_successfully": self.completed_successfully,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SessionHistory:
        """Build from a dictionary produced by to_dict()."""
        return cls(
            id=data["id"],
            date=ensure_utc(data["date"]),
            day_of_week=int(data["day_of_week"]),
            hour_of_day=int(data["hour_of_day"]),
            duration_ms=data["duration_ms"],
            activities_completed=int(data["activities_completed"]),
            success_rate=float(data["success_rate"]),
            avg_response_time_ms=data["avg_response_time_ms"],
            phase=int(data["phase"]),
            completed_successfully=bool(data.get("completed_successfully", True)),
        )


@dataclass
class OptimalTimeSlot:
    """A weekday/2-hour block ranked by historical success."""
    day_of_week: int
    hour_of_day: int
    confidence: float
    average_success_rate: float
    sample_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_of_week": self.day_of_week,
            "hour_of_day": self.hour_of_day,
            "confidence": self.confidence,
            "average_success_rate": self.average_success_rate,
            "sample_size": self.sample_size,
        }


@dataclass
class SessionDurationRecommendation(SufficiencyMixin):
    optimal_duration_ms: float
    min_duration_ms: float
    max_duration_ms: float
    reasoning: str
    sample_size: int = 0
    insufficient_data: Optional[InsufficientDataReason] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "optimal_duration_ms": self.optimal_duration_ms,
            "min_duration_ms": self.min_duration_ms,
            "max_duration_ms": self.max_duration_ms,
            "reasoning": self.reasoning,
            "sample_size": self.sample_size,
            "insufficient_data": self.insufficient_data.value if self.insufficient_data else None,
        }


@dataclass
class SessionSequenceRecommendation:
    phases: List[int]
    reasoning: str
    estimated_duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phases": list(self.phases),
            "reasoning": self.reasoning,
            "estimated_duration_ms": self.estimated_duration_ms,
        }


@dataclass
class WeeklyGoal:
    sessions_target: int
    minutes_target: int


@dataclass
class WeeklySchedule(SufficiencyMixin):
    suggested_times: List[OptimalTimeSlot]
    sessions_per_day: int
    rest_days_suggested: List[int]
    weekly_goal: WeeklyGoal
    insufficient_data: Optional[InsufficientDataReason] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggested_times": [slot.to_dict() for slot in self.suggested_times],
            "sessions_per_day": self.sessions_per_day,
            "rest_days_suggested": list(self.rest_days_suggested),
            "weekly_goal": {
                "sessions_target": self.weekly_goal.sessions_target,
                "minutes_target": self.weekly_goal.minutes_target,
            },
            "insufficient_data": self.insufficient_data.value if self.insufficient_data else None,
        }


@dataclass
class NextSessionRecommendation:
    suggested_time: str
    suggested_duration: str
    suggested_phases: List[int] = field(default_factory=list)
    confidence: float = 0.3

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggested_time": self.suggested_time,
            "suggested_duration": self.suggested_duration,
            "suggested_phases": list(self.suggested_phases),
            "confidence": self.confidence,
        }
