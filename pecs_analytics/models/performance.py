"""
Longitudinal performance records and trend analyzer results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from .common import InsufficientDataReason, SufficiencyMixin, ensure_utc

TrendDirection = Literal["improving", "stable", "declining"]
TrendStrength = Literal["strong", "moderate", "weak"]
TrendMetric = Literal["success_rate", "response_time", "activities"]
SkillLevel = Literal["mastered", "developing", "emerging", "not_started"]
SkillTrend = Literal["up", "stable", "down"]

# PECS phase -> skill category
PHASE_CATEGORIES = {
    1: "Initiation",
    2: "Distance & Persistence",
    3: "Discrimination",
    4: "Sentence Building",
    5: "Responsive Communication",
    6: "Commenting",
}


@dataclass
class PerformanceDataPoint:
    """
    Aggregate performance of one session for trend analysis.

    Attributes:
        date: Session date (aware datetime)
        success_rate: Share of successful trials (0-1)
        avg_response_time_ms: Mean response latency
        phase: PECS phase (1-6)
        prompt_level: Prompting level used (e.g. "independent", "gestural")
        activities_completed: Activities finished
    """
    date: datetime
    success_rate: float
    avg_response_time_ms: float
    phase: int
    prompt_level: str = "independent"
    activities_completed: int = 0

    def __post_init__(self):
        self.date = ensure_utc(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "success_rate": self.success_rate,
            "avg_response_time_ms": self.avg_response_time_ms,
            "phase": self.phase,
            "prompt_level": self.prompt_level,
            "activities_completed": self.activities_completed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PerformanceDataPoint:
        return cls(
            date=ensure_utc(data["date"]),
            success_rate=float(data["success_rate"]),
            avg_response_time_ms=data["avg_response_time_ms"],
            phase=int(data["phase"]),
            prompt_level=data.get("prompt_level", "independent"),
            activities_completed=int(data.get("activities_completed", 0)),
        )


@dataclass
class TrendAnalysis(SufficiencyMixin):
    direction: TrendDirection
    strength: TrendStrength
    confidence: float
    rate_of_change: float  # % change per week
    insights: List[str]
    r_squared: float = 0.0
    sample_size: int = 0
    insufficient_data: Optional[InsufficientDataReason] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction,
            "strength": self.strength,
            "confidence": self.confidence,
            "rate_of_change": self.rate_of_change,
            "insights": list(self.insights),
            "r_squared": self.r_squared,
            "sample_size": self.sample_size,
            "insufficient_data": self.insufficient_data.value if self.insufficient_data else None,
        }


@dataclass
class PhasePrediction(SufficiencyMixin):
    current_phase: int
    predicted_next_phase_date: Optional[datetime]
    days_to_next_phase: Optional[int]
    confidence: float
    factors: List[str]
    sample_size: int = 0
    insufficient_data: Optional[InsufficientDataReason] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_phase": self.current_phase,
            "predicted_next_phase_date": (
                self.predicted_next_phase_date.isoformat()
                if self.predicted_next_phase_date
                else None
            ),
            "days_to_next_phase": self.days_to_next_phase,
            "confidence": self.confidence,
            "factors": list(self.factors),
            "sample_size": self.sample_size,
            "insufficient_data": self.insufficient_data.value if self.insufficient_data else None,
        }


@dataclass
class SkillBreakdown:
    phase: int
    category: str
    level: SkillLevel
    progress: int  # 0-100
    recent_trend: SkillTrend
    recommendations: List[str] = field(default_factory=list)
    sample_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "category": self.category,
            "level": self.level,
            "progress": self.progress,
            "recent_trend": self.recent_trend,
            "recommendations": list(self.recommendations),
            "sample_size": self.sample_size,
        }


@dataclass
class WeekSummary:
    sessions: int
    success_rate: float
    minutes: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessions": self.sessions,
            "success_rate": self.success_rate,
            "minutes": self.minutes,
        }


@dataclass
class WeeklyComparison:
    this_week: WeekSummary
    last_week: WeekSummary
    change: WeekSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "this_week": self.this_week.to_dict(),
            "last_week": self.last_week.to_dict(),
            "change": self.change.to_dict(),
        }


@dataclass
class ComprehensiveAnalysis:
    overall_trend: TrendAnalysis
    phase_prediction: PhasePrediction
    skill_breakdown: List[SkillBreakdown]
    weekly_comparison: WeeklyComparison
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_trend": self.overall_trend.to_dict(),
            "phase_prediction": self.phase_prediction.to_dict(),
            "skill_breakdown": [s.to_dict() for s in self.skill_breakdown],
            "weekly_comparison": self.weekly_comparison.to_dict(),
            "recommendations": list(self.recommendations),
        }
