"""
Child-level performance summary and rule-based recommendation records.

Success rates in this module are percentages (0-100) and response times are
seconds, matching the dashboard summary they are built from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Union

RecommendationType = Literal["phase", "cards", "duration", "difficulty", "break", "reinforcement"]
Priority = Literal["high", "medium", "low"]


@dataclass
class PhaseProgress:
    phase: int
    success_rate: float  # 0-100
    sessions_completed: int


@dataclass
class CardPerformance:
    card_id: str
    success_rate: float  # 0-100
    times_used: int


@dataclass
class CardInfo:
    id: str
    category: str
    label: str


@dataclass
class ChildPerformance:
    """Dashboard summary of one child's recent practice."""
    current_phase: int
    recent_success_rate: float  # 0-100
    avg_response_time: float  # seconds
    streak_days: int = 0
    total_sessions: int = 0
    last_session_date: Optional[Union[datetime, str]] = None
    phase_progress: List[PhaseProgress] = field(default_factory=list)
    recent_cards: List[CardPerformance] = field(default_factory=list)
    preferred_categories: List[str] = field(default_factory=list)
    challenging_cards: List[str] = field(default_factory=list)


@dataclass
class SessionRecommendation:
    id: str
    type: RecommendationType
    priority: Priority
    title: str
    description: str
    action_text: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "action_text": self.action_text,
            "data": dict(self.data),
        }


@dataclass
class PlannedActivity:
    type: str
    description: str
    duration: int  # minutes


@dataclass
class SessionPlan:
    recommended_phase: int
    recommended_duration: int  # minutes
    main_activities: List[PlannedActivity]
    suggested_cards: List[str]
    difficulty_level: int
    warm_up_activity: Optional[str] = None
    break_interval: Optional[int] = None  # minutes between breaks

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended_phase": self.recommended_phase,
            "recommended_duration": self.recommended_duration,
            "warm_up_activity": self.warm_up_activity,
            "main_activities": [
                {"type": a.type, "description": a.description, "duration": a.duration}
                for a in self.main_activities
            ],
            "suggested_cards": list(self.suggested_cards),
            "difficulty_level": self.difficulty_level,
            "break_interval": self.break_interval,
        }


@dataclass
class CardRecommendations:
    high_success: List[CardInfo]
    needs_practice: List[CardInfo]
    new_to_try: List[CardInfo]


@dataclass
class StreakInfo:
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[Union[date, datetime, str]] = None
    streak_protected: bool = False


@dataclass
class StreakStatus:
    message: str
    type: Literal["success", "warning", "danger", "neutral"]
