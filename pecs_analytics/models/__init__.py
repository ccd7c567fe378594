"""
Data models for PECS analytics.

This module contains the plain records exchanged with callers:
- Trials and adaptive state (difficulty controller)
- Engagement snapshots and predictions
- Session history and optimizer results
- Performance data points and trend results
- Child performance summaries and recommendations
"""

from .common import DAY_NAMES, InsufficientDataReason
from .trials import (
    AdaptiveState,
    AdjustmentDecision,
    DifficultyChange,
    PerformanceSummary,
    TrialResult,
)
from .engagement import EngagementAction, EngagementMetrics, EngagementPrediction
from .sessions import (
    NextSessionRecommendation,
    OptimalTimeSlot,
    SessionDurationRecommendation,
    SessionHistory,
    SessionSequenceRecommendation,
    WeeklyGoal,
    WeeklySchedule,
)
from .performance import (
    PHASE_CATEGORIES,
    ComprehensiveAnalysis,
    PerformanceDataPoint,
    PhasePrediction,
    SkillBreakdown,
    TrendAnalysis,
    WeeklyComparison,
    WeekSummary,
)
from .child import (
    CardInfo,
    CardPerformance,
    CardRecommendations,
    ChildPerformance,
    PhaseProgress,
    PlannedActivity,
    SessionPlan,
    SessionRecommendation,
    StreakInfo,
    StreakStatus,
)

__all__ = [
    "DAY_NAMES",
    "InsufficientDataReason",
    # Difficulty
    "TrialResult",
    "AdaptiveState",
    "AdjustmentDecision",
    "DifficultyChange",
    "PerformanceSummary",
    # Engagement
    "EngagementMetrics",
    "EngagementAction",
    "EngagementPrediction",
    # Sessions
    "SessionHistory",
    "OptimalTimeSlot",
    "SessionDurationRecommendation",
    "SessionSequenceRecommendation",
    "WeeklyGoal",
    "WeeklySchedule",
    "NextSessionRecommendation",
    # Trends
    "PHASE_CATEGORIES",
    "PerformanceDataPoint",
    "TrendAnalysis",
    "PhasePrediction",
    "SkillBreakdown",
    "WeekSummary",
    "WeeklyComparison",
    "ComprehensiveAnalysis",
    # Recommendations
    "ChildPerformance",
    "PhaseProgress",
    "CardPerformance",
    "CardInfo",
    "SessionRecommendation",
    "PlannedActivity",
    "SessionPlan",
    "CardRecommendations",
    "StreakInfo",
    "StreakStatus",
]
