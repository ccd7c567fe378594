"""
Analytics for PECS practice.

This module contains the calculation core:
- adaptive: Array-size controller driven by rolling success rate
- engagement: Weighted heuristic engagement predictor
- session_optimizer: Time slot, duration and weekly schedule recommendations
- trend_analyzer: Regression-based trends and phase advancement predictions
- recommendations: Rule-based recommendation cards and session plans
- streaks: Daily practice streak status
"""

from .adaptive import (
    calculate_avg_response_time,
    calculate_success_rate,
    create_adaptive_state,
    get_new_difficulty,
    get_performance_summary,
    record_trial,
    should_adjust_difficulty,
    update_adaptive_state,
)
from .engagement import EngagementPredictor, create_engagement_predictor
from .session_optimizer import SessionOptimizer, create_session_optimizer
from .trend_analyzer import TrendAnalyzer, create_trend_analyzer
from .recommendations import (
    generate_recommendations,
    generate_session_plan,
    get_card_recommendations,
)
from .streaks import get_streak_status_message, is_streak_at_risk, is_streak_broken

__all__ = [
    # Adaptive difficulty
    "calculate_success_rate",
    "calculate_avg_response_time",
    "create_adaptive_state",
    "should_adjust_difficulty",
    "get_new_difficulty",
    "update_adaptive_state",
    "record_trial",
    "get_performance_summary",
    # Engagement
    "EngagementPredictor",
    "create_engagement_predictor",
    # Sessions and trends
    "SessionOptimizer",
    "create_session_optimizer",
    "TrendAnalyzer",
    "create_trend_analyzer",
    # Recommendations
    "generate_recommendations",
    "generate_session_plan",
    "get_card_recommendations",
    # Streaks
    "is_streak_at_risk",
    "is_streak_broken",
    "get_streak_status_message",
]
