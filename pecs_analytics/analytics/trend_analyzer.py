"""
Performance Trend Analyzer.

Analyzes longitudinal per-session data to identify trends, predict phase
advancement and summarise progress for parents and therapists.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from ..config import TrendConfig, config
from ..models.common import InsufficientDataReason, ensure_utc, utc_now
from ..models.performance import (
    PHASE_CATEGORIES,
    ComprehensiveAnalysis,
    PerformanceDataPoint,
    PhasePrediction,
    SkillBreakdown,
    SkillLevel,
    SkillTrend,
    TrendAnalysis,
    TrendMetric,
    WeeklyComparison,
    WeekSummary,
)
from ..utils.logger import get_logger
from ..utils.stats import linear_regression, mean

logger = get_logger(__name__)

DAY_SECONDS = 24 * 60 * 60

METRIC_LABELS = {
    "success_rate": "Success rate",
    "response_time": "Response speed",
    "activities": "Activity completion",
}


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / DAY_SECONDS


class TrendAnalyzer:
    """
    Regression-based trend analysis over PerformanceDataPoint records.

    Points are always kept sorted by date ascending; out-of-order input is
    re-sorted rather than rejected.

    Usage:
        analyzer = TrendAnalyzer(points)
        analysis = analyzer.get_comprehensive_analysis(current_phase=2)
        print(analysis.overall_trend.direction)
    """

    def __init__(
        self,
        data: Optional[Iterable[PerformanceDataPoint]] = None,
        settings: Optional[TrendConfig] = None,
    ):
        self.settings = settings if settings is not None else config.trend
        self._points: List[PerformanceDataPoint] = sorted(data or [], key=lambda p: p.date)

    def add_data_point(self, point: PerformanceDataPoint) -> None:
        """Add a point and restore date order."""
        self._points.append(point)
        self._points.sort(key=lambda p: p.date)

    @property
    def data_points(self) -> List[PerformanceDataPoint]:
        """Copy of the points, oldest first."""
        return list(self._points)

    def _phase_points(self, phase: int) -> List[PerformanceDataPoint]:
        return [p for p in self._points if p.phase == phase]

    # ==================== Overall Trend ====================

    def analyze_trend(self, metric: TrendMetric = "success_rate") -> TrendAnalysis:
        """
        Fit a line through the full series of one metric.

        Args:
            metric: "success_rate", "response_time" or "activities"

        Returns:
            TrendAnalysis with the weekly percentage change. For response_time
            a decreasing series counts as improving.
        """
        if metric not in METRIC_LABELS:
            raise ValueError(f"Unknown trend metric: {metric}")

        settings = self.settings

        if len(self._points) < settings.min_data_points:
            return TrendAnalysis(
                direction="stable",
                strength="weak",
                confidence=0.2,
                rate_of_change=0.0,
                insights=["Not enough data yet to determine trends. Keep practicing!"],
                sample_size=len(self._points),
                insufficient_data=InsufficientDataReason.NOT_ENOUGH_DATA_POINTS,
            )

        if metric == "success_rate":
            values = [p.success_rate for p in self._points]
        elif metric == "response_time":
            values = [p.avg_response_time_ms for p in self._points]
        else:
            values = [p.activities_completed for p in self._points]

        fit = linear_regression(values)

        # Normalize slope to weekly change; all points on one instant count as one day
        days_span = _days_between(self._points[0].date, self._points[-1].date)
        if days_span <= 0:
            days_span = 1.0
        weekly_change = (fit.slope * 7 / days_span) * 100

        # For response time, lower is better
        effective_change = -weekly_change if metric == "response_time" else weekly_change

        if effective_change > settings.direction_threshold:
            direction = "improving"
            strength = self._strength(effective_change)
        elif effective_change < -settings.direction_threshold:
            direction = "declining"
            strength = self._strength(-effective_change)
        else:
            direction = "stable"
            strength = "moderate"

        logger.debug(
            "Trend for %s: %s/%s (%.2f%%/week, r2=%.2f)",
            metric, direction, strength, weekly_change, fit.r_squared,
        )

        return TrendAnalysis(
            direction=direction,
            strength=strength,
            confidence=min(0.95, fit.r_squared * 0.8 + 0.2),
            rate_of_change=weekly_change,
            insights=self._trend_insights(direction, strength, metric),
            r_squared=fit.r_squared,
            sample_size=len(values),
        )

    def _strength(self, magnitude: float) -> str:
        if magnitude > self.settings.strong_threshold:
            return "strong"
        if magnitude > self.settings.moderate_threshold:
            return "moderate"
        return "weak"

    @staticmethod
    def _trend_insights(direction: str, strength: str, metric: str) -> List[str]:
        label = METRIC_LABELS[metric]
        insights = []

        if direction == "improving":
            insights.append(f"Great progress! {label} is improving.")
            if strength == "strong":
                insights.append("The current practice approach is working very well!")
        elif direction == "declining":
            insights.append(f"{label} has decreased recently.")
            if strength == "strong":
                insights.append("Consider simplifying activities or taking more breaks.")
            else:
                insights.append("This may be temporary - a slight dip is normal during learning.")
        else:
            insights.append("Performance is consistent - a good foundation to build on!")

        return insights

    # ==================== Phase Advancement ====================

    def predict_phase_advancement(
        self,
        current_phase: int,
        mastery_threshold: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> PhasePrediction:
        """
        Predict when the child may reach mastery in the current phase.

        Args:
            current_phase: Phase being practised
            mastery_threshold: Success rate counted as mastery (default: config)
            now: Reference time for the predicted date (default: now)

        Returns:
            PhasePrediction. A non-positive slope yields no date.
        """
        settings = self.settings
        if mastery_threshold is None:
            mastery_threshold = settings.mastery_threshold
        now = ensure_utc(now) if now is not None else utc_now()

        phase_data = self._phase_points(current_phase)

        if len(phase_data) < settings.min_phase_data_points:
            return PhasePrediction(
                current_phase=current_phase,
                predicted_next_phase_date=None,
                days_to_next_phase=None,
                confidence=0.2,
                factors=["Need more practice data to make predictions"],
                sample_size=len(phase_data),
                insufficient_data=InsufficientDataReason.NOT_ENOUGH_PHASE_DATA,
            )

        success_rates = [p.success_rate for p in phase_data]
        latest_rate = success_rates[-1]
        slope = linear_regression(success_rates).slope

        if latest_rate >= mastery_threshold:
            return PhasePrediction(
                current_phase=current_phase,
                predicted_next_phase_date=now,
                days_to_next_phase=0,
                confidence=0.8,
                factors=[
                    f"Already performing at {round(latest_rate * 100)}% success rate",
                    "Ready to try the next phase!",
                ],
                sample_size=len(phase_data),
            )

        if slope <= 0:
            return PhasePrediction(
                current_phase=current_phase,
                predicted_next_phase_date=None,
                days_to_next_phase=None,
                confidence=0.4,
                factors=[
                    "Current progress is flat or declining",
                    "Focus on building consistency before advancing",
                ],
                sample_size=len(phase_data),
            )

        # Extrapolate the per-session slope onto the calendar; a same-day span counts as one day
        rate_needed = mastery_threshold - latest_rate
        days_span = max(_days_between(phase_data[0].date, phase_data[-1].date), 1.0)
        days_per_data_point = days_span / (len(phase_data) - 1)
        days_to_mastery = math.ceil((rate_needed / slope) * days_per_data_point)

        return PhasePrediction(
            current_phase=current_phase,
            predicted_next_phase_date=now + timedelta(days=days_to_mastery),
            days_to_next_phase=days_to_mastery,
            confidence=min(0.7, 0.3 + len(phase_data) * 0.05),
            factors=[
                f"Current success rate: {round(latest_rate * 100)}%",
                f"Improving at {slope * 100:.1f}% per session",
                f"Target: {round(mastery_threshold * 100)}% mastery",
            ],
            sample_size=len(phase_data),
        )

    # ==================== Skill Breakdown ====================

    def analyze_skill_breakdown(self) -> List[SkillBreakdown]:
        """Level, progress and recent trend for each of the six PECS phases."""
        breakdown = []

        for phase, category in PHASE_CATEGORIES.items():
            phase_data = self._phase_points(phase)
            level = self._skill_level(phase_data)
            trend = self._skill_trend(phase_data)

            breakdown.append(
                SkillBreakdown(
                    phase=phase,
                    category=category,
                    level=level,
                    progress=round(mean([p.success_rate for p in phase_data]) * 100),
                    recent_trend=trend,
                    recommendations=self._skill_recommendations(phase, level, trend),
                    sample_size=len(phase_data),
                )
            )

        return breakdown

    def _skill_level(self, phase_data: List[PerformanceDataPoint]) -> SkillLevel:
        if not phase_data:
            return "not_started"

        avg_success = mean([p.success_rate for p in phase_data])
        if avg_success >= self.settings.mastered_success_rate:
            return "mastered"
        if avg_success >= self.settings.developing_success_rate:
            return "developing"
        return "emerging"

    def _skill_trend(self, phase_data: List[PerformanceDataPoint]) -> SkillTrend:
        settings = self.settings
        if len(phase_data) < settings.min_phase_data_points:
            return "stable"

        recent = phase_data[-settings.skill_trend_window:]
        slope = linear_regression([p.success_rate for p in recent]).slope

        if slope > settings.skill_trend_slope:
            return "up"
        if slope < -settings.skill_trend_slope:
            return "down"
        return "stable"

    @staticmethod
    def _skill_recommendations(phase: int, level: SkillLevel, trend: SkillTrend) -> List[str]:
        if level == "not_started":
            return [f"Ready to begin Phase {phase} activities"]

        if level == "emerging":
            recommendations = ["Continue regular practice with support"]
            if trend == "down":
                recommendations.append("Consider more frequent shorter sessions")
            return recommendations

        if level == "developing":
            recommendations = ["Great progress! Keep practicing"]
            if trend == "up":
                recommendations.append("May be ready for new challenges soon")
            return recommendations

        return ["Excellent mastery achieved!", "Maintain skills while advancing to next phase"]

    # ==================== Weekly Comparison ====================

    def _week_summary(self, points: List[PerformanceDataPoint]) -> WeekSummary:
        return WeekSummary(
            sessions=len(points),
            success_rate=mean([p.success_rate for p in points]),
            # Rough estimate: no per-session duration in the data point
            minutes=sum(p.activities_completed * self.settings.minutes_per_activity for p in points),
        )

    def get_weekly_comparison(self, now: Optional[datetime] = None) -> WeeklyComparison:
        """
        Compare the trailing 7 days with the 7 days before them.

        Args:
            now: End of the current week window (default: now)
        """
        now = ensure_utc(now) if now is not None else utc_now()
        one_week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)

        this_week = self._week_summary(
            [p for p in self._points if one_week_ago <= p.date <= now]
        )
        last_week = self._week_summary(
            [p for p in self._points if two_weeks_ago <= p.date < one_week_ago]
        )

        return WeeklyComparison(
            this_week=this_week,
            last_week=last_week,
            change=WeekSummary(
                sessions=this_week.sessions - last_week.sessions,
                success_rate=this_week.success_rate - last_week.success_rate,
                minutes=this_week.minutes - last_week.minutes,
            ),
        )

    # ==================== Comprehensive ====================

    def get_comprehensive_analysis(
        self,
        current_phase: int,
        now: Optional[datetime] = None,
    ) -> ComprehensiveAnalysis:
        """
        Compose trend, prediction, breakdown and weekly comparison.

        Args:
            current_phase: Phase being practised
            now: Reference time (default: now)

        Returns:
            ComprehensiveAnalysis with short free-text recommendations
        """
        overall_trend = self.analyze_trend("success_rate")
        phase_prediction = self.predict_phase_advancement(current_phase, now=now)
        skill_breakdown = self.analyze_skill_breakdown()
        weekly_comparison = self.get_weekly_comparison(now)

        recommendations = []

        if overall_trend.direction == "declining":
            recommendations.append("Consider shorter, more frequent practice sessions")

        # Zero days means mastery already reached, which is reported elsewhere
        days = phase_prediction.days_to_next_phase
        if days and days <= 7:
            recommendations.append(f"Close to advancing to Phase {current_phase + 1}!")

        developing = [s.category for s in skill_breakdown if s.level == "developing"]
        if developing:
            recommendations.append(f"Focus on: {', '.join(developing)}")

        if weekly_comparison.change.sessions < 0:
            recommendations.append("Try to maintain consistent practice frequency")

        return ComprehensiveAnalysis(
            overall_trend=overall_trend,
            phase_prediction=phase_prediction,
            skill_breakdown=skill_breakdown,
            weekly_comparison=weekly_comparison,
            recommendations=recommendations,
        )


def create_trend_analyzer(
    data: Optional[Iterable[PerformanceDataPoint]] = None,
    settings: Optional[TrendConfig] = None,
) -> TrendAnalyzer:
    """Factory for a per-child analyzer."""
    return TrendAnalyzer(data, settings)
