"""
Engagement Prediction System.

Analyzes live session patterns to predict when a child might lose focus and
suggests breaks or activity changes.

Each EngagementPredictor tracks exactly one ongoing session. Create one per
child session (see create_engagement_predictor or PracticeSession); there is
no shared module-level instance.
"""

from __future__ import annotations

from collections import deque
from dataclasses import replace
from typing import Deque, Dict, Optional

from ..config import EngagementConfig, config
from ..models.common import InsufficientDataReason
from ..models.engagement import (
    EngagementAction,
    EngagementLevel,
    EngagementMetrics,
    EngagementPrediction,
)
from ..utils.logger import get_logger
from ..utils.stats import mean, variance

logger = get_logger(__name__)


class EngagementPredictor:
    """
    Weighted heuristic engagement scorer with a short rolling history.

    Features:
    - Five sub-scores (response, success, fatigue, volume, trend)
    - Deterministic action table keyed by engagement level
    - Confidence that grows with history and score consistency
    """

    def __init__(self, baseline: Optional[EngagementConfig] = None):
        """
        Initialize predictor.

        Args:
            baseline: Baseline metrics and weights (default: copy of config.engagement)
        """
        if baseline is None:
            baseline = replace(config.engagement, weights=dict(config.engagement.weights))
        self.baseline = baseline
        self._recent_metrics: Deque[EngagementMetrics] = deque(maxlen=self.baseline.history_size)
        self._recent_scores: Deque[int] = deque(maxlen=self.baseline.history_size)

    @property
    def history_length(self) -> int:
        """Number of snapshots currently retained."""
        return len(self._recent_metrics)

    def predict(self, metrics: EngagementMetrics) -> EngagementPrediction:
        """
        Predict current engagement level from a metrics snapshot.

        Args:
            metrics: Current session snapshot

        Returns:
            EngagementPrediction; the snapshot is then added to the rolling history
        """
        scores = self._calculate_scores(metrics)
        overall = self._calculate_overall_score(scores)
        level = self._score_to_level(overall)
        action = self._determine_action(level, scores, metrics)
        confidence = self._calculate_confidence()
        sample_size = len(self._recent_metrics)

        previous_level = (
            self._score_to_level(self._recent_scores[-1]) if self._recent_scores else None
        )
        if previous_level is not None and previous_level != level:
            logger.info("Engagement changed from %s to %s (score %d)", previous_level, level, overall)

        self._recent_metrics.append(metrics)
        self._recent_scores.append(overall)

        return EngagementPrediction(
            level=level,
            score=overall,
            confidence=confidence,
            suggested_action=action,
            reasoning=self._generate_reasoning(scores, level),
            sub_scores=scores,
            sample_size=sample_size,
            insufficient_data=(
                InsufficientDataReason.NOT_ENOUGH_HISTORY
                if sample_size < self.baseline.min_history_for_trend
                else None
            ),
        )

    def _calculate_scores(self, metrics: EngagementMetrics) -> Dict[str, float]:
        """Compute the five 0-100 sub-scores."""
        baseline = self.baseline

        # Faster than baseline = more engaged
        response_ratio = metrics.response_time_ms / baseline.avg_response_time_ms
        response_score = max(0.0, min(100.0, 100 - (response_ratio - 1) * 30))

        # Success/failure streaks
        success_score = max(
            0.0,
            min(100.0, 50 + metrics.consecutive_successes * 10 - metrics.consecutive_failures * 15),
        )

        # Fatigue from session duration
        session_progress = metrics.time_in_session_ms / baseline.optimal_session_duration_ms
        if session_progress < 0.7:
            fatigue_score = 100.0
        elif session_progress < 1.0:
            fatigue_score = 100 - (session_progress - 0.7) * 100
        else:
            fatigue_score = max(20.0, 70 - (session_progress - 1.0) * 50)

        # Activity volume
        activity_ratio = metrics.activities_completed / baseline.max_activities_per_session
        if activity_ratio < 0.8:
            volume_score = 100.0
        else:
            volume_score = max(30.0, 100 - (activity_ratio - 0.8) * 200)

        return {
            "response_score": response_score,
            "success_score": success_score,
            "fatigue_score": fatigue_score,
            "volume_score": volume_score,
            "trend_score": self._calculate_trend_score(),
        }

    def _calculate_trend_score(self) -> float:
        """Compare response times of the newer half of recent history with the older half."""
        if len(self._recent_metrics) < self.baseline.min_history_for_trend:
            return 70.0  # neutral

        recent_times = [m.response_time_ms for m in self._recent_metrics][-self.baseline.trend_window:]
        split = len(recent_times) // 2
        first_avg = mean(recent_times[:split])
        second_avg = mean(recent_times[split:])

        if first_avg <= 0:
            return 70.0

        # Increasing response times mean engagement is dropping
        change = (second_avg - first_avg) / first_avg

        if change < -0.1:
            return 90.0
        if change < 0:
            return 80.0
        if change < 0.1:
            return 70.0
        if change < 0.2:
            return 50.0
        return 30.0

    def _calculate_overall_score(self, scores: Dict[str, float]) -> int:
        """Weighted mean of the sub-scores present, rounded to an int."""
        total = 0.0
        weight_sum = 0.0

        for key, weight in self.baseline.weights.items():
            if key in scores:
                total += scores[key] * weight
                weight_sum += weight

        if weight_sum == 0:
            return 0
        return int(round(total / weight_sum))

    def _score_to_level(self, score: float) -> EngagementLevel:
        if score >= self.baseline.high_threshold:
            return "high"
        if score >= self.baseline.medium_threshold:
            return "medium"
        if score >= self.baseline.low_threshold:
            return "low"
        return "critical"

    def _determine_action(
        self,
        level: EngagementLevel,
        scores: Dict[str, float],
        metrics: EngagementMetrics,
    ) -> EngagementAction:
        """Deterministic action table keyed by level and sub-scores."""
        baseline = self.baseline

        if level == "high":
            return EngagementAction("continue", "Great engagement! Keep going.", "low")

        if level == "medium":
            if scores["fatigue_score"] < 50:
                return EngagementAction(
                    "take_break",
                    "Time for a short break to recharge!",
                    "medium",
                    break_duration_ms=baseline.short_break_ms,
                )
            if scores["success_score"] < 50:
                return EngagementAction(
                    "simplify", "Let's try something easier to build confidence.", "medium"
                )
            return EngagementAction(
                "change_activity", "Let's try a different type of activity!", "low"
            )

        if level == "low":
            if metrics.consecutive_failures >= 3:
                return EngagementAction(
                    "simplify",
                    "Let's practice with familiar cards for a confidence boost.",
                    "high",
                )
            if metrics.time_in_session_ms > baseline.optimal_session_duration_ms * 0.8:
                return EngagementAction(
                    "take_break",
                    "You've worked so hard! Let's take a break.",
                    "high",
                    break_duration_ms=baseline.medium_break_ms,
                )
            return EngagementAction(
                "change_activity", "Time for something new and exciting!", "high"
            )

        # critical
        if metrics.activities_completed >= 5:
            return EngagementAction(
                "end_session", "Great job today! Let's finish on a high note.", "high"
            )
        return EngagementAction(
            "take_break",
            "Let's take a break. You're doing amazing!",
            "high",
            break_duration_ms=baseline.long_break_ms,
        )

    def _calculate_confidence(self) -> float:
        """More data and more consistent scores mean more confidence."""
        data_points = len(self._recent_metrics)
        base_confidence = min(0.9, 0.4 + data_points * 0.05)

        if len(self._recent_scores) >= 3:
            score_variance = variance(list(self._recent_scores))
            if score_variance < 100:
                bonus = 0.1
            elif score_variance < 200:
                bonus = 0.05
            else:
                bonus = 0.0
            return min(0.95, base_confidence + bonus)

        return base_confidence

    @staticmethod
    def _generate_reasoning(scores: Dict[str, float], level: str) -> str:
        issues = []

        if scores["response_score"] < 50:
            issues.append("response times are increasing")
        if scores["success_score"] < 50:
            issues.append("difficulty level may be too high")
        if scores["fatigue_score"] < 50:
            issues.append("session duration is getting long")
        if scores["trend_score"] < 50:
            issues.append("engagement is trending downward")

        if not issues:
            return "All engagement indicators look good!"

        return f"Engagement is {level} because: {', '.join(issues)}."

    def get_personalized_baseline(self) -> EngagementConfig:
        """
        Baseline personalised from recent history.

        With enough snapshots, the mean response time of failure-free
        snapshots replaces the default average response time.
        """
        if len(self._recent_metrics) < self.baseline.min_history_for_baseline:
            return self.baseline

        clean_times = [
            m.response_time_ms for m in self._recent_metrics if m.consecutive_failures == 0
        ]
        avg_response_time = mean(clean_times)

        return replace(
            self.baseline,
            avg_response_time_ms=avg_response_time or self.baseline.avg_response_time_ms,
        )

    def reset(self) -> None:
        """Clear rolling history at a new-session boundary."""
        self._recent_metrics.clear()
        self._recent_scores.clear()


def create_engagement_predictor(baseline: Optional[EngagementConfig] = None) -> EngagementPredictor:
    """Create a predictor owned by one child session."""
    return EngagementPredictor(baseline)
