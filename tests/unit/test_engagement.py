"""
Unit tests for the engagement predictor.

Tests:
- Sub-score formulas and weighted overall score
- Level thresholds and action table
- Confidence growth and rolling history bounds
- Personalised baseline
- Per-session isolation of predictors
"""

import random
from dataclasses import replace

import pytest

from pecs_analytics.analytics.engagement import EngagementPredictor, create_engagement_predictor
from pecs_analytics.config import MINUTE_MS, EngagementConfig
from pecs_analytics.models import EngagementMetrics, InsufficientDataReason


@pytest.fixture
def predictor():
    return create_engagement_predictor()


def fresh_metrics(**overrides):
    values = dict(
        response_time_ms=3000,
        consecutive_successes=0,
        consecutive_failures=0,
        time_in_session_ms=0,
        activities_completed=0,
    )
    values.update(overrides)
    return EngagementMetrics(**values)


class TestScores:
    """Test suite for sub-scores and the overall score."""

    def test_baseline_snapshot_is_high(self, predictor):
        prediction = predictor.predict(fresh_metrics())

        assert prediction.sub_scores == {
            "response_score": 100.0,
            "success_score": 50.0,
            "fatigue_score": 100.0,
            "volume_score": 100.0,
            "trend_score": 70.0,
        }
        # 25 + 12.5 + 20 + 15 + 10.5
        assert prediction.score == 83
        assert prediction.level == "high"
        assert prediction.suggested_action.type == "continue"
        assert prediction.reasoning == "All engagement indicators look good!"

    def test_success_score_clamped(self, predictor):
        prediction = predictor.predict(fresh_metrics(consecutive_failures=10))
        assert prediction.sub_scores["success_score"] == 0.0

        prediction = predictor.predict(fresh_metrics(consecutive_successes=10))
        assert prediction.sub_scores["success_score"] == 100.0

    def test_fatigue_bands(self, predictor):
        optimal = 15 * MINUTE_MS
        assert predictor.predict(
            fresh_metrics(time_in_session_ms=optimal * 0.5)
        ).sub_scores["fatigue_score"] == 100.0
        assert predictor.predict(
            fresh_metrics(time_in_session_ms=optimal * 0.8)
        ).sub_scores["fatigue_score"] == pytest.approx(90.0)
        assert predictor.predict(
            fresh_metrics(time_in_session_ms=optimal * 3)
        ).sub_scores["fatigue_score"] == 20.0

    def test_volume_floor(self, predictor):
        prediction = predictor.predict(fresh_metrics(activities_completed=40))
        assert prediction.sub_scores["volume_score"] == 30.0

    def test_weights_normalised_by_present_keys(self):
        baseline = replace(EngagementConfig(), weights={"response_score": 2.0})
        predictor = EngagementPredictor(baseline)

        prediction = predictor.predict(fresh_metrics(response_time_ms=6000))
        # ratio 2 -> 100 - 30
        assert prediction.score == 70

    @pytest.mark.parametrize("seed", range(5))
    def test_score_range_and_level_mapping(self, seed):
        rng = random.Random(seed)
        predictor = EngagementPredictor()

        for _ in range(50):
            prediction = predictor.predict(
                EngagementMetrics(
                    response_time_ms=rng.uniform(0, 30000),
                    consecutive_successes=rng.randint(0, 10),
                    consecutive_failures=rng.randint(0, 10),
                    time_in_session_ms=rng.uniform(0, 60 * MINUTE_MS),
                    activities_completed=rng.randint(0, 40),
                )
            )
            assert 0 <= prediction.score <= 100
            if prediction.score >= 70:
                assert prediction.level == "high"
            elif prediction.score >= 50:
                assert prediction.level == "medium"
            elif prediction.score >= 30:
                assert prediction.level == "low"
            else:
                assert prediction.level == "critical"


class TestActions:
    """Test suite for the action table."""

    def test_critical_with_enough_activities_ends_session(self, predictor):
        prediction = predictor.predict(
            fresh_metrics(
                response_time_ms=12000,
                consecutive_failures=5,
                time_in_session_ms=30 * MINUTE_MS,
                activities_completed=25,
            )
        )
        assert prediction.level == "critical"
        assert prediction.suggested_action.type == "end_session"

    def test_critical_early_suggests_long_break(self, predictor):
        # Slowing response times drive the trend score down
        for response_time in (1000, 1000, 5000):
            predictor.predict(fresh_metrics(response_time_ms=response_time))

        prediction = predictor.predict(
            fresh_metrics(
                response_time_ms=30000,
                consecutive_failures=5,
                time_in_session_ms=60 * MINUTE_MS,
                activities_completed=2,
            )
        )
        assert prediction.sub_scores["trend_score"] == 30.0
        assert prediction.level == "critical"
        assert prediction.suggested_action.type == "take_break"
        assert prediction.suggested_action.break_duration_ms == 10 * MINUTE_MS
        assert "engagement is trending downward" in prediction.reasoning

    def test_low_with_failures_simplifies(self, predictor):
        prediction = predictor.predict(
            fresh_metrics(response_time_ms=12000, consecutive_failures=3, activities_completed=17)
        )
        assert prediction.level == "low"
        assert prediction.suggested_action.type == "simplify"
        assert prediction.suggested_action.priority == "high"

    def test_medium_with_fatigue_takes_short_break(self, predictor):
        prediction = predictor.predict(fresh_metrics(time_in_session_ms=40 * MINUTE_MS))
        assert prediction.level == "medium"
        assert prediction.suggested_action.type == "take_break"
        assert prediction.suggested_action.break_duration_ms == 2 * MINUTE_MS


class TestHistory:
    """Test suite for rolling history and confidence."""

    def test_confidence_grows_with_consistent_history(self, predictor):
        first = predictor.predict(fresh_metrics())
        assert first.confidence == pytest.approx(0.4)
        assert first.insufficient_data is InsufficientDataReason.NOT_ENOUGH_HISTORY

        predictor.predict(fresh_metrics())
        predictor.predict(fresh_metrics())
        fourth = predictor.predict(fresh_metrics())

        # 0.4 + 3 * 0.05, plus 0.1 for zero variance
        assert fourth.confidence == pytest.approx(0.65)
        assert fourth.sample_size == 3
        assert fourth.is_sufficient

    def test_history_bounded(self, predictor):
        for _ in range(25):
            predictor.predict(fresh_metrics())
        assert predictor.history_length == 10

    def test_reset_clears_history(self, predictor):
        predictor.predict(fresh_metrics())
        predictor.reset()
        assert predictor.history_length == 0

    def test_predictors_are_isolated(self):
        a = create_engagement_predictor()
        b = create_engagement_predictor()
        for _ in range(4):
            a.predict(fresh_metrics())

        assert a.history_length == 4
        assert b.history_length == 0
        assert a.baseline.weights is not b.baseline.weights

    def test_personalised_baseline_needs_history(self, predictor):
        predictor.predict(fresh_metrics(response_time_ms=2000))
        assert predictor.get_personalized_baseline() is predictor.baseline

    def test_personalised_baseline_ignores_failure_snapshots(self, predictor):
        for response_time in (2000, 2000, 4000, 2000, 2000):
            failures = 1 if response_time == 4000 else 0
            predictor.predict(fresh_metrics(response_time_ms=response_time, consecutive_failures=failures))

        personalised = predictor.get_personalized_baseline()
        assert personalised.avg_response_time_ms == pytest.approx(2000)
        assert predictor.baseline.avg_response_time_ms == 3000
