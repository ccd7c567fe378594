"""
Unit tests for the session optimizer.

Tests:
- Default slots with thin history
- Slot ranking by 2-hour block
- Duration recommendation and its fallbacks
- Phase sequence, weekly schedule and next-session recommendation
"""

from datetime import datetime
from unittest import mock

import pytest

from pecs_analytics.analytics.session_optimizer import SessionOptimizer, create_session_optimizer
from pecs_analytics.config import MINUTE_MS
from pecs_analytics.models import InsufficientDataReason, OptimalTimeSlot


class TestTimeSlots:
    """Test suite for optimal time slots."""

    def test_defaults_with_few_sessions(self, make_session):
        optimizer = create_session_optimizer([make_session(success_rate=1.0)] * 4)
        slots = optimizer.get_optimal_time_slots()

        assert [(s.day_of_week, s.hour_of_day) for s in slots] == [(1, 10), (3, 10), (5, 10), (6, 9)]
        assert all(s.confidence == 0.3 and s.sample_size == 0 for s in slots)

    def test_slots_ranked_by_success(self, make_session):
        history = [
            make_session(day_of_week=1, hour_of_day=10, success_rate=0.9),
            make_session(day_of_week=1, hour_of_day=11, success_rate=0.9),
            make_session(day_of_week=1, hour_of_day=10, success_rate=0.9),
            make_session(day_of_week=3, hour_of_day=14, success_rate=0.6),
            make_session(day_of_week=3, hour_of_day=15, success_rate=0.6),
            make_session(day_of_week=5, hour_of_day=9, success_rate=1.0),
        ]
        slots = SessionOptimizer(history).get_optimal_time_slots()

        # The single Friday session does not form a slot
        assert len(slots) == 2
        assert (slots[0].day_of_week, slots[0].hour_of_day) == (1, 10)
        assert slots[0].average_success_rate == pytest.approx(0.9)
        assert slots[0].confidence == pytest.approx(0.6)
        assert slots[0].sample_size == 3
        assert (slots[1].day_of_week, slots[1].hour_of_day) == (3, 14)

    def test_top_n(self, make_session):
        history = [make_session(day_of_week=d % 7, hour_of_day=10) for d in range(14)]
        assert len(SessionOptimizer(history).get_optimal_time_slots(top_n=3)) == 3

    def test_history_is_copied(self, make_session):
        history = [make_session() for _ in range(2)]
        optimizer = SessionOptimizer(history)
        history.append(make_session())

        assert len(optimizer.sessions) == 2
        optimizer.add_session(make_session())
        assert len(optimizer.sessions) == 3
        assert len(history) == 3


class TestDuration:
    """Test suite for duration recommendations."""

    def test_default_with_few_sessions(self, make_session):
        result = SessionOptimizer([make_session()] * 2).get_optimal_duration()

        assert result.optimal_duration_ms == 10 * MINUTE_MS
        assert result.min_duration_ms == 5 * MINUTE_MS
        assert result.max_duration_ms == 15 * MINUTE_MS
        assert result.insufficient_data is InsufficientDataReason.NOT_ENOUGH_SESSIONS
        assert "Starting with short sessions" in result.reasoning

    def test_default_with_few_successful_sessions(self, make_session):
        history = [
            make_session(success_rate=0.9),
            make_session(success_rate=0.9),
            make_session(success_rate=0.9, completed=False),
            make_session(success_rate=0.7),
        ]
        result = SessionOptimizer(history).get_optimal_duration()

        assert result.insufficient_data is InsufficientDataReason.NOT_ENOUGH_SUCCESSFUL_SESSIONS
        assert result.optimal_duration_ms == 10 * MINUTE_MS

    def test_duration_from_top_sessions(self, make_session):
        history = [
            make_session(success_rate=0.95, duration_min=12),
            make_session(success_rate=0.90, duration_min=12),
            make_session(success_rate=0.85, duration_min=12),
            make_session(success_rate=0.80, duration_min=20),
            make_session(success_rate=0.75, duration_min=20),
            make_session(success_rate=0.50, duration_min=30),
        ]
        result = SessionOptimizer(history).get_optimal_duration()

        assert result.is_sufficient
        assert result.optimal_duration_ms == 12 * MINUTE_MS
        assert result.min_duration_ms == pytest.approx(12 * MINUTE_MS * 0.6)
        assert result.max_duration_ms == pytest.approx(12 * MINUTE_MS * 1.4)
        assert result.reasoning == "Based on 3 high-performance sessions, 12 minutes works best."

    def test_duration_envelope(self, make_session):
        history = [make_session(success_rate=0.9, duration_min=40) for _ in range(3)]
        result = SessionOptimizer(history).get_optimal_duration()

        assert result.min_duration_ms == 24 * MINUTE_MS
        assert result.max_duration_ms == 30 * MINUTE_MS

    def test_pure_query_is_idempotent(self, make_session):
        history = [make_session(success_rate=0.8 + i * 0.01, duration_min=10 + i) for i in range(8)]
        optimizer = SessionOptimizer(history)
        assert optimizer.get_optimal_duration() == optimizer.get_optimal_duration()


class TestPhaseSequence:
    """Test suite for phase sequencing."""

    def test_focus_only_without_history(self):
        result = SessionOptimizer().get_phase_sequence(2, [1, 2, 3])
        assert result.phases == [2]
        assert result.reasoning == "Focus on Phase 2."
        assert result.estimated_duration_ms == 5 * MINUTE_MS

    def test_warm_up_and_challenge(self, make_session):
        history = [make_session(phase=1, success_rate=0.9), make_session(phase=2, success_rate=0.9)]
        result = SessionOptimizer(history).get_phase_sequence(2, [1, 2, 3])

        assert result.phases == [1, 2, 3]
        assert result.reasoning == (
            "Start with Phase 1 as a warm-up. Focus on Phase 2. Challenge with Phase 3 preview."
        )
        assert result.estimated_duration_ms == 15 * MINUTE_MS

    def test_challenge_requires_available_phase(self, make_session):
        history = [make_session(phase=2, success_rate=0.95)]
        assert SessionOptimizer(history).get_phase_sequence(2, [2]).phases == [2]

    def test_no_challenge_beyond_last_phase(self, make_session):
        history = [make_session(phase=6, success_rate=0.95)]
        assert SessionOptimizer(history).get_phase_sequence(6, range(1, 7)).phases == [6]


class TestWeeklySchedule:
    """Test suite for weekly schedules."""

    def test_defaults_with_thin_history(self, reference_now):
        schedule = SessionOptimizer().get_weekly_schedule(now=reference_now)

        assert schedule.insufficient_data is InsufficientDataReason.NOT_ENOUGH_SESSIONS
        assert schedule.sessions_per_day == 1
        assert schedule.rest_days_suggested == [0]
        assert schedule.weekly_goal.sessions_target == 5
        assert schedule.weekly_goal.minutes_target == 50
        assert len(schedule.suggested_times) == 4

    def test_recent_activity_and_rest_days(self, make_session, reference_now):
        history = [
            # Tuesdays go badly
            make_session(day_of_week=2, success_rate=0.3, days_ago=6),
            make_session(day_of_week=2, success_rate=0.4, days_ago=13),
            make_session(day_of_week=2, success_rate=0.2, days_ago=20),
            # Recent good days, two sessions on one of them
            make_session(day_of_week=4, success_rate=0.9, days_ago=4),
            make_session(day_of_week=4, success_rate=0.9, days_ago=4),
            make_session(day_of_week=5, success_rate=0.9, days_ago=3),
            make_session(day_of_week=6, success_rate=0.9, days_ago=2),
            make_session(day_of_week=0, success_rate=0.9, days_ago=1),
        ]
        schedule = SessionOptimizer(history).get_weekly_schedule(now=reference_now)

        assert schedule.is_sufficient
        assert schedule.rest_days_suggested == [0, 2]
        # 6 sessions over 5 active days in the trailing week
        assert schedule.weekly_goal.sessions_target == 6
        assert schedule.sessions_per_day == 2


class TestNextSession:
    """Test suite for next-session recommendations."""

    def test_next_slot_later_this_week(self):
        # Tuesday 11:00 -> Wednesday 10:00 default slot
        result = SessionOptimizer().get_next_session_recommendation(now=datetime(2024, 3, 19, 11, 0))

        assert result.suggested_time == "Wednesday Late Morning (10am-12pm)"
        assert result.suggested_duration == "10 minutes"
        assert result.suggested_phases == [1]
        assert result.confidence == 0.3

    def test_wraps_to_first_slot(self):
        # Saturday 10:00 is after the last default slot (Saturday 9:00)
        result = SessionOptimizer().get_next_session_recommendation(now=datetime(2024, 3, 23, 10, 0))
        assert result.suggested_time == "Monday Late Morning (10am-12pm)"

    def test_schedule_uses_given_time(self, make_session, reference_now):
        optimizer = SessionOptimizer([make_session(days_ago=d) for d in range(1, 7)])
        with mock.patch.object(
            optimizer, "get_weekly_schedule", wraps=optimizer.get_weekly_schedule
        ) as schedule:
            optimizer.get_next_session_recommendation(now=reference_now)

        schedule.assert_called_once_with(reference_now)

    def test_naive_time_is_treated_as_local(self):
        optimizer = SessionOptimizer()
        naive = datetime(2024, 3, 19, 11, 0)
        with mock.patch.object(
            optimizer, "get_weekly_schedule", wraps=optimizer.get_weekly_schedule
        ) as schedule:
            optimizer.get_next_session_recommendation(now=naive)

        passed = schedule.call_args.args[0]
        assert passed.tzinfo is not None
        assert passed == naive.astimezone()

    def test_format_time_slot_unknown_hour(self):
        slot = OptimalTimeSlot(day_of_week=0, hour_of_day=7, confidence=0.5,
                               average_success_rate=0.8, sample_size=2)
        assert SessionOptimizer.format_time_slot(slot) == "Sunday 7:00"
