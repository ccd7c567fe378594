"""
Session Optimizer - recommends practice times, durations and phase order.

Analyzes historical session records to recommend:
- Weekday/2-hour time slots with the best success rates
- Session duration based on the best-performing sessions
- Warm-up / focus / challenge phase sequence
- A weekly schedule with goals and suggested rest days

The optimizer only reads SessionHistory records; caller data is never mutated.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from ..config import OptimizerConfig, config
from ..models.common import DAY_NAMES, InsufficientDataReason, day_of_week, ensure_utc, utc_now
from ..models.sessions import (
    NextSessionRecommendation,
    OptimalTimeSlot,
    SessionDurationRecommendation,
    SessionHistory,
    SessionSequenceRecommendation,
    WeeklyGoal,
    WeeklySchedule,
)
from ..utils.logger import get_logger
from ..utils.stats import mean

logger = get_logger(__name__)

HOUR_LABELS = {
    6: "Early Morning (6-8am)",
    8: "Morning (8-10am)",
    10: "Late Morning (10am-12pm)",
    12: "Midday (12-2pm)",
    14: "Early Afternoon (2-4pm)",
    16: "Late Afternoon (4-6pm)",
    18: "Evening (6-8pm)",
    20: "Night (8-10pm)",
}

ALL_PHASES = [1, 2, 3, 4, 5, 6]


def _minutes(duration_ms: float) -> int:
    return int(round(duration_ms / 60000))


class SessionOptimizer:
    """
    Historical session analysis for scheduling recommendations.

    Usage:
        optimizer = SessionOptimizer(history)
        optimizer.add_session(latest)
        slots = optimizer.get_optimal_time_slots(top_n=3)
    """

    def __init__(
        self,
        history: Optional[Iterable[SessionHistory]] = None,
        settings: Optional[OptimizerConfig] = None,
    ):
        self.settings = settings if settings is not None else config.optimizer
        self._sessions: List[SessionHistory] = list(history or [])

    def add_session(self, session: SessionHistory) -> None:
        """Add a completed session to the history."""
        self._sessions.append(session)

    @property
    def sessions(self) -> List[SessionHistory]:
        """Copy of the accumulated history."""
        return list(self._sessions)

    # ==================== Time Slots ====================

    def get_optimal_time_slots(self, top_n: int = 5) -> List[OptimalTimeSlot]:
        """
        Find the best weekday/2-hour blocks by mean success rate.

        Args:
            top_n: Maximum number of slots to return

        Returns:
            Slots ranked by average success rate (descending). With too little
            history the generic default slots are returned instead.
        """
        settings = self.settings

        if len(self._sessions) < settings.min_sessions_for_slots:
            return self._default_time_slots()

        buckets: Dict[tuple, List[float]] = {}
        for session in self._sessions:
            hour_block = (session.hour_of_day // settings.slot_hours) * settings.slot_hours
            buckets.setdefault((session.day_of_week, hour_block), []).append(session.success_rate)

        slots = []
        for (day, hour), rates in buckets.items():
            # Need at least 2 sessions for meaningful data
            if len(rates) < settings.min_samples_per_slot:
                continue

            slots.append(
                OptimalTimeSlot(
                    day_of_week=day,
                    hour_of_day=hour,
                    confidence=min(0.95, 0.3 + len(rates) * 0.1),
                    average_success_rate=mean(rates),
                    sample_size=len(rates),
                )
            )

        slots.sort(key=lambda s: s.average_success_rate, reverse=True)
        logger.debug(
            "Ranked %d time slots from %d sessions", len(slots), len(self._sessions)
        )
        return slots[:top_n]

    @staticmethod
    def _default_time_slots() -> List[OptimalTimeSlot]:
        """General recommendations used until the child has enough history."""
        return [
            OptimalTimeSlot(day_of_week=1, hour_of_day=10, confidence=0.3, average_success_rate=0.0, sample_size=0),
            OptimalTimeSlot(day_of_week=3, hour_of_day=10, confidence=0.3, average_success_rate=0.0, sample_size=0),
            OptimalTimeSlot(day_of_week=5, hour_of_day=10, confidence=0.3, average_success_rate=0.0, sample_size=0),
            OptimalTimeSlot(day_of_week=6, hour_of_day=9, confidence=0.3, average_success_rate=0.0, sample_size=0),
        ]

    # ==================== Duration ====================

    def get_optimal_duration(self) -> SessionDurationRecommendation:
        """
        Recommend session duration from the best-performing sessions.

        Returns:
            SessionDurationRecommendation; the conservative default is flagged
            with insufficient_data when history is too thin.
        """
        settings = self.settings

        if len(self._sessions) < settings.min_sessions_for_duration:
            return self._default_duration(
                "Starting with short sessions to build consistency. "
                "Duration will be personalized as we learn more.",
                InsufficientDataReason.NOT_ENOUGH_SESSIONS,
                len(self._sessions),
            )

        successful = sorted(
            (
                s
                for s in self._sessions
                if s.completed_successfully and s.success_rate > settings.successful_session_rate
            ),
            key=lambda s: s.success_rate,
            reverse=True,
        )

        if len(successful) < settings.min_successful_sessions:
            return self._default_duration(
                "Building up session data. Shorter sessions recommended for now.",
                InsufficientDataReason.NOT_ENOUGH_SUCCESSFUL_SESSIONS,
                len(successful),
            )

        top_sessions = successful[: max(settings.min_successful_sessions, len(successful) // 3)]
        optimal = int(round(mean([s.duration_ms for s in top_sessions])))

        return SessionDurationRecommendation(
            optimal_duration_ms=optimal,
            min_duration_ms=max(settings.absolute_min_duration_ms, optimal * settings.min_duration_factor),
            max_duration_ms=min(settings.absolute_max_duration_ms, optimal * settings.max_duration_factor),
            reasoning=(
                f"Based on {len(top_sessions)} high-performance sessions, "
                f"{_minutes(optimal)} minutes works best."
            ),
            sample_size=len(top_sessions),
        )

    def _default_duration(
        self,
        reasoning: str,
        reason: InsufficientDataReason,
        sample_size: int,
    ) -> SessionDurationRecommendation:
        return SessionDurationRecommendation(
            optimal_duration_ms=self.settings.default_duration_ms,
            min_duration_ms=self.settings.default_min_duration_ms,
            max_duration_ms=self.settings.default_max_duration_ms,
            reasoning=reasoning,
            sample_size=sample_size,
            insufficient_data=reason,
        )

    # ==================== Phase Sequence ====================

    def _phase_success_rates(self) -> Dict[int, float]:
        rates: Dict[int, List[float]] = {}
        for session in self._sessions:
            rates.setdefault(session.phase, []).append(session.success_rate)
        return {phase: mean(values) for phase, values in rates.items()}

    def get_phase_sequence(
        self,
        current_phase: int,
        available_phases: Iterable[int],
    ) -> SessionSequenceRecommendation:
        """
        Plan up to three phase slots: warm-up, focus, challenge.

        Args:
            current_phase: Phase the child is working on
            available_phases: Phases unlocked for the child

        Returns:
            SessionSequenceRecommendation with a 5-minute estimate per slot
        """
        settings = self.settings
        available = set(available_phases)
        phase_rates = self._phase_success_rates()

        phases: List[int] = []
        reasoning: List[str] = []

        # Optional warm-up with a well-practised previous phase
        previous_phase = current_phase - 1
        if current_phase > 1 and previous_phase in available:
            if phase_rates.get(previous_phase, 0.0) > settings.warmup_success_rate:
                phases.append(previous_phase)
                reasoning.append(f"Start with Phase {previous_phase} as a warm-up")

        phases.append(current_phase)
        reasoning.append(f"Focus on Phase {current_phase}")

        # If doing well, preview the next phase
        current_rate = phase_rates.get(current_phase)
        if (
            current_rate is not None
            and current_rate > settings.challenge_success_rate
            and current_phase < settings.max_phase
        ):
            next_phase = current_phase + 1
            if next_phase in available:
                phases.append(next_phase)
                reasoning.append(f"Challenge with Phase {next_phase} preview")

        return SessionSequenceRecommendation(
            phases=phases,
            reasoning=". ".join(reasoning) + ".",
            estimated_duration_ms=len(phases) * settings.phase_duration_ms,
        )

    # ==================== Weekly Schedule ====================

    def get_weekly_schedule(self, now: Optional[datetime] = None) -> WeeklySchedule:
        """
        Combine slots, duration and recent activity into a weekly plan.

        Args:
            now: Reference time for the trailing 7-day window (default: now)

        Returns:
            WeeklySchedule with goals and suggested rest days (Sunday always included)
        """
        settings = self.settings
        now = ensure_utc(now) if now is not None else utc_now()

        optimal_slots = self.get_optimal_time_slots(7)
        duration = self.get_optimal_duration()

        sessions_per_day = 1
        weekly_session_target = settings.default_weekly_sessions
        insufficient = None

        if len(self._sessions) >= settings.min_sessions_for_weekly_pattern:
            one_week_ago = now - timedelta(days=7)
            recent = [s for s in self._sessions if s.date > one_week_ago]

            sessions_by_day: Dict[int, int] = {}
            for session in recent:
                sessions_by_day[session.day_of_week] = sessions_by_day.get(session.day_of_week, 0) + 1

            active_days = len(sessions_by_day)
            weekly_session_target = max(settings.default_weekly_sessions, len(recent))
            sessions_per_day = math.ceil(len(recent) / active_days) if active_days > 0 else 1
        else:
            insufficient = InsufficientDataReason.NOT_ENOUGH_SESSIONS

        rest_days = [settings.default_rest_day]

        # Days with consistently low performance become rest days
        day_rates: Dict[int, List[float]] = {}
        for session in self._sessions:
            day_rates.setdefault(session.day_of_week, []).append(session.success_rate)

        for day, rates in day_rates.items():
            if len(rates) >= settings.rest_day_min_samples and mean(rates) < settings.rest_day_success_rate:
                if day not in rest_days:
                    rest_days.append(day)

        return WeeklySchedule(
            suggested_times=optimal_slots,
            sessions_per_day=sessions_per_day,
            rest_days_suggested=sorted(rest_days),
            weekly_goal=WeeklyGoal(
                sessions_target=weekly_session_target,
                minutes_target=weekly_session_target * _minutes(duration.optimal_duration_ms),
            ),
            insufficient_data=insufficient,
        )

    # ==================== Next Session ====================

    @staticmethod
    def format_time_slot(slot: OptimalTimeSlot) -> str:
        """Format a slot for display, e.g. 'Monday Late Morning (10am-12pm)'."""
        day_name = DAY_NAMES[slot.day_of_week]
        hour_label = HOUR_LABELS.get(slot.hour_of_day, f"{slot.hour_of_day}:00")
        return f"{day_name} {hour_label}"

    def get_next_session_recommendation(
        self,
        now: Optional[datetime] = None,
        current_phase: int = 1,
    ) -> NextSessionRecommendation:
        """
        Pick the next upcoming optimal slot from the current moment.

        Args:
            now: Local wall-clock time (default: datetime.now())
            current_phase: Phase used for the suggested phase sequence

        Returns:
            NextSessionRecommendation. Falls back to the first ranked slot when
            none remain this week, and to a no-preference message without slots.
        """
        now = now if now is not None else datetime.now()
        current_day = day_of_week(now)
        current_hour = now.hour

        # Naive wall-clock input is local time; the schedule window needs an absolute instant
        schedule = self.get_weekly_schedule(now if now.tzinfo is not None else now.astimezone())
        duration = self.get_optimal_duration()

        next_slot = next(
            (
                slot
                for slot in schedule.suggested_times
                if slot.day_of_week > current_day
                or (slot.day_of_week == current_day and slot.hour_of_day > current_hour)
            ),
            None,
        )

        # Nothing left this week: first slot next week
        if next_slot is None and schedule.suggested_times:
            next_slot = schedule.suggested_times[0]

        return NextSessionRecommendation(
            suggested_time=(
                self.format_time_slot(next_slot) if next_slot else "Any time that works for you"
            ),
            suggested_duration=f"{_minutes(duration.optimal_duration_ms)} minutes",
            suggested_phases=self.get_phase_sequence(current_phase, ALL_PHASES).phases,
            confidence=next_slot.confidence if next_slot else 0.3,
        )


def create_session_optimizer(
    history: Optional[Iterable[SessionHistory]] = None,
    settings: Optional[OptimizerConfig] = None,
) -> SessionOptimizer:
    """Factory for a per-child optimizer."""
    return SessionOptimizer(history, settings)
