"""
Rule-based practice recommendations for parents and therapists.

Works on a ChildPerformance dashboard summary (success rates 0-100, response
time in seconds) and produces:
- Prioritised recommendation cards
- A complete plan for the next session
- Card suggestions for variety
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from ..models.child import (
    CardInfo,
    CardRecommendations,
    ChildPerformance,
    PlannedActivity,
    SessionPlan,
    SessionRecommendation,
)
from ..models.common import ensure_utc, utc_now

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

RETURN_AFTER_DAYS = 3
STREAK_MILESTONE_DAYS = 7
LOW_SUCCESS_RATE = 70
HIGH_SUCCESS_RATE = 90
SLOW_RESPONSE_SECONDS = 8
ADVANCE_SUCCESS_RATE = 80
ADVANCE_MIN_SESSIONS = 5
BEGINNER_SESSIONS = 10
EXPERIENCED_SESSIONS = 30
BREAK_REMINDER_SESSIONS = 20
MAX_PHASE = 6


def generate_recommendations(
    performance: ChildPerformance,
    now: Optional[datetime] = None,
) -> List[SessionRecommendation]:
    """
    Build recommendation cards for a child.

    Args:
        performance: Dashboard summary for the child
        now: Reference time for the days-since-last-session check (default: now)

    Returns:
        Recommendations sorted high, medium, low (stable within a priority)
    """
    recommendations: List[SessionRecommendation] = []

    # Been a while since the last session
    if performance.last_session_date:
        now = ensure_utc(now) if now is not None else utc_now()
        days_since = (now - ensure_utc(performance.last_session_date)).days
        if days_since >= RETURN_AFTER_DAYS:
            recommendations.append(
                SessionRecommendation(
                    id="return-practice",
                    type="phase",
                    priority="high",
                    title="Welcome Back!",
                    description=(
                        f"It's been {days_since} days since the last session. Start with a "
                        "warm-up review of mastered skills before continuing."
                    ),
                    action_text="Start Warm-Up",
                )
            )

    # Streak status
    if performance.streak_days == 0:
        recommendations.append(
            SessionRecommendation(
                id="start-streak",
                type="reinforcement",
                priority="medium",
                title="Start a New Streak",
                description="Complete a session today to begin building a practice streak!",
                action_text="Practice Now",
            )
        )
    elif performance.streak_days >= STREAK_MILESTONE_DAYS:
        recommendations.append(
            SessionRecommendation(
                id="streak-milestone",
                type="reinforcement",
                priority="low",
                title=f"{performance.streak_days}-Day Streak!",
                description="Amazing consistency! Keep up the daily practice for best results.",
            )
        )

    # Success rate
    if performance.recent_success_rate < LOW_SUCCESS_RATE:
        recommendations.append(
            SessionRecommendation(
                id="lower-difficulty",
                type="difficulty",
                priority="high",
                title="Adjust Difficulty",
                description=(
                    "Recent success rate is below target. Consider reducing array size "
                    "or practicing with high-success cards."
                ),
                action_text="Adjust Settings",
                data={"suggested_array_size": 2},
            )
        )
    elif performance.recent_success_rate >= HIGH_SUCCESS_RATE:
        recommendations.append(
            SessionRecommendation(
                id="increase-difficulty",
                type="difficulty",
                priority="medium",
                title="Ready for a Challenge",
                description=(
                    "Excellent performance! Consider increasing difficulty or "
                    "introducing new cards."
                ),
                action_text="Level Up",
                data={"suggested_array_size": 4},
            )
        )

    # Response time
    if performance.avg_response_time > SLOW_RESPONSE_SECONDS:
        recommendations.append(
            SessionRecommendation(
                id="response-time",
                type="duration",
                priority="medium",
                title="Response Time Practice",
                description=(
                    "Average response time is longer than optimal. Focus on familiar "
                    "cards to build fluency."
                ),
            )
        )

    # Challenging cards
    if performance.challenging_cards:
        recommendations.append(
            SessionRecommendation(
                id="challenging-cards",
                type="cards",
                priority="medium",
                title="Focus on Challenging Cards",
                description=(
                    "Some cards need extra practice: "
                    f"{', '.join(performance.challenging_cards[:3])}"
                ),
                action_text="Practice These",
                data={"cards": list(performance.challenging_cards)},
            )
        )

    # Phase progress
    current = next(
        (p for p in performance.phase_progress if p.phase == performance.current_phase),
        None,
    )
    if (
        current is not None
        and current.success_rate >= ADVANCE_SUCCESS_RATE
        and current.sessions_completed >= ADVANCE_MIN_SESSIONS
        and performance.current_phase < MAX_PHASE
    ):
        next_phase = performance.current_phase + 1
        recommendations.append(
            SessionRecommendation(
                id="phase-advancement",
                type="phase",
                priority="high",
                title="Ready to Advance!",
                description=(
                    f"Phase {performance.current_phase} mastery criteria met. "
                    f"Consider introducing Phase {next_phase} concepts."
                ),
                action_text=f"Start Phase {next_phase}",
                data={"next_phase": next_phase},
            )
        )

    # Session duration for beginners
    if performance.total_sessions < BEGINNER_SESSIONS:
        recommendations.append(
            SessionRecommendation(
                id="short-sessions",
                type="duration",
                priority="low",
                title="Short Sessions Work Best",
                description=(
                    "For beginners, 10-15 minute sessions with frequent breaks "
                    "maintain engagement."
                ),
                data={"recommended_duration": 10},
            )
        )

    # Break reminders for long practice
    if performance.total_sessions >= BREAK_REMINDER_SESSIONS:
        recommendations.append(
            SessionRecommendation(
                id="break-reminder",
                type="break",
                priority="low",
                title="Remember Breaks",
                description=(
                    "Take a 2-3 minute break every 10 minutes to maintain focus and "
                    "prevent fatigue."
                ),
                data={"break_interval": 10},
            )
        )

    return sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.priority])


def generate_session_plan(performance: ChildPerformance) -> SessionPlan:
    """
    Plan the next session: duration, difficulty, activities and cards.

    Args:
        performance: Dashboard summary for the child

    Returns:
        SessionPlan with a 3-minute warm-up and a main practice block
    """
    is_beginning = performance.total_sessions < BEGINNER_SESSIONS
    is_struggling = performance.recent_success_rate < LOW_SUCCESS_RATE
    is_excelling = performance.recent_success_rate >= HIGH_SUCCESS_RATE

    recommended_duration = 15
    if is_beginning:
        recommended_duration = 10
    if performance.total_sessions > EXPERIENCED_SESSIONS:
        recommended_duration = 20

    # Difficulty level 1-5 (array size is level + 1)
    difficulty_level = 2
    if is_struggling:
        difficulty_level = 1
    if is_excelling and performance.total_sessions > BEGINNER_SESSIONS:
        difficulty_level = 3
    if is_excelling and performance.total_sessions > EXPERIENCED_SESSIONS:
        difficulty_level = 4

    activities = [
        PlannedActivity(
            type="warm_up",
            description="Quick review with familiar, high-success cards",
            duration=3,
        ),
        PlannedActivity(
            type="main_practice",
            description=(
                f"Phase {performance.current_phase} practice with "
                f"{difficulty_level + 1}-card arrays"
            ),
            duration=int(recommended_duration * 0.6),
        ),
    ]

    if is_excelling and recommended_duration >= 15:
        activities.append(
            PlannedActivity(
                type="challenge",
                description=(
                    f"Introduction to Phase {performance.current_phase + 1} concepts"
                    if performance.current_phase < MAX_PHASE
                    else "Advanced discrimination with 5-card arrays"
                ),
                duration=3,
            )
        )

    if is_struggling:
        activities.append(
            PlannedActivity(
                type="reinforcement",
                description="Extra practice with preferred category cards",
                duration=4,
            )
        )

    # High-success cards for confidence, then a few harder ones
    suggested_cards = [c.card_id for c in performance.recent_cards if c.success_rate >= 80][:3]
    if not is_struggling:
        suggested_cards.extend(
            [c.card_id for c in performance.recent_cards if 40 <= c.success_rate < 70][:2]
        )

    return SessionPlan(
        recommended_phase=performance.current_phase,
        recommended_duration=recommended_duration,
        main_activities=activities,
        suggested_cards=suggested_cards,
        difficulty_level=difficulty_level,
        warm_up_activity="Review with 3 favorite cards",
        break_interval=10 if recommended_duration >= 15 else None,
    )


def get_card_recommendations(
    performance: ChildPerformance,
    available_cards: Iterable[CardInfo],
) -> CardRecommendations:
    """
    Split the available cards into high-success, needs-practice and new ones.

    New cards are unused cards in the child's preferred categories (max 5).
    """
    cards = list(available_cards)
    used_ids = {c.card_id for c in performance.recent_cards}
    high_success_ids = {c.card_id for c in performance.recent_cards if c.success_rate >= 80}
    low_success_ids = {c.card_id for c in performance.recent_cards if c.success_rate < 70}
    preferred = set(performance.preferred_categories)

    return CardRecommendations(
        high_success=[c for c in cards if c.id in high_success_ids],
        needs_practice=[c for c in cards if c.id in low_success_ids],
        new_to_try=[
            c for c in cards if c.id not in used_ids and c.category in preferred
        ][:5],
    )
