"""
Adaptive Difficulty System - keeps the array size in the child's challenge zone.

Automatically adjusts difficulty based on the child's performance so practice
is neither too easy nor too frustrating.

Key concepts:
- Target success rate: 75-85% (zone of proximal development)
- Increase difficulty when success rate >= 85% over the window
- Decrease difficulty when success rate <= 65% over the window
- Consecutive streaks confirm an adjustment before it happens

All functions are pure: states are immutable and every transition returns a
new AdaptiveState.
"""

from __future__ import annotations

import math
import time
from dataclasses import replace
from typing import Literal, Optional, Sequence, Tuple

from ..config import AdaptiveConfig, config
from ..models.common import InsufficientDataReason
from ..models.trials import (
    AdaptiveState,
    AdjustmentDecision,
    DifficultyChange,
    PerformanceSummary,
    TrialResult,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _settings(settings: Optional[AdaptiveConfig]) -> AdaptiveConfig:
    return settings if settings is not None else config.adaptive


def calculate_success_rate(trials: Sequence[TrialResult], window_size: int = 10) -> float:
    """
    Calculate success rate over the last N trials.

    Args:
        trials: Trial history, oldest first
        window_size: Number of most recent trials to consider

    Returns:
        Share of successful trials (0-1), 0.0 when there are no trials
    """
    if not trials:
        return 0.0

    recent = list(trials)[-window_size:]
    return sum(1 for t in recent if t.success) / len(recent)


def calculate_avg_response_time(trials: Sequence[TrialResult], window_size: int = 10) -> float:
    """Average response time (ms) over the last N trials, 0.0 when empty."""
    if not trials:
        return 0.0

    recent = list(trials)[-window_size:]
    return sum(t.response_time_ms for t in recent) / len(recent)


def create_adaptive_state(
    initial_difficulty: int = 2,
    settings: Optional[AdaptiveConfig] = None,
) -> AdaptiveState:
    """
    Create initial adaptive state.

    Args:
        initial_difficulty: Starting array size (clamped into the configured bounds)
        settings: Adaptive settings (default: config.adaptive)

    Returns:
        AdaptiveState with empty history
    """
    settings = _settings(settings)
    return AdaptiveState(current_difficulty=settings.clamp(initial_difficulty))


def should_adjust_difficulty(
    state: AdaptiveState,
    settings: Optional[AdaptiveConfig] = None,
) -> AdjustmentDecision:
    """
    Decide whether the difficulty should change for this state.

    Increase is checked before decrease, so at most one direction is chosen.
    """
    settings = _settings(settings)

    # Need minimum trials before adjusting
    if state.total_trials < settings.min_trials_before_adjust:
        return AdjustmentDecision(False, "none", "Not enough trials yet")

    # Don't adjust too frequently
    if state.last_adjustment is not None:
        trials_since_last_adjust = state.total_trials - state.last_adjustment
    else:
        trials_since_last_adjust = state.total_trials

    if trials_since_last_adjust < settings.min_trials_before_adjust:
        return AdjustmentDecision(False, "none", "Too soon since last adjustment")

    success_rate = calculate_success_rate(state.trial_history, settings.window_size)

    # Doing very well
    if (
        success_rate >= settings.increase_threshold
        and state.current_difficulty < settings.max_array_size
        and state.consecutive_correct >= settings.consecutive_correct_to_increase
    ):
        return AdjustmentDecision(
            True,
            "increase",
            f"Great job! Success rate is {round(success_rate * 100)}%",
        )

    # Struggling
    if (
        success_rate <= settings.decrease_threshold
        and state.current_difficulty > settings.min_array_size
        and (
            state.consecutive_incorrect >= settings.consecutive_incorrect_to_decrease
            or success_rate <= settings.struggling_success_rate
        )
    ):
        return AdjustmentDecision(True, "decrease", "Let's make it a bit easier")

    return AdjustmentDecision(False, "none", "Difficulty is appropriate")


def get_new_difficulty(
    current_difficulty: int,
    direction: Literal["increase", "decrease"],
    settings: Optional[AdaptiveConfig] = None,
) -> int:
    """Step the difficulty by one in the given direction, within bounds."""
    settings = _settings(settings)

    if direction == "increase":
        return min(current_difficulty + 1, settings.max_array_size)
    return max(current_difficulty - 1, settings.min_array_size)


def update_adaptive_state(
    state: AdaptiveState,
    success: bool,
    response_time_ms: float,
    difficulty: Optional[int] = None,
    settings: Optional[AdaptiveConfig] = None,
    timestamp: Optional[int] = None,
) -> Tuple[AdaptiveState, DifficultyChange]:
    """
    Record one trial and apply the adjustment policy.

    Args:
        state: Current state (not modified)
        success: Whether the trial was successful
        response_time_ms: Response latency
        difficulty: Array size the trial was shown at (default: current difficulty)
        settings: Adaptive settings (default: config.adaptive)
        timestamp: Epoch milliseconds (default: now)

    Returns:
        (new_state, difficulty_change) tuple
    """
    settings = _settings(settings)

    trial = TrialResult(
        success=success,
        response_time_ms=response_time_ms,
        difficulty=state.current_difficulty if difficulty is None else difficulty,
        timestamp=int(time.time() * 1000) if timestamp is None else timestamp,
    )

    # Keep only recent history to bound memory
    history = (state.trial_history + (trial,))[-settings.max_history_size:]

    new_state = replace(
        state,
        trial_history=history,
        total_trials=state.total_trials + 1,
        consecutive_correct=state.consecutive_correct + 1 if success else 0,
        consecutive_incorrect=0 if success else state.consecutive_incorrect + 1,
    )

    decision = should_adjust_difficulty(new_state, settings)

    if decision.adjust and decision.direction != "none":
        new_difficulty = get_new_difficulty(state.current_difficulty, decision.direction, settings)
        new_state = replace(
            new_state,
            current_difficulty=new_difficulty,
            last_adjustment=new_state.total_trials,
            consecutive_correct=0,
            consecutive_incorrect=0,
        )
        logger.debug(
            "Difficulty %s from %d to %d after %d trials",
            decision.direction,
            state.current_difficulty,
            new_difficulty,
            new_state.total_trials,
        )
        return new_state, DifficultyChange(True, new_difficulty, decision.reason)

    return new_state, DifficultyChange(False, state.current_difficulty, "")


# Short name used by callers that think in terms of "record a trial"
record_trial = update_adaptive_state


def get_performance_summary(
    state: AdaptiveState,
    window_size: int = 10,
    settings: Optional[AdaptiveConfig] = None,
) -> PerformanceSummary:
    """
    Summarise recent performance.

    Trend compares the most recent half-window with the trials before it
    inside the window. A gap wider than the configured trend threshold
    (0.1 by default) marks the trend as improving or declining.
    """
    history = state.trial_history
    success_rate = calculate_success_rate(history, window_size)
    avg_response_time = calculate_avg_response_time(history, window_size)

    half = math.ceil(window_size / 2)
    recent_rate = calculate_success_rate(history, half)
    older = list(history)[-window_size:-half]
    older_rate = sum(1 for t in older if t.success) / len(older) if older else success_rate

    threshold = _settings(settings).trend_threshold
    trend = "stable"
    if recent_rate - older_rate > threshold:
        trend = "improving"
    if older_rate - recent_rate > threshold:
        trend = "declining"

    return PerformanceSummary(
        success_rate=success_rate,
        avg_response_time=avg_response_time,
        current_difficulty=state.current_difficulty,
        total_trials=state.total_trials,
        trend=trend,
        sample_size=min(len(history), window_size),
        insufficient_data=None if history else InsufficientDataReason.NOT_ENOUGH_TRIALS,
    )
