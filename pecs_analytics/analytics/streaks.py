"""
Daily practice streak helpers.

All comparisons are made on calendar days: the time of day of the last
activity is ignored.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from ..models.child import StreakInfo, StreakStatus


def _as_date(value: Union[date, datetime, str]) -> date:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        return value.date()
    return value


def _days_since_activity(info: StreakInfo, today: Optional[date]) -> Optional[int]:
    """Whole days between the last activity and today, None without an active streak."""
    if not info.last_activity_date or info.current_streak == 0:
        return None
    today = _as_date(today) if today is not None else date.today()
    return (today - _as_date(info.last_activity_date)).days


def is_streak_at_risk(info: StreakInfo, today: Optional[date] = None) -> bool:
    """True when the last activity was yesterday (practice today keeps the streak)."""
    return _days_since_activity(info, today) == 1


def is_streak_broken(info: StreakInfo, today: Optional[date] = None) -> bool:
    """True when more than one day has passed since the last activity."""
    days = _days_since_activity(info, today)
    return days is not None and days > 1


def get_streak_status_message(info: StreakInfo, today: Optional[date] = None) -> StreakStatus:
    """
    Display message for the current streak.

    Args:
        info: Streak record
        today: Calendar day to compare against (default: today)

    Returns:
        StreakStatus with a message and a success/warning/danger/neutral type
    """
    if info.current_streak == 0:
        return StreakStatus("Start your streak today!", "neutral")

    if is_streak_broken(info, today):
        return StreakStatus(
            f"Your {info.current_streak}-day streak ended. Start a new one!", "danger"
        )

    if is_streak_at_risk(info, today):
        return StreakStatus(
            f"Practice today to keep your {info.current_streak}-day streak!", "warning"
        )

    if _days_since_activity(info, today) == 0:
        if info.current_streak >= 30:
            return StreakStatus(f"Amazing! {info.current_streak}-day streak!", "success")
        if info.current_streak >= 7:
            return StreakStatus(f"Great job! {info.current_streak}-day streak!", "success")
        return StreakStatus(f"{info.current_streak}-day streak! Keep it up!", "success")

    return StreakStatus(f"{info.current_streak}-day streak", "neutral")
