"""
Shared types for analytics results.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Union

# 0 = Sunday ... 6 = Saturday
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class InsufficientDataReason(str, Enum):
    """Why a result is not statistically meaningful yet."""

    NOT_ENOUGH_TRIALS = "not_enough_trials"
    NOT_ENOUGH_HISTORY = "not_enough_history"
    NOT_ENOUGH_SESSIONS = "not_enough_sessions"
    NOT_ENOUGH_SUCCESSFUL_SESSIONS = "not_enough_successful_sessions"
    NOT_ENOUGH_DATA_POINTS = "not_enough_data_points"
    NOT_ENOUGH_PHASE_DATA = "not_enough_phase_data"


class SufficiencyMixin:
    """Adds is_sufficient to dataclasses carrying an insufficient_data field."""

    @property
    def is_sufficient(self) -> bool:
        return getattr(self, "insufficient_data", None) is None


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Union[datetime, str]) -> datetime:
    """
    Normalise a datetime (or ISO 8601 string) to an aware UTC datetime.

    Naive datetimes are interpreted as UTC.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def day_of_week(value: datetime) -> int:
    """Weekday with Sunday = 0 (Python's weekday() has Monday = 0)."""
    return (value.weekday() + 1) % 7
