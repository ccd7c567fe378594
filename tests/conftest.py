"""
Shared pytest fixtures and configuration for PECS analytics tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add project root to path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent))

from pecs_analytics.models import PerformanceDataPoint, SessionHistory  # noqa: E402

MINUTE_MS = 60 * 1000

# A fixed Monday so weekday arithmetic is deterministic
REFERENCE_NOW = datetime(2024, 3, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def reference_now():
    """Fixed 'now' (Monday 2024-03-18 12:00 UTC)."""
    return REFERENCE_NOW


@pytest.fixture
def make_session():
    """
    Factory fixture for SessionHistory records.

    Returns:
        Callable building a session; date defaults to days_ago before REFERENCE_NOW
    """
    counter = {"n": 0}

    def _make(
        day_of_week=1,
        hour_of_day=10,
        success_rate=0.8,
        duration_min=10,
        phase=1,
        completed=True,
        days_ago=1,
        activities=10,
    ):
        counter["n"] += 1
        return SessionHistory(
            id=f"s-{counter['n']}",
            date=REFERENCE_NOW - timedelta(days=days_ago),
            day_of_week=day_of_week,
            hour_of_day=hour_of_day,
            duration_ms=duration_min * MINUTE_MS,
            activities_completed=activities,
            success_rate=success_rate,
            avg_response_time_ms=3000,
            phase=phase,
            completed_successfully=completed,
        )

    return _make


@pytest.fixture
def make_point():
    """
    Factory fixture for PerformanceDataPoint records.

    Returns:
        Callable building a point day_offset days after 2024-03-01
    """
    start = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def _make(day_offset, success_rate, phase=1, response_ms=3000, activities=10):
        return PerformanceDataPoint(
            date=start + timedelta(days=day_offset),
            success_rate=success_rate,
            avg_response_time_ms=response_ms,
            phase=phase,
            activities_completed=activities,
        )

    return _make


@pytest.fixture
def history_store(tmp_path):
    """HistoryStore writing into a temporary directory."""
    from pecs_analytics.utils.persistence import HistoryStore

    return HistoryStore(tmp_path / "history")


@pytest.fixture
def temp_schema_file(tmp_path):
    """
    Fixture providing a temporary schema file for testing.

    Returns:
        Path: Path to temporary schema file
    """
    import json

    schema = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": {"score": {"type": "number"}, "label": {"type": "string"}},
        "required": ["score"],
        "additionalProperties": False,
    }

    schema_file = tmp_path / "test.schema.json"
    with open(schema_file, "w") as f:
        json.dump(schema, f)

    return schema_file


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
