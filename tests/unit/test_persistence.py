"""
Unit tests for per-child history persistence.

Tests:
- Save/load of sessions and data points
- Validation before saving
- Handling of corrupt files and invalid child IDs
"""

import json
import logging

import pytest


class TestSessions:
    """Test suite for session persistence."""

    def test_save_and_load(self, history_store, make_session):
        newer = make_session(days_ago=1, success_rate=0.9)
        older = make_session(days_ago=5, success_rate=0.6)

        assert history_store.save_session("child-1", newer) == (True, None)
        assert history_store.save_session("child-1", older) == (True, None)

        loaded = history_store.load_sessions("child-1")
        assert [s.id for s in loaded] == [older.id, newer.id]
        assert loaded[1] == newer

    def test_same_id_replaces(self, history_store, make_session):
        session = make_session(success_rate=0.5)
        history_store.save_session("child-1", session)
        session.success_rate = 0.8
        history_store.save_session("child-1", session)

        loaded = history_store.load_sessions("child-1")
        assert len(loaded) == 1
        assert loaded[0].success_rate == 0.8

    def test_invalid_session_rejected(self, history_store, make_session):
        ok, errors = history_store.save_session("child-1", make_session(success_rate=1.5))

        assert ok is False
        assert any("success_rate" in error for error in errors)
        assert history_store.load_sessions("child-1") == []

    def test_invalid_records_skipped_on_load(self, history_store, make_session, caplog):
        history_store.save_session("child-1", make_session())
        path = history_store.history_dir / "child-1" / "sessions.json"
        records = json.loads(path.read_text())
        records.append({"id": "broken"})
        path.write_text(json.dumps(records))

        with caplog.at_level(logging.WARNING):
            loaded = history_store.load_sessions("child-1")

        assert len(loaded) == 1
        assert "Skipping invalid session 1" in caplog.text
        assert "success_rate" in caplog.text

    def test_corrupt_file_reads_as_empty(self, history_store, caplog):
        path = history_store.history_dir / "child-1" / "sessions.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert history_store.load_sessions("child-1") == []

        assert "Failed to load" in caplog.text

    def test_missing_child_reads_as_empty(self, history_store):
        assert history_store.load_sessions("nobody") == []


class TestDataPoints:
    """Test suite for data point persistence."""

    def test_save_and_load(self, history_store, make_point):
        for offset in (3, 1, 2):
            assert history_store.save_data_point("child-1", make_point(offset, 0.7))[0]

        loaded = history_store.load_data_points("child-1")
        assert [p.date.day for p in loaded] == [2, 3, 4]

    def test_invalid_point_rejected(self, history_store, make_point):
        ok, errors = history_store.save_data_point("child-1", make_point(0, 0.7, phase=9))
        assert ok is False
        assert errors


class TestChildren:
    """Test suite for child directories."""

    @pytest.mark.parametrize("child_id", ["", "../etc", "a/b", "child 1"])
    def test_invalid_child_id(self, history_store, make_session, child_id):
        with pytest.raises(ValueError):
            history_store.save_session(child_id, make_session())

    def test_list_and_delete(self, history_store, make_session, make_point):
        history_store.save_session("bob", make_session())
        history_store.save_data_point("alice", make_point(0, 0.5))

        assert history_store.list_children() == ["alice", "bob"]
        assert history_store.delete_child("bob") is True
        assert history_store.delete_child("bob") is False
        assert history_store.list_children() == ["alice"]
