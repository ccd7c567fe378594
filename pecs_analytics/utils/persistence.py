"""
Per-child history persistence with validation.

Stores session history and performance data points as JSON files:

    <history_dir>/<child_id>/sessions.json
    <history_dir>/<child_id>/data_points.json
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import config
from ..models.performance import PerformanceDataPoint
from ..models.sessions import SessionHistory
from .logger import get_logger
from .validation import DataPointValidator, SessionHistoryValidator

logger = get_logger(__name__)

SESSIONS_FILE = "sessions.json"
DATA_POINTS_FILE = "data_points.json"

_CHILD_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class HistoryStore:
    """
    Handles persistence of practice history with validation.

    Features:
    - Validate records against the bundled JSON schemas
    - One JSON file per child per record kind
    - Corrupt or unreadable files are logged and read as empty

    Usage:
        store = HistoryStore()
        ok, errors = store.save_session("child-1", session)
        optimizer = SessionOptimizer(store.load_sessions("child-1"))
    """

    def __init__(self, history_dir: Optional[Path | str] = None):
        """
        Initialize store.

        Args:
            history_dir: Root directory (default: config.paths.history_dir)
        """
        self.history_dir = Path(history_dir) if history_dir else config.paths.history_dir
        self.session_validator = SessionHistoryValidator()
        self.data_point_validator = DataPointValidator()

    def _child_dir(self, child_id: str) -> Path:
        if not _CHILD_ID_PATTERN.match(child_id or ""):
            raise ValueError(f"Invalid child id: {child_id!r}")
        return self.history_dir / child_id

    def _read_records(self, path: Path) -> List[Dict[str, Any]]:
        if not path.exists():
            return []

        try:
            with open(path, "r", encoding="utf-8") as f:
                records = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to load %s: %s", path, e)
            return []

        if not isinstance(records, list):
            logger.warning("Ignoring %s: expected a JSON list", path)
            return []
        return records

    def _write_records(self, path: Path, records: List[Dict[str, Any]]) -> Optional[str]:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.warning("Failed to save %s: %s", path, e)
            return f"Failed to save {path.name}: {e}"
        return None

    # ==================== Sessions ====================

    def save_session(
        self,
        child_id: str,
        session: SessionHistory,
        validate: bool = True,
    ) -> tuple[bool, Optional[List[str]]]:
        """
        Append a session to the child's history.

        A session with an existing ID replaces the stored one.

        Args:
            child_id: Child identifier (letters, digits, '-' and '_')
            session: Completed session
            validate: Whether to validate before saving

        Returns:
            Tuple of (success, errors)
        """
        record = session.to_dict()

        if validate:
            result = self.session_validator.validate(record)
            if not result.valid:
                return False, result.errors

        path = self._child_dir(child_id) / SESSIONS_FILE
        records = [r for r in self._read_records(path) if r.get("id") != session.id]
        records.append(record)

        error = self._write_records(path, records)
        if error:
            return False, [error]
        return True, None

    def load_sessions(self, child_id: str) -> List[SessionHistory]:
        """
        Load a child's session history, oldest first.

        Records that fail validation are skipped with a warning.
        """
        path = self._child_dir(child_id) / SESSIONS_FILE
        sessions = []

        for i, record in enumerate(self._read_records(path)):
            result = self.session_validator.validate(record)
            if not result.valid:
                logger.warning(
                    "Skipping invalid session %d in %s (%s): %s",
                    i, path, ", ".join(result.invalid_fields) or "record", result.errors[0],
                )
                continue
            sessions.append(SessionHistory.from_dict(record))

        sessions.sort(key=lambda s: s.date)
        return sessions

    # ==================== Data Points ====================

    def save_data_point(
        self,
        child_id: str,
        point: PerformanceDataPoint,
        validate: bool = True,
    ) -> tuple[bool, Optional[List[str]]]:
        """
        Append a performance data point to the child's history.

        Returns:
            Tuple of (success, errors)
        """
        record = point.to_dict()

        if validate:
            result = self.data_point_validator.validate(record)
            if not result.valid:
                return False, result.errors

        path = self._child_dir(child_id) / DATA_POINTS_FILE
        records = self._read_records(path)
        records.append(record)

        error = self._write_records(path, records)
        if error:
            return False, [error]
        return True, None

    def load_data_points(self, child_id: str) -> List[PerformanceDataPoint]:
        """Load a child's performance data points, oldest first."""
        path = self._child_dir(child_id) / DATA_POINTS_FILE
        points = []

        for i, record in enumerate(self._read_records(path)):
            result = self.data_point_validator.validate(record)
            if not result.valid:
                logger.warning(
                    "Skipping invalid data point %d in %s (%s): %s",
                    i, path, ", ".join(result.invalid_fields) or "record", result.errors[0],
                )
                continue
            points.append(PerformanceDataPoint.from_dict(record))

        points.sort(key=lambda p: p.date)
        return points

    # ==================== Children ====================

    def list_children(self) -> List[str]:
        """IDs of children with stored history."""
        if not self.history_dir.exists():
            return []
        return sorted(p.name for p in self.history_dir.iterdir() if p.is_dir())

    def delete_child(self, child_id: str) -> bool:
        """
        Remove all stored history for a child.

        Returns:
            True if anything was deleted
        """
        child_dir = self._child_dir(child_id)
        if not child_dir.exists():
            return False

        for name in (SESSIONS_FILE, DATA_POINTS_FILE):
            (child_dir / name).unlink(missing_ok=True)
        try:
            child_dir.rmdir()
        except OSError as e:
            logger.warning("Could not remove %s: %s", child_dir, e)
        return True


# Global store instance
_history_store: Optional[HistoryStore] = None


def get_history_store() -> HistoryStore:
    """Get or create the global history store (uses config.paths.history_dir)."""
    global _history_store
    if _history_store is None:
        _history_store = HistoryStore()
    return _history_store
