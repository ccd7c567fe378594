"""
Utility modules for PECS analytics.

This module contains utility functions:
- logger: Module loggers and one-time logging setup
- stats: Mean, variance and least-squares regression
- validation: JSON Schema validation with auto-repair
- persistence: Per-child JSON history store
"""

from .logger import configure_logging, get_logger
from .stats import RegressionResult, linear_regression, mean, variance
from .validation import (
    DataPointValidator,
    SchemaValidator,
    SessionHistoryValidator,
    ValidationResult,
    validate_data_point,
    validate_session_history,
)
from .persistence import HistoryStore, get_history_store

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    # Statistics
    "RegressionResult",
    "linear_regression",
    "mean",
    "variance",
    # Validation
    "ValidationResult",
    "SchemaValidator",
    "SessionHistoryValidator",
    "DataPointValidator",
    "validate_session_history",
    "validate_data_point",
    # Persistence
    "HistoryStore",
    "get_history_store",
]
