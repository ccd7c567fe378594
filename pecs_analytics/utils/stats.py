"""
Small statistics helpers shared by the analytics modules.

Provides:
- Mean and population variance with empty-input guards
- Ordinary least-squares regression of a series against its index
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import stats


@dataclass
class RegressionResult:
    """Result of fitting value = slope * index + intercept."""

    slope: float
    intercept: float
    r_squared: float
    p_value: float
    n: int


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def variance(values: Sequence[float]) -> float:
    """Population variance, 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.var(values))


def linear_regression(values: Sequence[float]) -> RegressionResult:
    """
    Fit an ordinary least-squares line through (index, value) pairs.

    Args:
        values: Series ordered oldest to newest

    Returns:
        RegressionResult. Fewer than two values, or a constant series,
        yield a flat line with r_squared = 0.

    Example:
        >>> round(linear_regression([0.5, 0.6, 0.7]).slope, 2)
        0.1
    """
    n = len(values)
    if n == 0:
        return RegressionResult(slope=0.0, intercept=0.0, r_squared=0.0, p_value=1.0, n=0)

    y = np.asarray(values, dtype=float)
    if n < 2 or np.all(y == y[0]):
        return RegressionResult(
            slope=0.0, intercept=float(y.mean()), r_squared=0.0, p_value=1.0, n=n
        )

    fit = stats.linregress(np.arange(n, dtype=float), y)
    p_value = float(fit.pvalue) if np.isfinite(fit.pvalue) else 1.0

    return RegressionResult(
        slope=float(fit.slope),
        intercept=float(fit.intercept),
        r_squared=max(0.0, float(fit.rvalue) ** 2),
        p_value=p_value,
        n=n,
    )
