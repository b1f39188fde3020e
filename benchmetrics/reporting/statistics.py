"""Statistical helpers for trend analysis.

Series passed to `ewma` are ordered newest-first: the first value carries
weight 1, the next `lambda`, then `lambda**2`, and so on.
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from ..models.benchmark import TrendDirection

DEFAULT_STABILITY_THRESHOLD = 2.0


def mean(values: Sequence[float]) -> float:
    return float(pd.Series(values, dtype="float64").mean()) if values else 0.0


def median(values: Sequence[float]) -> float:
    return float(pd.Series(values, dtype="float64").median()) if values else 0.0


def minimum(values: Sequence[float]) -> float:
    return float(min(values)) if values else 0.0


def maximum(values: Sequence[float]) -> float:
    return float(max(values)) if values else 0.0


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; fewer than two values yield 0."""
    if len(values) < 2:
        return 0.0
    return float(pd.Series(values, dtype="float64").std(ddof=0))


def ewma(values: Sequence[float], decay: float) -> float:
    """Exponentially weighted mean of a newest-first series.

    Args:
        values: Series ordered newest-first
        decay: Weight multiplier per step into the past, in (0, 1]

    Returns:
        Weighted mean, 0 for an empty series

    Raises:
        ValueError: If decay is outside (0, 1]
    """
    if not (0.0 < decay <= 1.0):
        raise ValueError(f"EWMA decay must be in (0, 1], got {decay}")
    if not values:
        return 0.0

    weighted_sum = 0.0
    weight_total = 0.0
    weight = 1.0
    for value in values:
        weighted_sum += value * weight
        weight_total += weight
        weight *= decay
    return weighted_sum / weight_total


def percentage_change(current: float, baseline: float) -> float:
    """Relative change from baseline in percent.

    A zero baseline yields 0 when current is also 0 and 100 otherwise.
    """
    if baseline == 0:
        return 0.0 if current == 0 else 100.0
    return (current - baseline) / baseline * 100.0


def determine_trend_direction(
    change_percentage: float, threshold: float = DEFAULT_STABILITY_THRESHOLD
) -> TrendDirection:
    """Stable iff |change| is strictly below the threshold."""
    if abs(change_percentage) < threshold:
        return TrendDirection.STABLE
    return TrendDirection.UP if change_percentage > 0 else TrendDirection.DOWN


def compute_statistics(values: Sequence[float]) -> dict[str, float]:
    """Summary statistics of a series, all zeros for an empty series."""
    if not values:
        return {"min": 0.0, "max": 0.0, "mean": 0.0, "median": 0.0, "std_dev": 0.0, "count": 0}

    series = pd.Series(values, dtype="float64")
    return {
        "min": float(series.min()),
        "max": float(series.max()),
        "mean": float(series.mean()),
        "median": float(series.median()),
        "std_dev": float(series.std(ddof=0)) if len(series) > 1 else 0.0,
        "count": int(series.count()),
    }
