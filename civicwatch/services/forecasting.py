"""
Trend Forecaster - per-category linear forecasts over bucketed counts.
"""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from civicwatch.models.analytics import ForecastPoint, ForecastSeries, PeriodCount

logger = logging.getLogger(__name__)


def linear_regression(x: Sequence[float], y: Sequence[float]) -> Tuple[float, float]:
    """
    Ordinary least squares fit.

    Returns:
        (slope, intercept); slope is 0 when x has no spread
    """
    n = len(x)
    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_xx = sum(xi * xi for xi in x)

    denominator = n * sum_xx - sum_x * sum_x
    slope = (n * sum_xy - sum_x * sum_y) / denominator if denominator else 0.0
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def trend_direction(slope: float) -> str:
    if slope > 0:
        return "increasing"
    if slope < 0:
        return "decreasing"
    return "stable"


class TrendForecaster:

    DEFAULT_PERIODS_AHEAD = 4

    def __init__(self, periods_ahead: int = DEFAULT_PERIODS_AHEAD):
        self.periods_ahead = periods_ahead

    def forecast(self, rows: List[PeriodCount], periods_ahead: Optional[int] = None) -> Dict[str, ForecastSeries]:
        """
        Forecast each category from its historical counts.

        Periods are ordered oldest first before indexing, whatever order
        the rows arrive in. Categories with fewer than 2 points are skipped.
        """
        periods_ahead = self.periods_ahead if periods_ahead is None else periods_ahead

        by_category: Dict[str, List[PeriodCount]] = defaultdict(list)
        for row in rows:
            by_category[row.category].append(row)

        predictions = {}
        for category, history in by_category.items():
            if len(history) < 2:
                continue

            history = sorted(history, key=lambda row: row.period)
            x = list(range(len(history)))
            y = [row.count for row in history]
            slope, intercept = linear_regression(x, y)

            n = len(history)
            predicted = [
                ForecastPoint(
                    period_index=index,
                    predicted_count=max(0, round_half_up(slope * index + intercept)),
                )
                for index in range(n, n + periods_ahead)
            ]

            predictions[category] = ForecastSeries(
                category=category,
                historical=history,
                predicted=predicted,
                slope=slope,
                intercept=intercept,
                trend=trend_direction(slope),
            )

        logger.debug(f"Forecast built for {len(predictions)} categories")
        return predictions
