"""
Least-squares trend fitting over an index-based x-axis.

x is the zero-based position in the series, not elapsed time, so the fitted
line matches a chart that plots sessions at equal spacing.
"""

from dataclasses import dataclass
from typing import Sequence

from .config import TREND_MIN_POINTS, TREND_SLOPE_THRESHOLD
from .models import Trend


@dataclass(frozen=True)
class LinearFit:
    """Fitted line y = intercept + slope * i, sampled at every index."""

    slope: float
    intercept: float
    regression_line: tuple[float, ...]


def fit_trend(values: Sequence[float]) -> LinearFit:
    """
    Fit an ordinary least-squares line with x_i = i.

    slope     = (n*Sxy - Sx*Sy) / (n*Sxx - Sx^2)
    intercept = (Sy - slope*Sx) / n

    The regression line has one value per input, zeros included.

    Args:
        values: Series to fit

    Returns:
        LinearFit; slope 0 and an empty line for fewer than 2 values
    """
    n = len(values)
    if n < 2:
        return LinearFit(slope=0.0, intercept=0.0, regression_line=())

    sum_x = 0.0
    sum_y = 0.0
    sum_xy = 0.0
    sum_xx = 0.0
    for i, y in enumerate(values):
        sum_x += i
        sum_y += y
        sum_xy += i * y
        sum_xx += i * i

    # n >= 2 with distinct integer x values, so this is always positive
    denominator = n * sum_xx - sum_x**2
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    line = tuple(slope * i + intercept for i in range(n))
    return LinearFit(slope=slope, intercept=intercept, regression_line=line)


def classify_trend(
    values: Sequence[float],
    slope: float,
    threshold: float = TREND_SLOPE_THRESHOLD,
) -> Trend:
    """
    Classify a slope into a trend category.

    Only non-zero values count towards the minimum number of points; the
    slope itself comes from the full series.

    Args:
        values: Full series the slope was fitted on
        slope: Fitted slope
        threshold: |slope| above which the series is trending

    Returns:
        Trend
    """
    if sum(1 for v in values if v > 0) < TREND_MIN_POINTS:
        return Trend.INSUFFICIENT_DATA
    if slope > threshold:
        return Trend.ASCENDING
    if slope < -threshold:
        return Trend.DESCENDING
    return Trend.PLATEAUING
