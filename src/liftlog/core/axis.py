"""
"Nice" axis scaling for chart rendering.

Steps are {1, 2, 5, 10} x 10^n and every axis has the same number of
equal sections, so max_value = min_value + sections * step.
"""

import math
from typing import Iterable, Sequence

from .config import AXIS_SECTIONS, MIN_REASONABLE_MAX, NICE_STEP_MANTISSAS
from .models import AxisScale


def nice_step(raw_step: float) -> float:
    """
    Round a step size up to the nearest {1, 2, 5, 10} x 10^n.

    Args:
        raw_step: Positive step size

    Returns:
        Nice step >= raw_step (1.0 for non-positive input)
    """
    if raw_step <= 0 or not math.isfinite(raw_step):
        return 1.0
    magnitude = 10 ** math.floor(math.log10(raw_step))
    for mantissa in NICE_STEP_MANTISSAS:
        step = mantissa * magnitude
        # Tolerate float noise from log10 (e.g. 0.3 / 0.1 = 2.9999999999999996)
        if step >= raw_step * (1 - 1e-9):
            return float(step)
    return float(10 * magnitude)


def _next_nice_step(step: float) -> float:
    return nice_step(step * 1.000001)


def nice_axis(
    values: Iterable[float],
    sections: int = AXIS_SECTIONS,
    min_reasonable_max: float = MIN_REASONABLE_MAX,
) -> AxisScale:
    """
    Compute a readable axis for a series (data plus regression overlay).

    - min_value is 0 when every value is non-negative, otherwise the
      highest multiple of the step at or below the data minimum.
    - The step is the smallest nice step that lets `sections` sections
      cover the data.
    - When every value is <= 0 the data maximum is lifted to
      min_reasonable_max so the axis never collapses.

    Args:
        values: Raw values (non-finite values are ignored)
        sections: Number of equal sections
        min_reasonable_max: Ceiling floor for all-non-positive data

    Returns:
        AxisScale
    """
    finite = [v for v in values if math.isfinite(v)]
    lo = min(finite) if finite else 0.0
    hi = max(finite) if finite else 0.0

    if hi <= 0:
        hi = max(hi, min_reasonable_max)

    if lo >= 0:
        step = nice_step(hi / sections)
        # guard against rounding leaving the top value just outside
        while step * sections < hi:
            step = _next_nice_step(step)
        return AxisScale(min_value=0.0, max_value=step * sections, step=step, sections=sections)

    step = nice_step((hi - lo) / sections)
    axis_min = math.floor(lo / step) * step
    while axis_min + step * sections < hi:
        step = _next_nice_step(step)
        axis_min = math.floor(lo / step) * step
    return AxisScale(
        min_value=axis_min,
        max_value=axis_min + step * sections,
        step=step,
        sections=sections,
    )


def rescale_to_axis(
    values: Sequence[float],
    source: AxisScale,
    target: AxisScale,
) -> list[float]:
    """
    Map values from one axis's coordinates onto another's.

    scaled = (v - source.min) * (target.range / source.range) + target.min

    Used to draw a secondary-axis regression line on the primary plot.

    Args:
        values: Values in source-axis units
        source: Axis the values were measured against
        target: Axis to draw them on

    Returns:
        Rescaled values
    """
    if source.range == 0:
        return [target.min_value for _ in values]
    factor = target.range / source.range
    return [(v - source.min_value) * factor + target.min_value for v in values]
