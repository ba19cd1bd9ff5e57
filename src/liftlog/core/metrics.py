"""
Pure metric extraction functions.

Every function here reads sessions and never mutates them. Sets of other
exercises are filtered out before any value is computed.
"""

from typing import Iterable

from .config import EPLEY_DIVISOR, EST_3RM_FACTOR, EST_5RM_FACTOR
from .models import AggMode, Metric, SetLog, WorkoutSession


def aggregate(values: list[float], agg_mode: AggMode) -> float:
    """
    Reduce per-set values to one per-session number.

    Args:
        values: Non-empty list of per-set values
        agg_mode: max, min, avg or sum

    Returns:
        Aggregated value
    """
    if agg_mode is AggMode.SUM:
        return sum(values)
    if agg_mode is AggMode.AVG:
        return sum(values) / len(values)
    if agg_mode is AggMode.MIN:
        return min(values)
    return max(values)


def sets_volume(sets: Iterable[SetLog]) -> float:
    """Sum of load x reps over the given sets."""
    return sum(s.volume for s in sets)


def session_value(
    session: WorkoutSession,
    exercise_id: str,
    metric: Metric,
    agg_mode: AggMode = AggMode.MAX,
) -> float | None:
    """
    Compute one value for a session and metric.

    VOLUME always sums load x reps over the matching sets and ignores
    agg_mode. Direct metrics read each matching set (missing values as 0)
    and reduce them by agg_mode.

    Args:
        session: Workout session (may hold sets of several exercises)
        exercise_id: Target exercise
        metric: Metric to extract
        agg_mode: Per-session aggregation for direct metrics

    Returns:
        Value, or None if the session has no sets for the exercise
    """
    relevant = session.sets_for(exercise_id)
    if not relevant:
        return None

    if metric is Metric.VOLUME:
        return sets_volume(relevant)

    return aggregate([s.metric_or_zero(metric) for s in relevant], agg_mode)


def session_value_or_zero(
    session: WorkoutSession,
    exercise_id: str,
    metric: Metric,
    agg_mode: AggMode = AggMode.MAX,
) -> float:
    """session_value() with "no matching sets" read as 0."""
    value = session_value(session, exercise_id, metric, agg_mode)
    return value if value is not None else 0.0


def calculate_est_1rm(load_kg: float, reps: float) -> float:
    """
    Estimate 1RM using the Epley formula.

    1RM = load                    when reps == 1
    1RM = 0                       when reps == 0
    1RM = load * (1 + reps/30)    otherwise

    Args:
        load_kg: Load lifted
        reps: Reps performed

    Returns:
        Estimated 1RM in kg
    """
    if reps == 1:
        return load_kg
    if reps <= 0:
        return 0.0
    return load_kg * (1 + reps / EPLEY_DIVISOR)


def best_est_1rm(sessions: Iterable[WorkoutSession], exercise_id: str) -> float:
    """
    Highest Epley estimate across every matching set.

    Returns:
        Best estimate, or 0 if no set has both a positive load and reps
    """
    best = 0.0
    for session in sessions:
        for s in session.sets_for(exercise_id):
            load = s.metric_or_zero(Metric.LOAD)
            reps = s.metric_or_zero(Metric.REPS)
            if load <= 0 or reps <= 0:
                continue
            est = calculate_est_1rm(load, reps)
            if est > best:
                best = est
    return best


def rep_max_estimates(
    est_1rm: float,
    est_3rm_factor: float = EST_3RM_FACTOR,
    est_5rm_factor: float = EST_5RM_FACTOR,
) -> tuple[float, float, float]:
    """
    Derive 3RM and 5RM from a 1RM with fixed empirical multipliers.

    Returns:
        (1RM, 3RM, 5RM)
    """
    return (est_1rm, est_1rm * est_3rm_factor, est_1rm * est_5rm_factor)
