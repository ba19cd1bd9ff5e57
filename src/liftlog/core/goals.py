"""
Goal evaluation: achievement checks, progress percentages, display names.

A goal is met by a single set that meets every target the goal defines.
Progress shares the metric semantics of the analytics engine: a missing
value counts as 0.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Iterable

import structlog

from .models import ExerciseGoal, Metric, SetLog, parse_session_datetime

if TYPE_CHECKING:
    from ..io.session_store import SessionStore

logger = structlog.get_logger()


def _numeric_targets(goal: ExerciseGoal, set_log: SetLog) -> list[tuple[float, float | None]]:
    """(target, recorded value) pairs for every numeric target the goal defines."""
    pairs: list[tuple[float | None, float | None]] = [
        (goal.target_load, set_log.metric(Metric.LOAD)),
        (goal.target_reps, set_log.metric(Metric.REPS)),
        (goal.target_time, set_log.metric(Metric.TIME)),
        (goal.target_distance, set_log.metric(Metric.DISTANCE)),
        (goal.target_rom, set_log.metric(Metric.ROM)),
        # Isometric holds are logged as time
        (goal.target_isometric_time, set_log.metric(Metric.TIME)),
    ]
    return [(t, v) for t, v in pairs if t is not None]


def is_goal_met(set_log: SetLog, goal: ExerciseGoal) -> bool:
    """
    Check whether one set meets every target of a goal.

    Numeric targets need a recorded, non-zero value >= target; a tempo
    target needs an exact tempo match.

    Args:
        set_log: Completed set
        goal: Goal to check

    Returns:
        True if all defined targets are met
    """
    for target, value in _numeric_targets(goal, set_log):
        if not value or value < target:
            return False

    if goal.target_tempo is not None:
        if not set_log.tempo or set_log.tempo != goal.target_tempo:
            return False

    return True


def calculate_goal_progress(goal: ExerciseGoal, history: Iterable[SetLog]) -> int:
    """
    Best progress (0-100) any single set has made towards a goal.

    Per set: mean over defined targets of min(100, value / target * 100);
    a tempo target scores 100 on exact match, else 0. Targets of 0 are
    treated as undefined.

    Args:
        goal: Goal to measure
        history: Sets of the goal's exercise

    Returns:
        Rounded percentage
    """
    best = 0.0
    for set_log in history:
        scores: list[float] = []
        for target, value in _numeric_targets(goal, set_log):
            if not target:
                continue
            scores.append(min(100.0, (value or 0.0) / target * 100))
        if goal.target_tempo:
            scores.append(100.0 if set_log.tempo == goal.target_tempo else 0.0)

        if scores:
            best = max(best, sum(scores) / len(scores))

    return round(best)


def days_to_complete(created_at: str, now: datetime | None = None) -> int:
    """Whole days elapsed since a goal was created."""
    if now is None:
        now = datetime.now()
    return (now - parse_session_datetime(created_at)).days


def _fmt(value: float) -> str:
    return f"{value:g}"


def goal_display_name(goal: ExerciseGoal) -> str:
    """
    Human-readable goal name.

    Uses the explicit name when set, otherwise joins the targets, e.g.
    "100kg × 5 reps".
    """
    if goal.name:
        return goal.name
    parts: list[str] = []
    if goal.target_load:
        parts.append(f"{_fmt(goal.target_load)}kg")
    if goal.target_reps:
        parts.append(f"{_fmt(goal.target_reps)} reps")
    if goal.target_time:
        parts.append(f"{_fmt(goal.target_time)}s")
    if goal.target_distance:
        parts.append(f"{_fmt(goal.target_distance)}m")
    if goal.target_rom:
        parts.append(f"ROM {_fmt(goal.target_rom)}cm")
    if goal.target_isometric_time:
        parts.append(f"{_fmt(goal.target_isometric_time)}s Iso")
    if goal.target_tempo:
        parts.append(f"Tempo {goal.target_tempo}")
    return " × ".join(parts) or "Goal"


async def check_goal_achievement(
    store: "SessionStore",
    set_log: SetLog,
    exercise_id: str,
) -> ExerciseGoal | None:
    """
    Mark the first active goal a completed set meets.

    Args:
        store: Session store holding the goals
        set_log: Completed set
        exercise_id: Exercise the set belongs to

    Returns:
        The achieved goal (now completed), or None
    """
    goals = await store.fetch_goals_for_exercise(exercise_id)
    for goal in goals:
        if goal.completed:
            continue
        if is_goal_met(set_log, goal):
            achieved = await store.persist_goal_completed(goal.id)
            logger.info("Goal achieved", goal_id=goal.id, exercise_id=exercise_id)
            return achieved
    return None
