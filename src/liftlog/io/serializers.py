"""
JSON serialization for liftlog data models.

Handles conversion between dataclasses and JSON-compatible dicts. Keys are
snake_case; the camelCase keys written by the mobile backend
(loadKg, exerciseId, ...) are accepted on input too.
"""

import json
import math
from typing import Any

from ..core.models import (
    Exercise,
    ExerciseGoal,
    PainEntry,
    SetLog,
    SetTarget,
    TemplateExercise,
    UserProfile,
    WeightEntry,
    WorkoutSession,
    WorkoutTemplate,
)


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def _get(data: dict[str, Any], key: str, camel: str | None = None, default: Any = None) -> Any:
    """Read a snake_case key, falling back to its camelCase spelling."""
    if key in data:
        return data[key]
    if camel is not None and camel in data:
        return data[camel]
    return default


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def optional_number(value: Any) -> float | None:
    """
    Coerce a stored metric value to float, or None when not recorded.

    Missing, boolean, non-numeric, NaN and infinite values all read as
    "not recorded"; they are never an error.

    Args:
        value: Raw JSON value

    Returns:
        Float or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def set_log_to_dict(s: SetLog) -> dict[str, Any]:
    """
    Convert SetLog to a compact JSON-compatible dict.

    Unrecorded optional fields are omitted.
    """
    d: dict[str, Any] = {
        "id": s.id,
        "exercise_id": s.exercise_id,
        "set_number": s.set_number,
        "completed": s.completed,
    }
    for name in (
        "load_kg",
        "reps",
        "time_seconds",
        "distance_meters",
        "rom_cm",
        "rpe",
        "rir",
        "tempo",
        "notes",
        "target_load",
        "target_reps",
        "target_time",
        "target_distance",
        "target_rom",
        "target_tempo",
    ):
        v = getattr(s, name)
        if v is not None:
            d[name] = v
    return d


def dict_to_set_log(data: dict[str, Any]) -> SetLog:
    """
    Convert dict to SetLog.

    Args:
        data: Dict representation

    Returns:
        SetLog instance

    Raises:
        ValidationError: If identity fields are missing or invalid
    """
    data = _require_mapping(data, "Set")
    exercise_id = _get(data, "exercise_id", "exerciseId")
    if not exercise_id:
        raise ValidationError("Set is missing exercise_id")

    rpe = optional_number(data.get("rpe"))
    rir = optional_number(data.get("rir"))
    try:
        return SetLog(
            id=str(_get(data, "id", default="")),
            exercise_id=str(exercise_id),
            set_number=int(optional_number(_get(data, "set_number", "setNumber")) or 1),
            load_kg=optional_number(_get(data, "load_kg", "loadKg")),
            reps=optional_number(data.get("reps")),
            time_seconds=optional_number(_get(data, "time_seconds", "timeSeconds")),
            distance_meters=optional_number(_get(data, "distance_meters", "distanceMeters")),
            rom_cm=optional_number(_get(data, "rom_cm", "romCm")),
            rpe=rpe if rpe is not None and 0 <= rpe <= 10 else None,
            rir=rir if rir is not None and 0 <= rir <= 10 else None,
            tempo=optional_str(data.get("tempo")),
            completed=bool(data.get("completed", False)),
            notes=optional_str(data.get("notes")),
            target_load=optional_number(_get(data, "target_load", "targetLoad")),
            target_reps=optional_str(_get(data, "target_reps", "targetReps")),
            target_time=optional_number(_get(data, "target_time", "targetTime")),
            target_distance=optional_number(_get(data, "target_distance", "targetDistance")),
            target_rom=optional_str(_get(data, "target_rom", "targetRom")),
            target_tempo=optional_str(_get(data, "target_tempo", "targetTempo")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def pain_entry_to_dict(p: PainEntry) -> dict[str, Any]:
    d: dict[str, Any] = {"intensity": p.intensity, "type": p.type}
    if p.location is not None:
        d["location"] = p.location
    if p.notes is not None:
        d["notes"] = p.notes
    return d


def dict_to_pain_entry(data: dict[str, Any]) -> PainEntry:
    data = _require_mapping(data, "Pain entry")
    try:
        return PainEntry(
            intensity=int(data["intensity"]),
            type=str(data.get("type", "other")),
            location=optional_str(data.get("location")),
            notes=optional_str(data.get("notes")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid pain entry: {e}") from e


def session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """
    Convert WorkoutSession to JSON-compatible dict.

    Args:
        session: WorkoutSession to convert

    Returns:
        Dict representation
    """
    d: dict[str, Any] = {
        "id": session.id,
        "date": session.date,
        "sets": [set_log_to_dict(s) for s in session.sets],
    }
    if session.name is not None:
        d["name"] = session.name
    if session.duration_seconds is not None:
        d["duration_seconds"] = session.duration_seconds
    if session.pre_session_fatigue is not None:
        d["pre_session_fatigue"] = session.pre_session_fatigue
    if session.pain_entries:
        d["pain_entries"] = [pain_entry_to_dict(p) for p in session.pain_entries]
    return d


def dict_to_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Args:
        data: Dict representation

    Returns:
        WorkoutSession instance

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "Session")
    if "date" not in data:
        raise ValidationError("Session is missing date")

    raw_sets = data.get("sets") or []
    if not isinstance(raw_sets, list):
        raise ValidationError("Session sets must be a list")
    raw_pain = _get(data, "pain_entries", "painEntries") or []
    if not isinstance(raw_pain, list):
        raise ValidationError("Session pain_entries must be a list")

    duration = optional_number(_get(data, "duration_seconds", "durationSeconds"))
    fatigue = optional_number(_get(data, "pre_session_fatigue", "preSessionFatigue"))
    try:
        return WorkoutSession(
            id=str(data.get("id", "")),
            date=str(data["date"]),
            sets=[dict_to_set_log(s) for s in raw_sets],
            name=optional_str(data.get("name")),
            duration_seconds=int(duration) if duration is not None else None,
            pre_session_fatigue=int(fatigue) if fatigue is not None else None,
            pain_entries=[dict_to_pain_entry(p) for p in raw_pain],
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(str(e)) from e


def session_to_json_line(session: WorkoutSession) -> str:
    """Serialize a session to a single JSON line (no trailing newline)."""
    return json.dumps(session_to_dict(session), separators=(",", ":"), ensure_ascii=False)


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    d: dict[str, Any] = {
        "id": exercise.id,
        "name": exercise.name,
        "enabled_metrics": [m.value for m in exercise.enabled_metrics],
    }
    if exercise.reps_type is not None:
        d["reps_type"] = exercise.reps_type
    if exercise.description is not None:
        d["description"] = exercise.description
    return d


def dict_to_exercise(data: dict[str, Any]) -> Exercise:
    """
    Convert dict to Exercise.

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "Exercise")
    try:
        return Exercise(
            id=str(data["id"]),
            name=str(data["name"]),
            enabled_metrics=list(_get(data, "enabled_metrics", "enabledMetrics", ["load", "reps"])),
            reps_type=optional_str(_get(data, "reps_type", "repsType")),
            description=optional_str(data.get("description")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid exercise: {e}") from e


_GOAL_NUMERIC_FIELDS: tuple[tuple[str, str], ...] = (
    ("target_load", "targetLoad"),
    ("target_reps", "targetReps"),
    ("target_time", "targetTime"),
    ("target_distance", "targetDistance"),
    ("target_rom", "targetRom"),
    ("target_isometric_time", "targetIsometricTime"),
)


def goal_to_dict(goal: ExerciseGoal) -> dict[str, Any]:
    d: dict[str, Any] = {
        "id": goal.id,
        "exercise_id": goal.exercise_id,
        "completed": goal.completed,
    }
    for name in (
        "name",
        *(f for f, _ in _GOAL_NUMERIC_FIELDS),
        "target_tempo",
        "created_at",
        "completed_at",
    ):
        v = getattr(goal, name)
        if v is not None:
            d[name] = v
    return d


def dict_to_goal(data: dict[str, Any]) -> ExerciseGoal:
    """
    Convert dict to ExerciseGoal.

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "Goal")
    numeric = {
        name: optional_number(_get(data, name, camel)) for name, camel in _GOAL_NUMERIC_FIELDS
    }
    try:
        return ExerciseGoal(
            id=str(data["id"]),
            exercise_id=str(_get(data, "exercise_id", "exerciseId", "")),
            name=optional_str(data.get("name")),
            target_tempo=optional_str(_get(data, "target_tempo", "targetTempo")),
            completed=bool(data.get("completed", False)),
            created_at=optional_str(_get(data, "created_at", "createdAt")),
            completed_at=optional_str(_get(data, "completed_at", "completedAt")),
            **numeric,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid goal: {e}") from e


def weight_entry_to_dict(entry: WeightEntry) -> dict[str, Any]:
    return {"id": entry.id, "date": entry.date, "weight_kg": entry.weight_kg}


def dict_to_weight_entry(data: dict[str, Any]) -> WeightEntry:
    data = _require_mapping(data, "Weight entry")
    try:
        return WeightEntry(
            id=str(data.get("id", "")),
            date=str(data["date"]),
            weight_kg=float(_get(data, "weight_kg", "weightKg")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid weight entry: {e}") from e


_TARGET_FIELDS: tuple[tuple[str, str, str], ...] = (
    # (SetTarget attribute, stored key, camelCase key)
    ("load_kg", "target_load", "targetLoad"),
    ("reps", "target_reps", "targetReps"),
    ("time_seconds", "target_time", "targetTime"),
    ("distance_meters", "target_distance", "targetDistance"),
    ("rom_cm", "target_rom", "targetRom"),
    ("tempo", "target_tempo", "targetTempo"),
)
_TEXT_TARGETS = ("reps", "rom_cm", "tempo")


def set_target_to_dict(target: SetTarget) -> dict[str, Any]:
    d: dict[str, Any] = {}
    for attr, key, _ in _TARGET_FIELDS:
        v = getattr(target, attr)
        if v is not None:
            d[key] = v
    return d


def dict_to_set_target(data: dict[str, Any]) -> SetTarget:
    """
    Convert dict to SetTarget.

    reps, rom and tempo targets are kept as text; the rest must be numbers
    and read as unset when they are not.
    """
    data = _require_mapping(data, "Set target")
    values = {}
    for attr, key, camel in _TARGET_FIELDS:
        raw = _get(data, key, camel)
        if attr in _TEXT_TARGETS:
            values[attr] = optional_str(raw)
        else:
            values[attr] = optional_number(raw)
    try:
        return SetTarget(**values)
    except ValueError as e:
        raise ValidationError(f"Invalid set target: {e}") from e


def template_to_dict(template: WorkoutTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "exercises": [
            {
                "exercise_id": te.exercise_id,
                "sets": [set_target_to_dict(t) for t in te.sets],
            }
            for te in template.exercises
        ],
    }


def _dict_to_template_exercise(data: Any) -> TemplateExercise:
    # A bare string is an exercise id with no planned sets
    if isinstance(data, str):
        return TemplateExercise(exercise_id=data)
    data = _require_mapping(data, "Template exercise")

    raw_sets = data.get("sets") or []
    if not isinstance(raw_sets, list):
        raise ValidationError("Template exercise sets must be a list")
    sets = [dict_to_set_target(s) for s in raw_sets]

    # Older records hold one flat target repeated target_sets times
    count = optional_number(_get(data, "target_sets", "targetSets"))
    if not sets and count:
        flat = dict_to_set_target(data)
        sets = [flat for _ in range(int(count))]

    return TemplateExercise(
        exercise_id=str(_get(data, "exercise_id", "exerciseId", "")),
        sets=sets,
    )


def dict_to_template(data: dict[str, Any]) -> WorkoutTemplate:
    """
    Convert dict to WorkoutTemplate.

    Accepts either an "exercises" list (objects or bare ids) or a plain
    "exercise_ids" list.

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "Template")
    raw = data.get("exercises")
    if raw is None:
        raw = _get(data, "exercise_ids", "exerciseIds", [])
    if not isinstance(raw, list):
        raise ValidationError("Template exercises must be a list")
    try:
        return WorkoutTemplate(
            id=str(data["id"]),
            name=str(data["name"]),
            exercises=[_dict_to_template_exercise(te) for te in raw],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid template: {e}") from e


def user_profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    return {
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "sex": profile.sex,
        "preferences": {"track_rpe": profile.track_rpe},
    }


def dict_to_user_profile(data: dict[str, Any]) -> UserProfile:
    """
    Convert dict to UserProfile.

    Raises:
        ValidationError: If data is invalid
    """
    data = _require_mapping(data, "Profile")
    preferences = data.get("preferences") or {}
    if not isinstance(preferences, dict):
        raise ValidationError("Profile preferences must be an object")
    try:
        return UserProfile(
            first_name=str(_get(data, "first_name", "firstName", "") or ""),
            last_name=str(_get(data, "last_name", "lastName", "") or ""),
            sex=str(data.get("sex") or "male"),
            track_rpe=bool(_get(preferences, "track_rpe", "trackRpe", False)),
        )
    except ValueError as e:
        raise ValidationError(f"Invalid profile: {e}") from e
