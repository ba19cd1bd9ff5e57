"""
Set completion.

A planned set carries ghost values (target_*) from its template. Marking
it completed copies each ghost value into the matching field the lifter
left empty, so "did what was planned" needs no typing.
"""

import re
from dataclasses import replace

from .models import SetLog, SetTarget

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def leading_number(text: str | None) -> float | None:
    """
    Numeric prefix of a free-text target.

    "8-10" reads as 8, "12 reps" as 12, "AMRAP" as None.
    """
    if text is None:
        return None
    match = _LEADING_NUMBER.match(text)
    return float(match.group(1)) if match else None


def _unset(value: float | None) -> bool:
    # A zero entry counts as empty, like a cleared input
    return value is None or value == 0


def with_targets(set_log: SetLog, target: SetTarget | None) -> SetLog:
    """Copy a planned set's values onto a set as its ghost values."""
    if target is None:
        return set_log
    return replace(
        set_log,
        target_load=target.load_kg,
        target_reps=target.reps,
        target_time=target.time_seconds,
        target_distance=target.distance_meters,
        target_rom=target.rom_cm,
        target_tempo=target.tempo,
    )


def complete_set(set_log: SetLog) -> SetLog:
    """
    Mark a set completed, filling empty fields from its ghost values.

    Fields that were entered are kept. A free-text target (reps, rom)
    contributes its leading number; one without a number fills nothing.

    Args:
        set_log: Set as entered

    Returns:
        New SetLog with completed=True
    """
    updates: dict = {"completed": True}

    if _unset(set_log.load_kg) and set_log.target_load:
        updates["load_kg"] = set_log.target_load
    if _unset(set_log.reps) and set_log.target_reps:
        reps = leading_number(set_log.target_reps)
        if reps is not None:
            updates["reps"] = reps
    if _unset(set_log.time_seconds) and set_log.target_time:
        updates["time_seconds"] = set_log.target_time
    if _unset(set_log.distance_meters) and set_log.target_distance:
        updates["distance_meters"] = set_log.target_distance
    if _unset(set_log.rom_cm) and set_log.target_rom:
        rom = leading_number(set_log.target_rom)
        if rom is not None:
            updates["rom_cm"] = rom
    if not set_log.tempo and set_log.target_tempo:
        updates["tempo"] = set_log.target_tempo

    return replace(set_log, **updates)


_TARGET_KEYS: dict[str, str] = {
    "load": "load_kg",
    "reps": "reps",
    "time": "time_seconds",
    "distance": "distance_meters",
    "rom": "rom_cm",
    "tempo": "tempo",
}


def parse_set_target(spec: str) -> SetTarget:
    """
    Parse a planned set written as comma-separated key:value pairs.

    Example: "load:60,reps:8-10,tempo:3010". Keys are load, reps, time,
    distance, rom and tempo; reps, rom and tempo stay text.

    Raises:
        ValueError: For an unknown key, a missing value or a bad number
    """
    values: dict = {}
    for part in spec.split(","):
        if not part.strip():
            continue
        key, sep, raw = part.partition(":")
        key, raw = key.strip().lower(), raw.strip()
        if not sep or not raw:
            raise ValueError(f"Expected key:value in set target, got {part.strip()!r}")
        if key not in _TARGET_KEYS:
            valid = ", ".join(_TARGET_KEYS)
            raise ValueError(f"Unknown set target key {key!r}. Must be one of {valid}")
        attr = _TARGET_KEYS[key]
        if attr in ("reps", "rom_cm", "tempo"):
            values[attr] = raw
        else:
            try:
                values[attr] = float(raw)
            except ValueError as e:
                raise ValueError(f"Set target {key} must be a number, got {raw!r}") from e
    target = SetTarget(**values)
    if target.is_empty():
        raise ValueError("A set target needs at least one value")
    return target
