"""
Data models for liftlog.

Workout sessions, set logs, exercises, goals, templates and the user
profile as stored by the session store, plus the derived (never
persisted) analytics results.

Metric values on a SetLog are ``float | None``: None means "not recorded".
The analytics engine reads them through SetLog.metric_or_zero(), which is
the single place where "not recorded" collapses to 0.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum


class Metric(str, Enum):
    """A trackable quantity. VOLUME is derived (sum of load x reps)."""

    LOAD = "load"
    REPS = "reps"
    TIME = "time"
    DISTANCE = "distance"
    ROM = "rom"
    VOLUME = "volume"

    @property
    def is_direct(self) -> bool:
        """True when the metric maps to a single SetLog field."""
        return self is not Metric.VOLUME

    @property
    def unit(self) -> str:
        return _METRIC_UNITS[self]

    @classmethod
    def parse(cls, value: "str | Metric") -> "Metric":
        """Parse a metric name (case-insensitive)."""
        if isinstance(value, Metric):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid metric: {value!r}. Must be one of {valid}") from e


_METRIC_UNITS: dict[Metric, str] = {
    Metric.LOAD: "kg",
    Metric.REPS: "reps",
    Metric.TIME: "s",
    Metric.DISTANCE: "m",
    Metric.ROM: "cm",
    Metric.VOLUME: "kg",
}

# Metrics an exercise can enable for logging (VOLUME is always derived)
DIRECT_METRICS: tuple[Metric, ...] = tuple(m for m in Metric if m.is_direct)


class AggMode(str, Enum):
    """How the sets of one session combine into one number."""

    MAX = "max"
    MIN = "min"
    AVG = "avg"
    SUM = "sum"

    @classmethod
    def parse(cls, value: "str | AggMode") -> "AggMode":
        if isinstance(value, AggMode):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            raise ValueError(
                f"Invalid aggregation mode: {value!r}. Must be one of max, min, avg, sum"
            ) from e


class TimeFrame(str, Enum):
    """Rolling range selector for the analysis window."""

    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    ALL = "ALL"
    CUSTOM = "CUSTOM"

    @classmethod
    def parse(cls, value: "str | TimeFrame") -> "TimeFrame":
        if isinstance(value, TimeFrame):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError as e:
            valid = ", ".join(t.value for t in cls)
            raise ValueError(f"Invalid time frame: {value!r}. Must be one of {valid}") from e


class Trend(str, Enum):
    """Qualitative direction of a regression slope."""

    ASCENDING = "ascending"
    DESCENDING = "descending"
    PLATEAUING = "plateauing"
    INSUFFICIENT_DATA = "insufficient_data"


def parse_session_datetime(value: str) -> datetime:
    """
    Parse an ISO date or timestamp into a naive datetime.

    Timezone-aware timestamps are converted to UTC before the tzinfo is
    dropped so that all session dates compare on one clock.

    Args:
        value: "YYYY-MM-DD" or ISO 8601 timestamp (a trailing "Z" is accepted)

    Returns:
        Naive datetime

    Raises:
        ValueError: If the string is not an ISO date/timestamp
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    if re.match(r"^\d{4}-\d{2}-\d{2}$", text):
        d = date.fromisoformat(text)
        return datetime(d.year, d.month, d.day)
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


@dataclass
class SetLog:
    """
    One performed set of one exercise.

    Numeric metrics are optional because not every exercise tracks every
    field. target_* fields are ghost values shown before logging; the
    analytics engine never reads them.
    """

    id: str
    exercise_id: str
    set_number: int = 1
    load_kg: float | None = None
    reps: float | None = None
    time_seconds: float | None = None
    distance_meters: float | None = None
    rom_cm: float | None = None
    rpe: float | None = None
    rir: float | None = None
    tempo: str | None = None
    completed: bool = False
    notes: str | None = None
    target_load: float | None = None
    target_reps: str | None = None
    target_time: float | None = None
    target_distance: float | None = None
    target_rom: str | None = None
    target_tempo: str | None = None

    def __post_init__(self) -> None:
        """Validate set data."""
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.set_number < 0:
            raise ValueError("set_number must be non-negative")
        for name in ("rpe", "rir"):
            v = getattr(self, name)
            if v is not None and not 0 <= v <= 10:
                raise ValueError(f"{name} must be between 0 and 10")

    def metric(self, metric: Metric) -> float | None:
        """
        Return the recorded value for a direct metric, or None.

        Raises:
            ValueError: For Metric.VOLUME, which is not a per-set field
        """
        if metric is Metric.LOAD:
            return self.load_kg
        if metric is Metric.REPS:
            return self.reps
        if metric is Metric.TIME:
            return self.time_seconds
        if metric is Metric.DISTANCE:
            return self.distance_meters
        if metric is Metric.ROM:
            return self.rom_cm
        raise ValueError(f"{metric.value} is not a per-set field")

    def metric_or_zero(self, metric: Metric) -> float:
        """Recorded value, with "not recorded" and non-finite values read as 0."""
        v = self.metric(metric)
        if v is None or not math.isfinite(v):
            return 0.0
        return float(v)

    @property
    def volume(self) -> float:
        """load x reps for this set (missing fields count as 0)."""
        return self.metric_or_zero(Metric.LOAD) * self.metric_or_zero(Metric.REPS)


@dataclass
class PainEntry:
    """A pain/injury note attached to a session."""

    intensity: int
    type: str = "other"  # "joint" | "injury" | "other"
    location: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.intensity <= 10:
            raise ValueError("intensity must be between 0 and 10")
        if self.type not in ("joint", "injury", "other"):
            raise ValueError(f"Invalid pain type: {self.type}")


@dataclass
class WorkoutSession:
    """
    One completed workout: a date and a flat, ordered list of sets.

    Sets of several exercises live side by side; consumers filter by
    exercise_id before computing anything.
    """

    id: str
    date: str  # ISO date or timestamp
    sets: list[SetLog] = field(default_factory=list)
    name: str | None = None
    duration_seconds: int | None = None
    pre_session_fatigue: int | None = None
    pain_entries: list[PainEntry] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate session data."""
        try:
            parse_session_datetime(self.date)
        except ValueError as e:
            raise ValueError(f"Invalid session date: {self.date!r}") from e
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("duration_seconds must be non-negative")
        if self.pre_session_fatigue is not None and not 0 <= self.pre_session_fatigue <= 10:
            raise ValueError("pre_session_fatigue must be between 0 and 10")

    @property
    def parsed_date(self) -> datetime:
        """Session date as a naive datetime."""
        return parse_session_datetime(self.date)

    def sets_for(self, exercise_id: str) -> list[SetLog]:
        """Sets in this session that belong to the given exercise."""
        return [s for s in self.sets if s.exercise_id == exercise_id]

    def has_exercise(self, exercise_id: str) -> bool:
        return any(s.exercise_id == exercise_id for s in self.sets)


@dataclass
class Exercise:
    """
    An exercise in the catalog.

    enabled_metrics gates which variables are selectable for analysis.
    """

    id: str
    name: str
    enabled_metrics: list[Metric] = field(default_factory=lambda: [Metric.LOAD, Metric.REPS])
    reps_type: str | None = None  # "standard" | "tempo" | "isometric"
    description: str | None = None

    def __post_init__(self) -> None:
        """Validate exercise data."""
        if not self.id or not self.name:
            raise ValueError("Exercise id and name must be non-empty")
        self.enabled_metrics = [Metric.parse(m) for m in self.enabled_metrics]
        if any(m not in DIRECT_METRICS for m in self.enabled_metrics):
            raise ValueError("volume is derived and cannot be enabled directly")
        if self.reps_type is not None and self.reps_type not in ("standard", "tempo", "isometric"):
            raise ValueError(f"Invalid reps_type: {self.reps_type}")

    def selectable_metrics(self) -> list[Metric]:
        """Variables offered for analysis: enabled metrics plus volume when derivable."""
        metrics = list(self.enabled_metrics)
        if Metric.LOAD in metrics and Metric.REPS in metrics:
            metrics.append(Metric.VOLUME)
        return metrics


@dataclass
class ExerciseGoal:
    """
    A target for one exercise. Every defined target must be met by a
    single set for the goal to count as achieved.
    """

    id: str
    exercise_id: str
    name: str | None = None
    target_load: float | None = None
    target_reps: float | None = None
    target_time: float | None = None
    target_distance: float | None = None
    target_rom: float | None = None
    target_isometric_time: float | None = None
    target_tempo: str | None = None
    completed: bool = False
    created_at: str | None = None
    completed_at: str | None = None

    def __post_init__(self) -> None:
        """Validate goal data."""
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        for name in (
            "target_load",
            "target_reps",
            "target_time",
            "target_distance",
            "target_rom",
            "target_isometric_time",
        ):
            v = getattr(self, name)
            if v is not None and v < 0:
                raise ValueError(f"{name} must be non-negative")

    def has_targets(self) -> bool:
        return any(
            v is not None
            for v in (
                self.target_load,
                self.target_reps,
                self.target_time,
                self.target_distance,
                self.target_rom,
                self.target_isometric_time,
                self.target_tempo,
            )
        )


@dataclass
class WeightEntry:
    """One body-weight measurement."""

    id: str
    date: str
    weight_kg: float

    def __post_init__(self) -> None:
        if self.weight_kg <= 0:
            raise ValueError("weight_kg must be positive")
        parse_session_datetime(self.date)


@dataclass
class SetTarget:
    """
    Planned values for one set of a template exercise.

    These become the ghost (target_*) values of a logged set. reps and rom
    are free text so ranges such as "8-10" survive.
    """

    load_kg: float | None = None
    reps: str | None = None
    time_seconds: float | None = None
    distance_meters: float | None = None
    rom_cm: str | None = None
    tempo: str | None = None

    def __post_init__(self) -> None:
        for name in ("load_kg", "time_seconds", "distance_meters"):
            v = getattr(self, name)
            if v is not None and v < 0:
                raise ValueError(f"{name} must be non-negative")

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (
                self.load_kg,
                self.reps,
                self.time_seconds,
                self.distance_meters,
                self.rom_cm,
                self.tempo,
            )
        )


@dataclass
class TemplateExercise:
    """One exercise of a template with its planned sets, in order."""

    exercise_id: str
    sets: list[SetTarget] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")

    def target_for(self, set_number: int) -> SetTarget | None:
        """Planned values for a 1-based set number, or None past the plan."""
        if 1 <= set_number <= len(self.sets):
            return self.sets[set_number - 1]
        return None


@dataclass
class WorkoutTemplate:
    """A reusable, ordered list of exercises with planned sets."""

    id: str
    name: str
    exercises: list[TemplateExercise] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate template data."""
        if not self.id or not self.name.strip():
            raise ValueError("Template id and name must be non-empty")
        ids = self.exercise_ids
        if len(ids) != len(set(ids)):
            raise ValueError(f"Template {self.name!r} lists an exercise twice")

    @property
    def exercise_ids(self) -> list[str]:
        return [te.exercise_id for te in self.exercises]

    def exercise(self, exercise_id: str) -> TemplateExercise | None:
        for te in self.exercises:
            if te.exercise_id == exercise_id:
                return te
        return None


@dataclass
class UserProfile:
    """Personal details and logging preferences."""

    first_name: str = ""
    last_name: str = ""
    sex: str = "male"
    track_rpe: bool = False

    def __post_init__(self) -> None:
        if self.sex not in ("male", "female"):
            raise ValueError(f"Invalid sex: {self.sex}. Must be 'male' or 'female'")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# =============================================================================
# Derived analytics results (never persisted)
# =============================================================================


@dataclass(frozen=True)
class DataPoint:
    """One session reduced to its per-metric values for one exercise."""

    date: str
    load: float
    reps: float
    volume: float
    rom: float
    time: float
    distance: float
    session: WorkoutSession

    def value(self, metric: Metric) -> float:
        """Value for a metric as stored on this point (direct metrics use max)."""
        if metric is Metric.LOAD:
            return self.load
        if metric is Metric.REPS:
            return self.reps
        if metric is Metric.TIME:
            return self.time
        if metric is Metric.DISTANCE:
            return self.distance
        if metric is Metric.ROM:
            return self.rom
        return self.volume

    def has_data(self) -> bool:
        """True if at least one metric is positive."""
        return any(
            v > 0
            for v in (self.load, self.reps, self.volume, self.rom, self.time, self.distance)
        )


@dataclass(frozen=True)
class AnalyticsMetrics:
    """Summary statistics for one variable over the filtered window."""

    max: float
    min: float
    avg: float
    volume: float
    trend: Trend
    est_1rm: float | None = None
    est_3rm: float | None = None
    est_5rm: float | None = None
    regression: tuple[float, ...] = ()


@dataclass(frozen=True)
class ChartPoint:
    """One x-position on the analysis chart."""

    date: datetime
    label: str
    value: float
    secondary_value: float

    @property
    def data_point_text(self) -> str:
        return f"{self.value:g}"


@dataclass(frozen=True)
class AxisScale:
    """A "nice" axis: min_value + sections * step == max_value."""

    min_value: float
    max_value: float
    step: float
    sections: int

    @property
    def range(self) -> float:
        return self.max_value - self.min_value

    def ticks(self) -> list[float]:
        """Gridline values from min to max inclusive."""
        return [self.min_value + i * self.step for i in range(self.sections + 1)]
