"""
File-backed session store.

Layout of a data directory:
- sessions.jsonl  one workout session per line, chronological
- exercises.json  exercise catalog (list)
- goals.json      exercise goals (list)
- weights.jsonl   body-weight entries, chronological
- templates.json  workout templates (list)
- profile.json    user profile (optional)

The store is an explicit object handed to whoever needs it; there is no
process-wide default instance. The async fetch_* / persist_* methods run
the file I/O in a worker thread so callers on an event loop never block.
"""

import asyncio
import json
import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Protocol

from ..core.engine.config_loader import get_user_config_dir
from ..core.models import (
    Exercise,
    ExerciseGoal,
    SetLog,
    UserProfile,
    WeightEntry,
    WorkoutSession,
    WorkoutTemplate,
)
from .serializers import (
    ValidationError,
    dict_to_exercise,
    dict_to_goal,
    dict_to_session,
    dict_to_template,
    dict_to_user_profile,
    dict_to_weight_entry,
    exercise_to_dict,
    goal_to_dict,
    session_to_json_line,
    template_to_dict,
    user_profile_to_dict,
    weight_entry_to_dict,
)


class SessionSource(Protocol):
    """The read side the analytics query depends on."""

    async def fetch_exercise_history(self, exercise_id: str) -> list[WorkoutSession]:
        ...

    async def fetch_exercises(self) -> list[Exercise]:
        ...


def new_id() -> str:
    """Random identifier for new records."""
    return uuid.uuid4().hex


class SessionStore:
    """
    Manages workout data stored under one directory.

    Session lines are validated on load; a malformed line raises
    ValidationError naming the file and line number.
    """

    def __init__(self, data_dir: str | Path):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the data files
        """
        self.data_dir = Path(data_dir)
        self.sessions_path = self.data_dir / "sessions.jsonl"
        self.exercises_path = self.data_dir / "exercises.json"
        self.goals_path = self.data_dir / "goals.json"
        self.weights_path = self.data_dir / "weights.jsonl"
        self.templates_path = self.data_dir / "templates.json"
        self.profile_path = self.data_dir / "profile.json"

    def exists(self) -> bool:
        """Check if the sessions file exists."""
        return self.sessions_path.exists()

    def init(self) -> None:
        """
        Create the data directory and empty data files if missing.
        """
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.sessions_path.exists():
            self.sessions_path.touch()
        if not self.weights_path.exists():
            self.weights_path.touch()
        if not self.exercises_path.exists():
            self._write_json_list(self.exercises_path, [])
        if not self.goals_path.exists():
            self._write_json_list(self.goals_path, [])
        if not self.templates_path.exists():
            self._write_json_list(self.templates_path, [])

    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------

    def _require(self, path: Path) -> None:
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}. Run 'init' first.")

    def _read_json_list(self, path: Path) -> list[dict]:
        self._require(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {path}: {e}") from e
        if not isinstance(data, list):
            raise ValidationError(f"Expected a JSON list in {path}")
        return data

    def _write_json_list(self, path: Path, items: list[dict]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, ensure_ascii=False)

    def _read_jsonl(self, path: Path) -> list[tuple[int, dict]]:
        self._require(path)
        records: list[tuple[int, dict]] = []
        with open(path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append((line_num, json.loads(line)))
                except json.JSONDecodeError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {path}: {e}"
                    ) from e
        return records

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def load_sessions(self) -> list[WorkoutSession]:
        """
        Load all sessions.

        Returns:
            Sessions sorted by date (stable for equal dates)

        Raises:
            FileNotFoundError: If the sessions file doesn't exist
            ValidationError: If a line is malformed
        """
        sessions: list[WorkoutSession] = []
        for line_num, data in self._read_jsonl(self.sessions_path):
            try:
                sessions.append(dict_to_session(data))
            except ValidationError as e:
                raise ValidationError(
                    f"Error parsing line {line_num} in {self.sessions_path}: {e}"
                ) from e
        sessions.sort(key=lambda s: s.parsed_date)
        return sessions

    def _write_sessions(self, sessions: list[WorkoutSession]) -> None:
        with open(self.sessions_path, "w", encoding="utf-8") as f:
            for session in sessions:
                f.write(session_to_json_line(session) + "\n")

    def get_session(self, session_id: str) -> WorkoutSession | None:
        for s in self.load_sessions():
            if s.id == session_id:
                return s
        return None

    def append_session(self, session: WorkoutSession) -> None:
        """
        Insert a session in chronological order.

        Args:
            session: Session to add (its id must be new)

        Raises:
            ValueError: If a session with the same id exists
        """
        sessions = self.load_sessions()
        if any(s.id == session.id for s in sessions):
            raise ValueError(f"Session {session.id} already exists")

        insert_idx = len(sessions)
        for i, existing in enumerate(sessions):
            if session.parsed_date < existing.parsed_date:
                insert_idx = i
                break
        sessions.insert(insert_idx, session)
        self._write_sessions(sessions)

    def update_session(self, session: WorkoutSession) -> None:
        """
        Replace the stored session with the same id.

        Raises:
            KeyError: If no such session exists
        """
        sessions = self.load_sessions()
        for i, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[i] = session
                break
        else:
            raise KeyError(f"Session {session.id} not found")
        sessions.sort(key=lambda s: s.parsed_date)
        self._write_sessions(sessions)

    def delete_session(self, session_id: str) -> None:
        """
        Delete a session by id.

        Raises:
            KeyError: If no such session exists
        """
        sessions = self.load_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            raise KeyError(f"Session {session_id} not found")
        self._write_sessions(remaining)

    def add_set(self, date: str, set_log: SetLog, session_name: str | None = None) -> WorkoutSession:
        """
        Append a set to the session on a date, creating the session if needed.

        Args:
            date: ISO date of the session
            set_log: Set to add
            session_name: Name for a newly created session

        Returns:
            The updated or created session
        """
        for s in self.load_sessions():
            if s.date == date:
                updated = replace(s, sets=[*s.sets, set_log])
                self.update_session(updated)
                return updated

        created = WorkoutSession(id=new_id(), date=date, sets=[set_log], name=session_name)
        self.append_session(created)
        return created

    def exercise_history(self, exercise_id: str) -> list[WorkoutSession]:
        """Chronological sessions containing at least one set of the exercise."""
        return [s for s in self.load_sessions() if s.has_exercise(exercise_id)]

    # ------------------------------------------------------------------
    # Exercises
    # ------------------------------------------------------------------

    def load_exercises(self) -> list[Exercise]:
        """
        Load the exercise catalog.

        Raises:
            FileNotFoundError: If exercises.json doesn't exist
            ValidationError: If an entry is malformed
        """
        return [dict_to_exercise(d) for d in self._read_json_list(self.exercises_path)]

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        for ex in self.load_exercises():
            if ex.id == exercise_id:
                return ex
        return None

    def add_exercise(self, exercise: Exercise) -> None:
        """
        Add an exercise to the catalog.

        Raises:
            ValueError: If the id is taken
        """
        exercises = self.load_exercises()
        if any(ex.id == exercise.id for ex in exercises):
            raise ValueError(f"Exercise {exercise.id} already exists")
        exercises.append(exercise)
        self._write_json_list(self.exercises_path, [exercise_to_dict(ex) for ex in exercises])

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    def load_goals(self) -> list[ExerciseGoal]:
        return [dict_to_goal(d) for d in self._read_json_list(self.goals_path)]

    def goals_for_exercise(self, exercise_id: str) -> list[ExerciseGoal]:
        return [g for g in self.load_goals() if g.exercise_id == exercise_id]

    def add_goal(self, goal: ExerciseGoal) -> None:
        """
        Add a goal.

        Raises:
            ValueError: If the id is taken or the goal has no targets
        """
        if not goal.has_targets():
            raise ValueError("A goal needs at least one target")
        goals = self.load_goals()
        if any(g.id == goal.id for g in goals):
            raise ValueError(f"Goal {goal.id} already exists")
        goals.append(goal)
        self._write_json_list(self.goals_path, [goal_to_dict(g) for g in goals])

    def mark_goal_completed(self, goal_id: str, when: datetime | None = None) -> ExerciseGoal:
        """
        Mark a goal completed.

        Args:
            goal_id: Goal to complete
            when: Completion time (defaults to now)

        Returns:
            The updated goal

        Raises:
            KeyError: If no such goal exists
        """
        goals = self.load_goals()
        stamp = (when or datetime.now()).isoformat(timespec="seconds")
        for i, g in enumerate(goals):
            if g.id == goal_id:
                goals[i] = replace(g, completed=True, completed_at=stamp)
                self._write_json_list(self.goals_path, [goal_to_dict(x) for x in goals])
                return goals[i]
        raise KeyError(f"Goal {goal_id} not found")

    # ------------------------------------------------------------------
    # Body weight
    # ------------------------------------------------------------------

    def load_weight_history(self) -> list[WeightEntry]:
        """Body-weight entries, oldest first."""
        entries: list[WeightEntry] = []
        for line_num, data in self._read_jsonl(self.weights_path):
            try:
                entries.append(dict_to_weight_entry(data))
            except ValidationError as e:
                raise ValidationError(
                    f"Error parsing line {line_num} in {self.weights_path}: {e}"
                ) from e
        entries.sort(key=lambda e: e.date)
        return entries

    def add_weight_entry(self, weight_kg: float, date: str | None = None) -> WeightEntry:
        """
        Record a body-weight measurement.

        Args:
            weight_kg: Body weight
            date: ISO date (defaults to today)

        Returns:
            The stored entry
        """
        self._require(self.weights_path)
        entry = WeightEntry(
            id=new_id(),
            date=date or datetime.now().strftime("%Y-%m-%d"),
            weight_kg=weight_kg,
        )
        with open(self.weights_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(weight_entry_to_dict(entry)) + "\n")
        return entry

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def load_templates(self) -> list[WorkoutTemplate]:
        """
        Load workout templates.

        A data directory created before templates existed has no
        templates.json; that reads as no templates.

        Raises:
            ValidationError: If an entry is malformed
        """
        if not self.templates_path.exists():
            self._require(self.sessions_path)
            return []
        return [dict_to_template(d) for d in self._read_json_list(self.templates_path)]

    def get_template(self, ref: str) -> WorkoutTemplate | None:
        """Find a template by id, falling back to an exact name match."""
        templates = self.load_templates()
        for t in templates:
            if t.id == ref:
                return t
        for t in templates:
            if t.name == ref:
                return t
        return None

    def save_template(self, template: WorkoutTemplate) -> None:
        """
        Add a template, or replace the stored one with the same id.

        Raises:
            ValueError: If another template already uses the name
        """
        templates = self.load_templates()
        if any(t.name == template.name and t.id != template.id for t in templates):
            raise ValueError(f"Template {template.name!r} already exists")
        for i, t in enumerate(templates):
            if t.id == template.id:
                templates[i] = template
                break
        else:
            templates.append(template)
        self._write_json_list(self.templates_path, [template_to_dict(t) for t in templates])

    def delete_template(self, ref: str) -> WorkoutTemplate:
        """
        Delete a template by id or name.

        Returns:
            The deleted template

        Raises:
            KeyError: If no such template exists
        """
        target = self.get_template(ref)
        if target is None:
            raise KeyError(f"Template {ref} not found")
        remaining = [t for t in self.load_templates() if t.id != target.id]
        self._write_json_list(self.templates_path, [template_to_dict(t) for t in remaining])
        return target

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def load_profile(self) -> UserProfile | None:
        """
        Load the user profile.

        Returns:
            UserProfile, or None if none was saved yet

        Raises:
            ValidationError: If profile.json is malformed
        """
        if not self.profile_path.exists():
            return None
        try:
            with open(self.profile_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Error parsing {self.profile_path}: {e}") from e
        return dict_to_user_profile(data)

    def save_profile(self, profile: UserProfile) -> None:
        self._require(self.sessions_path)
        with open(self.profile_path, "w", encoding="utf-8") as f:
            json.dump(user_profile_to_dict(profile), f, indent=2, ensure_ascii=False)

    def update_profile(self, **changes) -> UserProfile:
        """
        Apply field changes to the stored profile, creating it if needed.

        None values leave a field unchanged.

        Returns:
            The saved profile
        """
        current = self.load_profile() or UserProfile()
        updated = replace(current, **{k: v for k, v in changes.items() if v is not None})
        self.save_profile(updated)
        return updated

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def fetch_exercise_history(self, exercise_id: str) -> list[WorkoutSession]:
        """All sessions with at least one set of the exercise, oldest first."""
        return await asyncio.to_thread(self.exercise_history, exercise_id)

    async def fetch_exercises(self) -> list[Exercise]:
        return await asyncio.to_thread(self.load_exercises)

    async def fetch_goals_for_exercise(self, exercise_id: str) -> list[ExerciseGoal]:
        return await asyncio.to_thread(self.goals_for_exercise, exercise_id)

    async def persist_goal_completed(self, goal_id: str) -> ExerciseGoal:
        return await asyncio.to_thread(self.mark_goal_completed, goal_id)


def get_default_data_dir() -> Path:
    """
    Default data directory: $LIFTLOG_HOME, else ~/.liftlog.

    Returns:
        Data directory path
    """
    return get_user_config_dir()
