"""Goal commands: goals, add-goal."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.goals import calculate_goal_progress, goal_display_name
from ...core.models import ExerciseGoal
from ...io.serializers import ValidationError
from ...io.session_store import new_id
from .. import views
from ..app import DataDirOption, ExerciseOption, JsonOption, app, require_store


@app.command()
def goals(
    exercise_id: ExerciseOption,
    show_completed: Annotated[
        bool,
        typer.Option("--all", help="Include completed goals"),
    ] = False,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    List goals for an exercise with progress.
    """
    store = require_store(data_dir)
    try:
        exercise_goals = store.goals_for_exercise(exercise_id)
        history = views.sessions_sets(store.exercise_history(exercise_id), exercise_id)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not show_completed:
        exercise_goals = [g for g in exercise_goals if not g.completed]

    if json_out:
        print(json.dumps([
            {
                "id": g.id,
                "name": goal_display_name(g),
                "completed": g.completed,
                "completed_at": g.completed_at,
                "progress": 100 if g.completed else calculate_goal_progress(g, history),
            }
            for g in exercise_goals
        ], indent=2))
        return

    if not exercise_goals:
        views.console.print("[yellow]No goals for this exercise.[/yellow]")
        return
    views.console.print(views.format_goals_table(exercise_goals, history))


@app.command("add-goal")
def add_goal(
    exercise_id: ExerciseOption,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Goal name")] = None,
    load: Annotated[Optional[float], typer.Option("--load", "-l", help="Target load (kg)", min=0)] = None,
    reps: Annotated[Optional[float], typer.Option("--reps", "-r", help="Target reps", min=0)] = None,
    time_s: Annotated[Optional[float], typer.Option("--time", help="Target time (s)", min=0)] = None,
    distance: Annotated[Optional[float], typer.Option("--distance", help="Target distance (m)", min=0)] = None,
    rom: Annotated[Optional[float], typer.Option("--rom", help="Target range of motion (cm)", min=0)] = None,
    tempo: Annotated[Optional[str], typer.Option("--tempo", help="Target tempo, e.g. 3010")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add a goal; every given target must be met within one set.
    """
    store = require_store(data_dir)
    goal = ExerciseGoal(
        id=new_id(),
        exercise_id=exercise_id,
        name=name,
        target_load=load,
        target_reps=reps,
        target_time=time_s,
        target_distance=distance,
        target_rom=rom,
        target_tempo=tempo,
        created_at=datetime.now().isoformat(timespec="seconds"),
    )
    if not goal.has_targets():
        views.print_error("A goal needs at least one target (--load, --reps, --time, ...).")
        raise typer.Exit(1)

    try:
        store.add_goal(goal)
    except (ValueError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Added goal: {goal_display_name(goal)}")
