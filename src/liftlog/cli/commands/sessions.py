"""Logging commands: init, exercises, add-exercise, log-set."""

import asyncio
import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.goals import check_goal_achievement, goal_display_name
from ...core.models import DIRECT_METRICS, Exercise, Metric, SetLog, parse_session_datetime
from ...core.sets import complete_set, with_targets
from ...io.serializers import ValidationError
from ...io.session_store import new_id
from .. import views
from ..app import DataDirOption, ExerciseOption, JsonOption, app, get_store, require_store


@app.command()
def init(data_dir: DataDirOption = None) -> None:
    """
    Create the data directory and empty data files.
    """
    store = get_store(data_dir)
    store.init()
    views.print_success(f"Initialized liftlog data in {store.data_dir}")


@app.command()
def exercises(data_dir: DataDirOption = None, json_out: JsonOption = False) -> None:
    """
    List the exercise catalog.
    """
    store = require_store(data_dir)
    try:
        catalog = asyncio.run(store.fetch_exercises())
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([
            {
                "id": ex.id,
                "name": ex.name,
                "enabled_metrics": [m.value for m in ex.enabled_metrics],
            }
            for ex in catalog
        ], indent=2))
        return

    if not catalog:
        views.console.print("[yellow]No exercises yet. Use 'add-exercise'.[/yellow]")
        return
    views.console.print(views.format_exercise_table(catalog))


@app.command("add-exercise")
def add_exercise(
    exercise_id: Annotated[str, typer.Argument(help="Exercise ID, e.g. bench_press")],
    name: Annotated[str, typer.Option("--name", "-n", help="Display name")],
    metrics: Annotated[
        str,
        typer.Option(
            "--metrics",
            "-m",
            help=f"Comma-separated: {','.join(m.value for m in DIRECT_METRICS)}",
        ),
    ] = "load,reps",
    reps_type: Annotated[
        Optional[str],
        typer.Option("--reps-type", help="standard, tempo or isometric"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Add an exercise to the catalog.
    """
    store = require_store(data_dir)
    try:
        exercise = Exercise(
            id=exercise_id,
            name=name,
            enabled_metrics=[Metric.parse(m) for m in metrics.split(",") if m.strip()],
            reps_type=reps_type,
        )
        store.add_exercise(exercise)
    except (ValueError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Added exercise {exercise.id} ({exercise.name})")


@app.command("log-set")
def log_set(
    exercise_id: ExerciseOption,
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Session date YYYY-MM-DD (default: today)"),
    ] = None,
    load: Annotated[Optional[float], typer.Option("--load", "-l", help="Load in kg", min=0)] = None,
    reps: Annotated[Optional[float], typer.Option("--reps", "-r", help="Repetitions", min=0)] = None,
    time_s: Annotated[Optional[float], typer.Option("--time", help="Elapsed time in seconds", min=0)] = None,
    distance: Annotated[Optional[float], typer.Option("--distance", help="Distance in meters", min=0)] = None,
    rom: Annotated[Optional[float], typer.Option("--rom", help="Range of motion in cm", min=0)] = None,
    rpe: Annotated[Optional[float], typer.Option("--rpe", help="RPE 0-10", min=0, max=10)] = None,
    rir: Annotated[Optional[float], typer.Option("--rir", help="Reps in reserve 0-10", min=0, max=10)] = None,
    tempo: Annotated[Optional[str], typer.Option("--tempo", help="Tempo, e.g. 3010")] = None,
    template_ref: Annotated[
        Optional[str],
        typer.Option("--template", "-T", help="Template ID or name; its planned set fills omitted values"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Log one completed set; sets on the same date share a session.

    With --template, the template's plan for this set number is stored as
    the set's targets and fills any value not given on the command line.
    """
    store = require_store(data_dir)
    session_date = date or datetime.now().strftime("%Y-%m-%d")
    try:
        parse_session_datetime(session_date)
        if store.get_exercise(exercise_id) is None:
            views.print_error(f"Unknown exercise: {exercise_id}. Use 'add-exercise' first.")
            raise typer.Exit(1)

        existing = next((s for s in store.load_sessions() if s.date == session_date), None)
        set_number = len(existing.sets_for(exercise_id)) + 1 if existing else 1

        target = None
        session_name = None
        if template_ref is not None:
            template = store.get_template(template_ref)
            if template is None:
                raise ValueError(f"Template not found: {template_ref}")
            planned = template.exercise(exercise_id)
            if planned is None:
                raise ValueError(f"Template {template.name!r} does not include {exercise_id}")
            target = planned.target_for(set_number)
            session_name = template.name

        entered = SetLog(
            id=new_id(),
            exercise_id=exercise_id,
            set_number=set_number,
            load_kg=load,
            reps=reps,
            time_seconds=time_s,
            distance_meters=distance,
            rom_cm=rom,
            rpe=rpe,
            rir=rir,
            tempo=tempo,
        )
        set_log = complete_set(with_targets(entered, target))
        store.add_set(session_date, set_log, session_name=session_name)
        user_profile = store.load_profile()
    except (ValueError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Logged set {set_number} of {exercise_id} on {session_date}")
    if user_profile is not None and user_profile.track_rpe and set_log.rpe is None:
        views.print_warning("RPE not recorded for this set (pass --rpe).")

    try:
        achieved = asyncio.run(check_goal_achievement(store, set_log, exercise_id))
    except (FileNotFoundError, ValidationError, KeyError) as e:
        views.print_error(f"Set saved, but goals could not be checked: {e}")
        raise typer.Exit(1)
    if achieved is not None:
        views.print_success(f"Goal achieved: {goal_display_name(achieved)}")
