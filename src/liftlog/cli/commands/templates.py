"""Template commands: templates, add-template, delete-template."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import SetTarget, TemplateExercise, WorkoutTemplate
from ...core.sets import parse_set_target
from ...io.serializers import ValidationError, set_target_to_dict
from ...io.session_store import new_id
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store


@app.command()
def templates(data_dir: DataDirOption = None, json_out: JsonOption = False) -> None:
    """
    List workout templates.
    """
    store = require_store(data_dir)
    try:
        all_templates = store.load_templates()
        names = {ex.id: ex.name for ex in store.load_exercises()}
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps([
            {
                "id": t.id,
                "name": t.name,
                "exercises": [
                    {
                        "exercise_id": te.exercise_id,
                        "sets": [set_target_to_dict(s) for s in te.sets],
                    }
                    for te in t.exercises
                ],
            }
            for t in all_templates
        ], indent=2))
        return

    if not all_templates:
        views.console.print("[yellow]No templates yet. Use 'add-template'.[/yellow]")
        return
    views.console.print(views.format_templates_table(all_templates, names))


@app.command("add-template")
def add_template(
    name: Annotated[str, typer.Argument(help="Template name, e.g. 'Push day'")],
    exercise_ids: Annotated[
        list[str],
        typer.Option("--exercise", "-e", help="Exercise ID, in order (repeatable)"),
    ],
    targets: Annotated[
        Optional[list[str]],
        typer.Option(
            "--target",
            "-t",
            help="Planned set as EXERCISE=key:value,... e.g. bench=load:60,reps:8-10 (repeatable)",
        ),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Create a workout template from catalog exercises.

    Each --target adds one planned set to its exercise, in the order given.
    """
    store = require_store(data_dir)
    planned: dict[str, list[SetTarget]] = {ex_id: [] for ex_id in exercise_ids}
    try:
        for exercise_id in exercise_ids:
            if store.get_exercise(exercise_id) is None:
                raise ValueError(f"Unknown exercise: {exercise_id}. Use 'add-exercise' first.")
        for item in targets or []:
            exercise_id, sep, spec = item.partition("=")
            exercise_id = exercise_id.strip()
            if not sep:
                raise ValueError(f"Expected EXERCISE=key:value in --target, got {item!r}")
            if exercise_id not in planned:
                raise ValueError(f"--target names {exercise_id}, which is not a template exercise")
            planned[exercise_id].append(parse_set_target(spec))

        template = WorkoutTemplate(
            id=new_id(),
            name=name,
            exercises=[
                TemplateExercise(exercise_id=ex_id, sets=planned[ex_id]) for ex_id in exercise_ids
            ],
        )
        store.save_template(template)
    except (ValueError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    total_sets = sum(len(te.sets) for te in template.exercises)
    views.print_success(
        f"Added template {template.name!r} ({len(template.exercises)} exercises, "
        f"{total_sets} planned sets)"
    )


@app.command("delete-template")
def delete_template(
    ref: Annotated[str, typer.Argument(help="Template ID or name")],
    data_dir: DataDirOption = None,
) -> None:
    """
    Delete a workout template.
    """
    store = require_store(data_dir)
    try:
        deleted = store.delete_template(ref)
    except KeyError:
        views.print_error(f"Template not found: {ref}")
        raise typer.Exit(1)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Deleted template {deleted.name!r}")
