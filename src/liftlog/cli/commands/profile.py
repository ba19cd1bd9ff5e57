"""Profile commands: profile, update-weight, weight-history."""

import json
from typing import Annotated, Optional

import typer

from ...io.serializers import ValidationError, user_profile_to_dict
from .. import views
from ..app import DataDirOption, JsonOption, app, require_store


@app.command()
def profile(
    first_name: Annotated[Optional[str], typer.Option("--first-name", help="First name")] = None,
    last_name: Annotated[Optional[str], typer.Option("--last-name", help="Last name")] = None,
    sex: Annotated[Optional[str], typer.Option("--sex", "-s", help="Sex (male/female)")] = None,
    track_rpe: Annotated[
        Optional[bool],
        typer.Option("--track-rpe/--no-track-rpe", help="Warn when a set is logged without RPE"),
    ] = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the user profile; any option given updates it first.
    """
    store = require_store(data_dir)
    changes = {
        "first_name": first_name,
        "last_name": last_name,
        "sex": sex,
        "track_rpe": track_rpe,
    }
    try:
        if any(v is not None for v in changes.values()):
            current = store.update_profile(**changes)
            views.print_success("Profile updated")
        else:
            current = store.load_profile()
        weights = store.load_weight_history()
    except (ValueError, FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if current is None:
        views.console.print("[yellow]No profile yet. Set one with --first-name, --sex, ...[/yellow]")
        return

    latest = weights[-1] if weights else None
    if json_out:
        data = user_profile_to_dict(current)
        data["weight_kg"] = latest.weight_kg if latest else None
        print(json.dumps(data, indent=2))
        return
    views.console.print(views.format_profile(current, latest))


@app.command("update-weight")
def update_weight(
    weight_kg: Annotated[float, typer.Argument(help="Body weight in kg", min=0.1)],
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Measurement date YYYY-MM-DD (default: today)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Record a body-weight measurement.
    """
    store = require_store(data_dir)
    try:
        entry = store.add_weight_entry(weight_kg, date)
    except (ValueError, FileNotFoundError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)
    views.print_success(f"Recorded {entry.weight_kg:.1f} kg on {entry.date}")


@app.command("weight-history")
def weight_history(data_dir: DataDirOption = None) -> None:
    """
    Show body-weight history.
    """
    store = require_store(data_dir)
    try:
        entries = store.load_weight_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not entries:
        views.console.print("[yellow]No weight entries yet.[/yellow]")
        return
    views.console.print(views.format_weight_table(entries))
