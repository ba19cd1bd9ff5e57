"""
CLI entry point using Typer.

Provides commands for workout logging and analytics:
- init: Create the data directory
- exercises / add-exercise: Manage the exercise catalog
- log-set: Log a completed set (fills from a template, checks goals)
- templates / add-template / delete-template: Manage workout templates
- history: Show sessions for an exercise
- metrics: Max/avg/min, volume, trend and rep-max estimates
- chart: ASCII chart with regression lines
- volume: Per-session volume bars
- goals / add-goal: Manage exercise goals
- profile: Show or update the user profile
- update-weight / weight-history: Body weight tracking
"""

from typing import Annotated

import typer

from ..log import configure_logging
from .app import app

# Importing the command modules registers their commands on `app`
from .commands import analysis, goals, profile, sessions, templates  # noqa: F401


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging on stderr"),
    ] = False,
    log_json: Annotated[
        bool,
        typer.Option("--log-json", help="Render log lines as JSON"),
    ] = False,
) -> None:
    """
    Workout log analytics.
    """
    configure_logging(verbose=verbose, json_output=log_json)


if __name__ == "__main__":
    app()
