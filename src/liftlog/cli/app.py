"""Shared Typer app object, shared option types, and store utilities."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import AnalyticsSettings, load_settings
from ..core.query import ExerciseAnalytics
from ..io.session_store import SessionStore, get_default_data_dir
from . import views

# Shared options used across commands
DataDirOption = Annotated[
    Optional[Path],
    typer.Option("--data-dir", "-d", help="Data directory (default: $LIFTLOG_HOME or ~/.liftlog)"),
]
ExerciseOption = Annotated[
    str,
    typer.Option("--exercise", "-e", help="Exercise ID"),
]
TimeFrameOption = Annotated[
    Optional[str],
    typer.Option("--timeframe", "-t", help="1M, 3M, 6M, 1Y, ALL or CUSTOM (default from config)"),
]
CustomDaysOption = Annotated[
    Optional[int],
    typer.Option("--days", help="Days back for --timeframe CUSTOM", min=0),
]
AggOption = Annotated[
    str,
    typer.Option("--agg", "-a", help="Per-session aggregation: max, min, avg, sum"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftlog",
    help="Workout log analytics: trends, rep-max estimates and progress charts.",
    no_args_is_help=True,
)


def get_store(data_dir: Path | None) -> SessionStore:
    """Get a session store for the given or default data directory."""
    if data_dir is None:
        data_dir = get_default_data_dir()
    return SessionStore(data_dir)


def require_store(data_dir: Path | None) -> SessionStore:
    """Get an initialized store or exit with an error."""
    store = get_store(data_dir)
    if not store.exists():
        views.print_error(f"Data directory not initialized: {store.data_dir}")
        views.print_info("Run 'init' first to create the data files.")
        raise typer.Exit(1)
    return store


def get_settings() -> AnalyticsSettings:
    """Load settings or exit with an error."""
    try:
        return load_settings()
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def open_analytics(
    store: SessionStore,
    exercise_id: str,
    timeframe: str | None,
    custom_days: int | None,
) -> ExerciseAnalytics:
    """
    Build an analytics query for an exercise and load its history.

    Exits with an error for an unknown time frame.
    """
    analytics = ExerciseAnalytics(store, settings=get_settings())
    try:
        if timeframe is not None:
            analytics.set_time_frame(timeframe)
        if custom_days is not None:
            analytics.set_custom_days(custom_days)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    asyncio.run(analytics.select_exercise(exercise_id))
    return analytics
