"""Analysis commands: metrics, chart, volume, history."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import AggMode, Metric, TimeFrame
from ...core.query import ExerciseAnalytics
from ...io.serializers import ValidationError
from .. import views
from ..app import (
    AggOption,
    CustomDaysOption,
    DataDirOption,
    ExerciseOption,
    JsonOption,
    TimeFrameOption,
    app,
    open_analytics,
    require_store,
)


def _parse_or_exit(parser, value: str):
    try:
        return parser(value)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def _time_frame_label(analytics: ExerciseAnalytics) -> str:
    if analytics.time_frame is TimeFrame.CUSTOM:
        return f"last {analytics.custom_days} days"
    if analytics.time_frame is TimeFrame.ALL:
        return "all time"
    return analytics.time_frame.value


def _exercise_name(store, exercise_id: str) -> str:
    try:
        exercise = store.get_exercise(exercise_id)
    except (FileNotFoundError, ValidationError):
        exercise = None
    return exercise.name if exercise is not None else exercise_id


@app.command()
def metrics(
    exercise_id: ExerciseOption,
    variable: Annotated[
        str,
        typer.Option("--variable", "-v", help="load, reps, time, distance, rom or volume"),
    ] = "load",
    agg: AggOption = "max",
    timeframe: TimeFrameOption = None,
    custom_days: CustomDaysOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show max/avg/min, total volume, trend and rep-max estimates.
    """
    metric = _parse_or_exit(Metric.parse, variable)
    agg_mode = _parse_or_exit(AggMode.parse, agg)
    store = require_store(data_dir)
    analytics = open_analytics(store, exercise_id, timeframe, custom_days)

    result = analytics.compute_metrics(metric, agg_mode)

    if json_out:
        print(json.dumps({
            "exercise_id": exercise_id,
            "variable": metric.value,
            "aggregation": agg_mode.value,
            "time_frame": analytics.time_frame.value,
            "sessions": len(analytics.data_points()),
            "max": round(result.max, 4),
            "min": round(result.min, 4),
            "avg": round(result.avg, 4),
            "volume": round(result.volume, 4),
            "trend": result.trend.value,
            "est_1rm": round(result.est_1rm, 2) if result.est_1rm is not None else None,
            "est_3rm": round(result.est_3rm, 2) if result.est_3rm is not None else None,
            "est_5rm": round(result.est_5rm, 2) if result.est_5rm is not None else None,
            "regression": [round(v, 4) for v in result.regression],
        }, indent=2))
        return

    if not analytics.data_points():
        views.print_warning("No sessions for this exercise in the selected time frame.")

    views.console.print()
    views.console.print(views.format_metrics_display(
        metric,
        result,
        _exercise_name(store, exercise_id),
        _time_frame_label(analytics),
    ))
    views.console.print()


@app.command()
def chart(
    exercise_id: ExerciseOption,
    variable: Annotated[
        str,
        typer.Option("--variable", "-v", help="Primary variable"),
    ] = "load",
    secondary: Annotated[
        str,
        typer.Option("--secondary", "-s", help="Secondary variable, or 'none'"),
    ] = "none",
    agg: AggOption = "max",
    agg2: Annotated[
        str,
        typer.Option("--agg2", help="Aggregation for the secondary variable"),
    ] = "max",
    timeframe: TimeFrameOption = None,
    custom_days: CustomDaysOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display an ASCII chart with regression trend lines.
    """
    var1 = _parse_or_exit(Metric.parse, variable)
    var2 = None if secondary.strip().lower() == "none" else _parse_or_exit(Metric.parse, secondary)
    agg1_mode = _parse_or_exit(AggMode.parse, agg)
    agg2_mode = _parse_or_exit(AggMode.parse, agg2)

    store = require_store(data_dir)
    analytics = open_analytics(store, exercise_id, timeframe, custom_days)
    series = analytics.chart_series(var1, var2, agg1_mode, agg2_mode)

    if json_out:
        out = {
            "points": [
                {
                    "date": p.date.isoformat(),
                    "label": p.label,
                    "value": p.value,
                    "secondary_value": p.secondary_value,
                }
                for p in series.points
            ],
            "regression": [round(v, 4) for v in series.primary_regression],
            "axis": {
                "min": series.primary_axis.min_value,
                "max": series.primary_axis.max_value,
                "step": series.primary_axis.step,
                "sections": series.primary_axis.sections,
            },
        }
        if series.secondary_axis is not None:
            out["secondary_regression"] = [round(v, 4) for v in series.secondary_regression]
            out["secondary_regression_scaled"] = [
                round(v, 4) for v in series.secondary_regression_scaled
            ]
            out["secondary_axis"] = {
                "min": series.secondary_axis.min_value,
                "max": series.secondary_axis.max_value,
                "step": series.secondary_axis.step,
                "sections": series.secondary_axis.sections,
            }
        print(json.dumps(out, indent=2))
        return

    title = f"{_exercise_name(store, exercise_id)} · {_time_frame_label(analytics)}"
    views.print_chart(
        series,
        title=title,
        primary_label=f"{var1.value} ({agg1_mode.value})",
        secondary_label=f"{var2.value} ({agg2_mode.value})" if var2 is not None else "",
        width=analytics.settings.chart_width,
        height=analytics.settings.chart_height,
    )


@app.command()
def volume(
    exercise_id: ExerciseOption,
    timeframe: TimeFrameOption = None,
    custom_days: CustomDaysOption = None,
    data_dir: DataDirOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show per-session volume (load × reps) bars.
    """
    store = require_store(data_dir)
    analytics = open_analytics(store, exercise_id, timeframe, custom_days)
    points = analytics.data_points()

    if json_out:
        print(json.dumps({
            "sessions": [{"date": p.date, "volume": p.volume} for p in points],
            "total": sum(p.volume for p in points),
        }, indent=2))
        return

    views.print_volume_chart(points)


@app.command()
def history(
    exercise_id: ExerciseOption,
    timeframe: Annotated[
        Optional[str],
        typer.Option("--timeframe", "-t", help="1M, 3M, 6M, 1Y, ALL or CUSTOM"),
    ] = "ALL",
    custom_days: CustomDaysOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """
    Show logged sessions for an exercise.
    """
    store = require_store(data_dir)
    analytics = open_analytics(store, exercise_id, timeframe, custom_days)
    points = analytics.data_points()

    if not points:
        views.console.print("[yellow]No sessions recorded yet.[/yellow]")
        return
    views.console.print(views.format_history_table(points, exercise_id))
