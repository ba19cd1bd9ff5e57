"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of sessions, metrics and goals.
"""

from rich.console import Console
from rich.table import Table

from ..core.analytics import ChartSeries
from ..core.ascii_plot import create_analytics_plot, create_volume_chart
from ..core.goals import calculate_goal_progress, goal_display_name
from ..core.models import (
    AnalyticsMetrics,
    DataPoint,
    Exercise,
    ExerciseGoal,
    Metric,
    SetLog,
    SetTarget,
    Trend,
    UserProfile,
    WeightEntry,
    WorkoutSession,
    WorkoutTemplate,
)

console = Console()

TREND_STYLES: dict[Trend, str] = {
    Trend.ASCENDING: "[green]▲ ascending[/green]",
    Trend.DESCENDING: "[red]▼ descending[/red]",
    Trend.PLATEAUING: "[yellow]▶ plateauing[/yellow]",
    Trend.INSUFFICIENT_DATA: "[dim]insufficient data[/dim]",
}


def _fmt(value: float | None, unit: str = "") -> str:
    if value is None:
        return "-"
    text = f"{value:.1f}".rstrip("0").rstrip(".")
    return f"{text} {unit}".rstrip()


def format_exercise_table(exercises: list[Exercise]) -> Table:
    """
    Create a Rich table of the exercise catalog.

    Args:
        exercises: Exercises to display

    Returns:
        Rich Table object
    """
    table = Table(title="Exercises")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Metrics", style="green")
    table.add_column("Reps type", style="magenta")

    for ex in exercises:
        table.add_row(
            ex.id,
            ex.name,
            ", ".join(m.value for m in ex.selectable_metrics()),
            ex.reps_type or "-",
        )
    return table


def _fmt_set(s: SetLog) -> str:
    """Compact set text, e.g. "100kg×5 ROM 40cm"."""
    parts: list[str] = []
    if s.load_kg is not None and s.reps is not None:
        parts.append(f"{_fmt(s.load_kg)}kg×{_fmt(s.reps)}")
    elif s.load_kg is not None:
        parts.append(f"{_fmt(s.load_kg)}kg")
    elif s.reps is not None:
        parts.append(f"{_fmt(s.reps)} reps")
    if s.time_seconds is not None:
        parts.append(f"{_fmt(s.time_seconds)}s")
    if s.distance_meters is not None:
        parts.append(f"{_fmt(s.distance_meters)}m")
    if s.rom_cm is not None:
        parts.append(f"ROM {_fmt(s.rom_cm)}cm")
    return " ".join(parts) or "-"


def format_history_table(points: list[DataPoint], exercise_id: str) -> Table:
    """
    Create a Rich table of the sessions in the current window.

    Args:
        points: Data points (one per session with data)
        exercise_id: Exercise whose sets are listed

    Returns:
        Rich Table object
    """
    table = Table(title="History")
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Date", style="cyan")
    table.add_column("Sets")
    table.add_column("Max load", justify="right", style="bold")
    table.add_column("Max reps", justify="right")
    table.add_column("Volume", justify="right")

    for i, p in enumerate(points, 1):
        sets = p.session.sets_for(exercise_id)
        table.add_row(
            str(i),
            p.session.parsed_date.strftime("%Y-%m-%d"),
            ", ".join(_fmt_set(s) for s in sets),
            _fmt(p.load, "kg") if p.load > 0 else "-",
            _fmt(p.reps) if p.reps > 0 else "-",
            _fmt(p.volume, "kg") if p.volume > 0 else "-",
        )
    return table


def format_metrics_display(
    metric: Metric,
    metrics: AnalyticsMetrics,
    exercise_name: str,
    time_frame_label: str,
) -> str:
    """
    Format summary metrics as a text block.

    Args:
        metric: Variable summarized
        metrics: Computed metrics
        exercise_name: Display name
        time_frame_label: e.g. "3M" or "last 45 days"

    Returns:
        Formatted string (Rich markup)
    """
    unit = metric.unit
    lines = [
        f"[bold]{exercise_name}[/bold] · {metric.value} · {time_frame_label}",
        f"- Max: {_fmt(metrics.max, unit)}",
        f"- Avg: {_fmt(metrics.avg, unit)}",
        f"- Min: {_fmt(metrics.min, unit)}",
        f"- Total volume: {_fmt(metrics.volume, 'kg')}",
        f"- Trend: {TREND_STYLES[metrics.trend]}",
    ]
    if metrics.est_1rm is not None:
        lines.append(
            f"- Est. 1RM / 3RM / 5RM: {_fmt(metrics.est_1rm, 'kg')} / "
            f"{_fmt(metrics.est_3rm, 'kg')} / {_fmt(metrics.est_5rm, 'kg')}"
        )
    return "\n".join(lines)


def print_chart(
    series: ChartSeries,
    title: str,
    primary_label: str,
    secondary_label: str = "",
    width: int = 60,
    height: int = 20,
) -> None:
    """Print the ASCII analytics chart."""
    plot = create_analytics_plot(
        series,
        width=width,
        height=height,
        title=title,
        primary_label=primary_label,
        secondary_label=secondary_label,
    )
    console.print(plot, markup=False, highlight=False)


def print_volume_chart(points: list[DataPoint]) -> None:
    """Print per-session volume bars."""
    console.print(
        create_volume_chart(points),
        markup=False,
        highlight=False,
    )


def format_goals_table(goals: list[ExerciseGoal], history: list[SetLog]) -> Table:
    """
    Create a Rich table of goals with progress.

    Args:
        goals: Goals to display
        history: Sets of the goals' exercise

    Returns:
        Rich Table object
    """
    table = Table(title="Goals")
    table.add_column("ID", style="dim")
    table.add_column("Goal", style="bold")
    table.add_column("Progress", justify="right")
    table.add_column("Status")

    for goal in goals:
        progress = 100 if goal.completed else calculate_goal_progress(goal, history)
        status = "[green]done[/green]" if goal.completed else "active"
        table.add_row(goal.id[:8], goal_display_name(goal), f"{progress}%", status)
    return table


def format_weight_table(entries: list[WeightEntry]) -> Table:
    table = Table(title="Body Weight")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Change", justify="right")

    previous: float | None = None
    for e in entries:
        change = "-" if previous is None else f"{e.weight_kg - previous:+.1f}"
        table.add_row(e.date, f"{e.weight_kg:.1f} kg", change)
        previous = e.weight_kg
    return table


def _fmt_target(t: SetTarget) -> str:
    """Compact planned-set text, e.g. "60kg×8-10 @3010"."""
    parts: list[str] = []
    if t.load_kg is not None and t.reps is not None:
        parts.append(f"{_fmt(t.load_kg)}kg×{t.reps}")
    elif t.load_kg is not None:
        parts.append(f"{_fmt(t.load_kg)}kg")
    elif t.reps is not None:
        parts.append(f"{t.reps} reps")
    if t.time_seconds is not None:
        parts.append(f"{_fmt(t.time_seconds)}s")
    if t.distance_meters is not None:
        parts.append(f"{_fmt(t.distance_meters)}m")
    if t.rom_cm is not None:
        parts.append(f"ROM {t.rom_cm}cm")
    if t.tempo is not None:
        parts.append(f"@{t.tempo}")
    return " ".join(parts) or "-"


def format_templates_table(templates: list[WorkoutTemplate], names: dict[str, str]) -> Table:
    """
    Create a Rich table of workout templates.

    Args:
        templates: Templates to display
        names: Exercise id -> display name, for ids still in the catalog

    Returns:
        Rich Table object
    """
    table = Table(title="Templates", show_lines=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Exercises")

    for t in templates:
        rows = []
        for te in t.exercises:
            plan = ", ".join(_fmt_target(s) for s in te.sets) or "no planned sets"
            rows.append(f"[cyan]{names.get(te.exercise_id, te.exercise_id)}[/cyan]: {plan}")
        table.add_row(t.id[:8], t.name, "\n".join(rows) or "-")
    return table


def format_profile(profile: UserProfile, latest_weight: WeightEntry | None) -> str:
    lines = [
        f"[bold]Name:[/bold]       {profile.display_name or '-'}",
        f"[bold]Sex:[/bold]        {profile.sex}",
        f"[bold]Track RPE:[/bold]  {'yes' if profile.track_rpe else 'no'}",
    ]
    if latest_weight is not None:
        lines.append(
            f"[bold]Weight:[/bold]     {latest_weight.weight_kg:.1f} kg ({latest_weight.date})"
        )
    return "\n".join(lines)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def sessions_sets(sessions: list[WorkoutSession], exercise_id: str) -> list[SetLog]:
    """Flatten the sets of one exercise across sessions."""
    return [s for session in sessions for s in session.sets_for(exercise_id)]
