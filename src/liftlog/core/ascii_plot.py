"""
ASCII plotting for exercise analytics.

Creates terminal-friendly charts from a ChartSeries: sessions are spaced
evenly along x (the same index axis the regression is fitted on) and y
follows the series' nice axes.
"""

from .analytics import ChartSeries
from .models import AxisScale, DataPoint, Metric


def _row_for(value: float, axis: AxisScale, plot_height: int) -> int | None:
    """Grid row for a value (row 0 is the top), or None when off-axis."""
    if axis.range <= 0:
        return None
    frac = (value - axis.min_value) / axis.range
    row = plot_height - 1 - round(frac * (plot_height - 1))
    if 0 <= row < plot_height:
        return row
    return None


def _col_for(index: int, n_points: int, plot_width: int) -> int:
    if n_points <= 1:
        return 0
    return round(index / (n_points - 1) * (plot_width - 1))


def _fmt_tick(value: float) -> str:
    if value == int(value):
        return f"{int(value)}"
    return f"{value:.1f}"


def _axis_label(axis: AxisScale, row: int, plot_height: int, width: int) -> str:
    """Tick label for a row, blank between gridlines."""
    sections = axis.sections
    # Rows that sit on a gridline (top row = max, bottom row = min)
    for i in range(sections + 1):
        tick_row = round(i / sections * (plot_height - 1))
        if tick_row == row:
            value = axis.max_value - i * axis.step
            return _fmt_tick(value).rjust(width)
    return " " * width


def create_analytics_plot(
    series: ChartSeries,
    width: int = 60,
    height: int = 20,
    title: str = "",
    primary_label: str = "value",
    secondary_label: str = "",
) -> str:
    """
    Create an ASCII chart with regression overlays.

    Markers: ● primary values, · primary regression, ○ secondary values
    (right axis), × secondary regression drawn on the primary axis.

    Args:
        series: Chart series from build_chart_series()
        width: Plot width in characters (left axis labels included)
        height: Plot height in lines (title and x-axis included)
        title: Chart title
        primary_label: Legend text for the primary variable
        secondary_label: Legend text for the secondary variable

    Returns:
        ASCII art string
    """
    points = series.points
    if not points:
        return "No sessions in the selected time frame."

    label_width = max(
        len(_fmt_tick(v)) for v in (series.primary_axis.min_value, series.primary_axis.max_value)
    )
    right_width = 0
    if series.secondary_axis is not None:
        right_width = max(
            len(_fmt_tick(v))
            for v in (series.secondary_axis.min_value, series.secondary_axis.max_value)
        )

    plot_width = max(2, width - label_width - 2)
    plot_height = max(3, height - 4)  # title, separator, x-axis, labels

    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]
    n = len(points)

    def _put(col: int, row: int | None, ch: str, over: tuple[str, ...] = (" ",)) -> None:
        if row is not None and 0 <= col < plot_width and grid[row][col] in over:
            grid[row][col] = ch

    # Regression lines first so data markers win shared cells
    for i, v in enumerate(series.secondary_regression_scaled):
        _put(_col_for(i, n, plot_width), _row_for(v, series.primary_axis, plot_height), "×")
    for i, v in enumerate(series.primary_regression):
        _put(
            _col_for(i, n, plot_width),
            _row_for(v, series.primary_axis, plot_height),
            "·",
            over=(" ", "×"),
        )

    if series.secondary_axis is not None:
        for i, p in enumerate(points):
            _put(
                _col_for(i, n, plot_width),
                _row_for(p.secondary_value, series.secondary_axis, plot_height),
                "○",
                over=(" ", "×", "·"),
            )

    for i, p in enumerate(points):
        _put(
            _col_for(i, n, plot_width),
            _row_for(p.value, series.primary_axis, plot_height),
            "●",
            over=(" ", "×", "·", "○"),
        )

    lines: list[str] = []
    total_width = label_width + 2 + plot_width + (right_width + 1 if right_width else 0)

    if title:
        lines.append(title)
        lines.append("─" * total_width)

    for row in range(plot_height):
        left = _axis_label(series.primary_axis, row, plot_height, label_width)
        line = f"{left} ┤{''.join(grid[row])}"
        if series.secondary_axis is not None:
            right = _axis_label(series.secondary_axis, row, plot_height, right_width)
            line += f"├{right}"
        lines.append(line)

    lines.append(" " * (label_width + 1) + "└" + "─" * plot_width)

    # First, middle and last session labels
    label_line = [" "] * plot_width
    for idx in sorted({0, n // 2, n - 1}):
        text = points[idx].label
        start = min(_col_for(idx, n, plot_width), max(0, plot_width - len(text)))
        for j, c in enumerate(text):
            if start + j < plot_width:
                label_line[start + j] = c
    lines.append(" " * (label_width + 2) + "".join(label_line))

    legend = [f"● {primary_label}"]
    if series.primary_regression:
        legend.append("· trend")
    if series.secondary_axis is not None:
        legend.append(f"○ {secondary_label or 'secondary'} (right axis)")
        if series.secondary_regression_scaled:
            legend.append("× secondary trend")
    lines.append("   ".join(legend))

    return "\n".join(lines)


def create_volume_chart(
    points: list[DataPoint],
    width: int = 40,
    title: str = "Session Volume",
) -> str:
    """
    Horizontal bars of per-session volume, one row per data point.

    Bars scale to the heaviest session. Rows are labelled with the session
    date and end with the volume in kg; a total line closes the chart.

    Args:
        points: Data points in session order
        width: Bar width of the heaviest session
        title: Chart title (the unit is appended)

    Returns:
        ASCII bar chart string
    """
    if not points:
        return "No sessions in the selected time frame."

    unit = Metric.VOLUME.unit
    labels = [p.session.parsed_date.strftime("%Y-%m-%d") for p in points]
    heaviest = max(p.volume for p in points)
    label_width = max(len(label) for label in labels)

    lines = []
    if title:
        lines.append(f"{title} ({unit})")
        lines.append("─" * (label_width + width + 12))

    for label, point in zip(labels, points):
        bar_len = round(point.volume / heaviest * width) if heaviest > 0 else 0
        lines.append(f"{label:>{label_width}} │{'█' * bar_len} {point.volume:,.1f} {unit}")

    total = sum(p.volume for p in points)
    lines.append(f"{'total':>{label_width}} │ {total:,.1f} {unit} over {len(points)} sessions")
    return "\n".join(lines)
