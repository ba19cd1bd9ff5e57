"""
Exercise analytics: per-session data points, summary metrics and chart
series.

Pipeline: time-filtered sessions -> build_data_points() -> compute_metrics()
and get_chart_data() / build_chart_series(). Both consumers read the same
data point list, so chart x-positions and regression values line up one to
one.
"""

from dataclasses import dataclass

from .axis import nice_axis, rescale_to_axis
from .config import AnalyticsSettings
from .metrics import best_est_1rm, rep_max_estimates, session_value_or_zero
from .models import (
    AggMode,
    AnalyticsMetrics,
    AxisScale,
    ChartPoint,
    DataPoint,
    Metric,
    Trend,
    WorkoutSession,
)
from .trend import classify_trend, fit_trend

DEFAULT_SETTINGS = AnalyticsSettings()

# Variables that get estimated rep maxes on their summary card
REP_MAX_METRICS: frozenset[Metric] = frozenset({Metric.LOAD, Metric.ROM})


def build_data_points(sessions: list[WorkoutSession], exercise_id: str) -> list[DataPoint]:
    """
    Reduce each session to its per-metric values for one exercise.

    Direct metrics use the per-session max; volume is the session sum.
    Sessions where every value is 0 (including sessions without the
    exercise) are dropped.

    Args:
        sessions: Time-filtered sessions, chronological
        exercise_id: Target exercise

    Returns:
        Data points in session order
    """
    points: list[DataPoint] = []
    for s in sessions:
        point = DataPoint(
            date=s.date,
            load=session_value_or_zero(s, exercise_id, Metric.LOAD),
            reps=session_value_or_zero(s, exercise_id, Metric.REPS),
            volume=session_value_or_zero(s, exercise_id, Metric.VOLUME),
            rom=session_value_or_zero(s, exercise_id, Metric.ROM),
            time=session_value_or_zero(s, exercise_id, Metric.TIME),
            distance=session_value_or_zero(s, exercise_id, Metric.DISTANCE),
            session=s,
        )
        if point.has_data():
            points.append(point)
    return points


def point_value(
    point: DataPoint,
    exercise_id: str,
    metric: Metric,
    agg_mode: AggMode = AggMode.MAX,
) -> float:
    """Value of one data point for a metric under an aggregation mode."""
    # Volume ignores the mode; the point already holds per-session maxima
    if metric is Metric.VOLUME or agg_mode is AggMode.MAX:
        return point.value(metric)
    return session_value_or_zero(point.session, exercise_id, metric, agg_mode)


def value_series(
    points: list[DataPoint],
    exercise_id: str,
    metric: Metric,
    agg_mode: AggMode = AggMode.MAX,
) -> list[float]:
    """One value per data point, zeros kept so positions match the chart."""
    return [point_value(p, exercise_id, metric, agg_mode) for p in points]


def compute_metrics(
    points: list[DataPoint],
    exercise_id: str,
    metric: Metric,
    agg_mode: AggMode = AggMode.MAX,
    settings: AnalyticsSettings = DEFAULT_SETTINGS,
) -> AnalyticsMetrics:
    """
    Summary statistics for one variable over the filtered window.

    - max/min/avg use only the non-zero values of the series.
    - volume is the sum of session volumes over every data point,
      whatever variable was requested.
    - regression and trend use the full series, zeros included.
    - est_1rm/3rm/5rm are set for load and rom when some set has a
      positive load and rep count.

    Args:
        points: Data points from build_data_points()
        exercise_id: Target exercise
        metric: Variable to summarize
        agg_mode: Per-session aggregation for direct metrics
        settings: Trend threshold and rep-max multipliers

    Returns:
        AnalyticsMetrics (all zeros and insufficient_data for no points)
    """
    values = value_series(points, exercise_id, metric, agg_mode)
    if not values:
        return AnalyticsMetrics(max=0.0, min=0.0, avg=0.0, volume=0.0, trend=Trend.INSUFFICIENT_DATA)

    non_zero = [v for v in values if v > 0]
    if non_zero:
        max_v = max(non_zero)
        min_v = min(non_zero)
        avg_v = sum(non_zero) / len(non_zero)
    else:
        max_v = min_v = avg_v = 0.0

    total_volume = sum(p.volume for p in points)

    fit = fit_trend(values)
    trend = classify_trend(values, fit.slope, settings.trend_slope_threshold)

    est_1rm = est_3rm = est_5rm = None
    if metric in REP_MAX_METRICS:
        best = best_est_1rm((p.session for p in points), exercise_id)
        if best > 0:
            est_1rm, est_3rm, est_5rm = rep_max_estimates(
                best, settings.est_3rm_factor, settings.est_5rm_factor
            )

    return AnalyticsMetrics(
        max=max_v,
        min=min_v,
        avg=avg_v,
        volume=total_volume,
        trend=trend,
        est_1rm=est_1rm,
        est_3rm=est_3rm,
        est_5rm=est_5rm,
        regression=fit.regression_line,
    )


def chart_label(point: DataPoint) -> str:
    """Short axis label such as "Jan 5"."""
    dt = point.session.parsed_date
    return f"{dt:%b} {dt.day}"


def get_chart_data(
    points: list[DataPoint],
    exercise_id: str,
    var1: Metric,
    var2: Metric | None = None,
    agg1: AggMode = AggMode.MAX,
    agg2: AggMode = AggMode.MAX,
) -> list[ChartPoint]:
    """
    One chart point per data point, in order.

    Args:
        points: Data points from build_data_points()
        exercise_id: Target exercise
        var1: Primary variable
        var2: Secondary variable, or None for no secondary series
        agg1: Aggregation for var1
        agg2: Aggregation for var2

    Returns:
        Chart points; secondary_value is 0 throughout when var2 is None
    """
    chart: list[ChartPoint] = []
    for p in points:
        primary = point_value(p, exercise_id, var1, agg1)
        secondary = 0.0 if var2 is None else point_value(p, exercise_id, var2, agg2)
        chart.append(
            ChartPoint(
                date=p.session.parsed_date,
                label=chart_label(p),
                value=primary,
                secondary_value=secondary,
            )
        )
    return chart


@dataclass(frozen=True)
class ChartSeries:
    """
    Everything needed to draw the analysis chart.

    secondary_regression_scaled is the secondary regression mapped into
    primary-axis coordinates so it can be drawn on the primary plot.
    """

    points: list[ChartPoint]
    primary_regression: tuple[float, ...]
    primary_axis: AxisScale
    secondary_regression: tuple[float, ...] = ()
    secondary_axis: AxisScale | None = None
    secondary_regression_scaled: tuple[float, ...] = ()

    @property
    def has_secondary(self) -> bool:
        return self.secondary_axis is not None


def build_chart_series(
    points: list[DataPoint],
    exercise_id: str,
    var1: Metric,
    var2: Metric | None = None,
    agg1: AggMode = AggMode.MAX,
    agg2: AggMode = AggMode.MAX,
    settings: AnalyticsSettings = DEFAULT_SETTINGS,
) -> ChartSeries:
    """
    Chart points plus regression overlays and nice axes.

    Each axis covers its data and its own regression line. When the
    secondary axis differs from the primary one, the secondary regression
    is rescaled into primary coordinates.

    Args:
        points: Data points from build_data_points()
        exercise_id: Target exercise
        var1: Primary variable
        var2: Secondary variable or None
        agg1: Aggregation for var1
        agg2: Aggregation for var2
        settings: Axis sections and floor

    Returns:
        ChartSeries
    """
    chart = get_chart_data(points, exercise_id, var1, var2, agg1, agg2)

    primary_values = [c.value for c in chart]
    primary_fit = fit_trend(primary_values)
    primary_axis = nice_axis(
        primary_values + list(primary_fit.regression_line),
        settings.axis_sections,
        settings.min_reasonable_max,
    )

    if var2 is None:
        return ChartSeries(
            points=chart,
            primary_regression=primary_fit.regression_line,
            primary_axis=primary_axis,
        )

    secondary_values = [c.secondary_value for c in chart]
    secondary_fit = fit_trend(secondary_values)
    secondary_axis = nice_axis(
        secondary_values + list(secondary_fit.regression_line),
        settings.axis_sections,
        settings.min_reasonable_max,
    )
    if secondary_axis == primary_axis:
        scaled = secondary_fit.regression_line
    else:
        scaled = tuple(rescale_to_axis(secondary_fit.regression_line, secondary_axis, primary_axis))

    return ChartSeries(
        points=chart,
        primary_regression=primary_fit.regression_line,
        primary_axis=primary_axis,
        secondary_regression=secondary_fit.regression_line,
        secondary_axis=secondary_axis,
        secondary_regression_scaled=scaled,
    )
