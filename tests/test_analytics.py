"""
Tests for the analytics pipeline: data points, summary metrics, chart data
and chart series with regression overlays.
"""

from datetime import datetime

import pytest

from liftlog.core.analytics import (
    build_chart_series,
    build_data_points,
    compute_metrics,
    get_chart_data,
    value_series,
)
from liftlog.core.ascii_plot import create_analytics_plot, create_volume_chart
from liftlog.core.config import AnalyticsSettings
from liftlog.core.models import AggMode, AxisScale, Metric, SetLog, Trend, WorkoutSession


def _set(
    load: float | None = None,
    reps: float | None = None,
    *,
    exercise_id: str = "bench",
    rom: float | None = None,
    time: float | None = None,
) -> SetLog:
    return SetLog(
        id="s",
        exercise_id=exercise_id,
        load_kg=load,
        reps=reps,
        rom_cm=rom,
        time_seconds=time,
    )


def _session(date: str, *sets: SetLog) -> WorkoutSession:
    return WorkoutSession(id=date, date=date, sets=list(sets))


def _load_series_sessions() -> list[WorkoutSession]:
    """Four sessions whose max load is [0, 10, 0, 20]; reps keep every point."""
    return [
        _session("2025-01-01", _set(None, 5)),
        _session("2025-01-03", _set(10, 5)),
        _session("2025-01-05", _set(None, 5)),
        _session("2025-01-07", _set(20, 5)),
    ]


class TestBuildDataPoints:

    def test_per_metric_values(self):
        points = build_data_points(
            [_session("2025-01-05", _set(100, 5, rom=40), _set(80, 8, rom=45))], "bench"
        )
        assert len(points) == 1
        p = points[0]
        assert p.load == 100.0
        assert p.reps == 8.0
        assert p.rom == 45.0
        assert p.volume == 1140.0
        assert p.time == 0.0

    def test_sessions_without_data_are_dropped(self):
        sessions = [
            _session("2025-01-01", _set(140, 3, exercise_id="squat")),
            _session("2025-01-02", _set(None, None)),
            _session("2025-01-03", _set(0, 0)),
            _session("2025-01-04", _set(None, None, time=60)),
        ]
        points = build_data_points(sessions, "bench")
        assert [p.date for p in points] == ["2025-01-04"]

    def test_keeps_session_order(self):
        points = build_data_points(_load_series_sessions(), "bench")
        assert [p.date for p in points] == ["2025-01-01", "2025-01-03", "2025-01-05", "2025-01-07"]

    def test_value_series_keeps_zeros(self):
        points = build_data_points(_load_series_sessions(), "bench")
        assert value_series(points, "bench", Metric.LOAD) == [0.0, 10.0, 0.0, 20.0]

    def test_max_series_reads_stored_point_values(self):
        points = build_data_points(
            [_session("2025-01-05", _set(100, 5, rom=40, time=30), _set(80, 8, rom=45))], "bench"
        )
        for metric in Metric:
            assert value_series(points, "bench", metric) == [points[0].value(metric)]
        assert points[0].value(Metric.ROM) == 45.0
        assert points[0].value(Metric.VOLUME) == 100 * 5 + 80 * 8

    def test_other_modes_recompute_from_session(self):
        points = build_data_points(
            [_session("2025-01-05", _set(100, 5), _set(80, 8))], "bench"
        )
        assert value_series(points, "bench", Metric.LOAD, AggMode.MIN) == [80.0]
        assert value_series(points, "bench", Metric.VOLUME, AggMode.MIN) == [1140.0]


class TestComputeMetrics:

    def test_stats_skip_zero_sessions(self):
        points = build_data_points(_load_series_sessions(), "bench")
        m = compute_metrics(points, "bench", Metric.LOAD)
        assert m.max == 20.0
        assert m.min == 10.0
        assert m.avg == pytest.approx(15.0)

    def test_trend_uses_full_series(self):
        points = build_data_points(_load_series_sessions(), "bench")
        m = compute_metrics(points, "bench", Metric.LOAD)
        assert m.regression == pytest.approx((0.0, 5.0, 10.0, 15.0))
        assert m.trend is Trend.ASCENDING

    def test_volume_is_total_whatever_the_variable(self):
        points = build_data_points(_load_series_sessions(), "bench")
        # 10x5 + 20x5
        assert compute_metrics(points, "bench", Metric.LOAD).volume == 150.0
        assert compute_metrics(points, "bench", Metric.REPS).volume == 150.0

    def test_rep_max_estimates_for_load(self):
        points = build_data_points(_load_series_sessions(), "bench")
        m = compute_metrics(points, "bench", Metric.LOAD)
        est = 20 * (1 + 5 / 30)
        assert m.est_1rm == pytest.approx(est)
        assert m.est_3rm == pytest.approx(est * 0.93)
        assert m.est_5rm == pytest.approx(est * 0.87)

    def test_rep_max_estimates_for_rom(self):
        points = build_data_points([_session("2025-01-05", _set(60, 10, rom=30))], "bench")
        assert compute_metrics(points, "bench", Metric.ROM).est_1rm == pytest.approx(80.0)

    def test_no_rep_max_for_reps(self):
        points = build_data_points(_load_series_sessions(), "bench")
        m = compute_metrics(points, "bench", Metric.REPS)
        assert m.est_1rm is None
        assert m.est_3rm is None

    def test_no_rep_max_without_loaded_sets(self):
        points = build_data_points([_session("2025-01-05", _set(None, 12))], "bench")
        assert compute_metrics(points, "bench", Metric.LOAD).est_1rm is None

    def test_aggregation_mode(self):
        points = build_data_points([_session("2025-01-05", _set(100, 5), _set(80, 8))], "bench")
        assert compute_metrics(points, "bench", Metric.LOAD, AggMode.MIN).max == 80.0
        assert compute_metrics(points, "bench", Metric.LOAD, AggMode.SUM).max == 180.0
        assert compute_metrics(points, "bench", Metric.VOLUME, AggMode.MIN).max == 1140.0

    def test_empty(self):
        m = compute_metrics([], "bench", Metric.LOAD)
        assert (m.max, m.min, m.avg, m.volume) == (0.0, 0.0, 0.0, 0.0)
        assert m.trend is Trend.INSUFFICIENT_DATA
        assert m.regression == ()

    def test_single_point(self):
        points = build_data_points([_session("2025-01-05", _set(100, 5))], "bench")
        m = compute_metrics(points, "bench", Metric.LOAD)
        assert m.max == m.min == m.avg == 100.0
        assert m.trend is Trend.INSUFFICIENT_DATA

    def test_custom_threshold(self):
        points = build_data_points(
            [_session("2025-01-01", _set(100, 5)), _session("2025-01-02", _set(101, 5))], "bench"
        )
        assert compute_metrics(points, "bench", Metric.LOAD).trend is Trend.ASCENDING
        strict = AnalyticsSettings(trend_slope_threshold=2.0)
        assert compute_metrics(points, "bench", Metric.LOAD, settings=strict).trend is Trend.PLATEAUING


class TestChartData:

    def test_labels_and_values(self):
        points = build_data_points([_session("2025-01-05", _set(100, 5))], "bench")
        chart = get_chart_data(points, "bench", Metric.LOAD)
        assert len(chart) == 1
        assert chart[0].label == "Jan 5"
        assert chart[0].date == datetime(2025, 1, 5)
        assert chart[0].value == 100.0
        assert chart[0].secondary_value == 0.0
        assert chart[0].data_point_text == "100"

    def test_secondary_variable(self):
        points = build_data_points(_load_series_sessions(), "bench")
        chart = get_chart_data(points, "bench", Metric.LOAD, Metric.REPS)
        assert [c.value for c in chart] == [0.0, 10.0, 0.0, 20.0]
        assert [c.secondary_value for c in chart] == [5.0, 5.0, 5.0, 5.0]

    def test_one_point_per_data_point(self):
        points = build_data_points(_load_series_sessions(), "bench")
        assert len(get_chart_data(points, "bench", Metric.VOLUME)) == len(points)


class TestChartSeries:

    def _points(self):
        return build_data_points(
            [
                _session("2025-01-01", _set(40, 10)),
                _session("2025-01-03", _set(45, 8)),
                _session("2025-01-05", _set(50, 6)),
            ],
            "bench",
        )

    def test_primary_only(self):
        series = build_chart_series(self._points(), "bench", Metric.LOAD)
        assert series.primary_regression == pytest.approx((40.0, 45.0, 50.0))
        assert series.primary_axis == AxisScale(0.0, 50.0, 5.0, 10)
        assert not series.has_secondary
        assert series.secondary_regression_scaled == ()

    def test_secondary_regression_rescaled_to_primary_axis(self):
        series = build_chart_series(self._points(), "bench", Metric.LOAD, Metric.REPS)
        assert series.secondary_regression == pytest.approx((10.0, 8.0, 6.0))
        assert series.secondary_axis == AxisScale(0.0, 10.0, 1.0, 10)
        # 0..10 mapped onto 0..50
        assert series.secondary_regression_scaled == pytest.approx((50.0, 40.0, 30.0))

    def test_same_axis_keeps_secondary_regression(self):
        series = build_chart_series(
            self._points(), "bench", Metric.LOAD, Metric.LOAD, AggMode.MAX, AggMode.MIN
        )
        assert series.secondary_axis == series.primary_axis
        assert series.secondary_regression_scaled == series.secondary_regression

    def test_axis_covers_regression_overshoot(self):
        # Regression of [0, 0, 0, 100] is [-20, 10, 40, 70]
        points = build_data_points(
            [
                _session("2025-01-01", _set(None, 5)),
                _session("2025-01-02", _set(None, 5)),
                _session("2025-01-03", _set(None, 5)),
                _session("2025-01-04", _set(100, 5)),
            ],
            "bench",
        )
        series = build_chart_series(points, "bench", Metric.LOAD)
        assert series.primary_axis.min_value <= min(series.primary_regression)
        assert series.primary_axis.max_value >= max(series.primary_regression)

    def test_empty_points(self):
        series = build_chart_series([], "bench", Metric.LOAD)
        assert series.points == []
        assert series.primary_axis.max_value == pytest.approx(10.0)


class TestAsciiPlot:

    def test_empty_message(self):
        series = build_chart_series([], "bench", Metric.LOAD)
        assert create_analytics_plot(series) == "No sessions in the selected time frame."

    def test_draws_markers_and_legend(self):
        points = build_data_points(
            [
                _session("2025-01-01", _set(40, 10)),
                _session("2025-01-03", _set(45, 8)),
                _session("2025-01-05", _set(50, 6)),
            ],
            "bench",
        )
        series = build_chart_series(points, "bench", Metric.LOAD, Metric.REPS)
        plot = create_analytics_plot(series, title="Bench", primary_label="load (max)")
        assert plot.splitlines()[0] == "Bench"
        assert "●" in plot
        assert "○" in plot
        assert "Jan 1" in plot
        assert "● load (max)" in plot
        assert "(right axis)" in plot

    def test_volume_chart(self):
        points = build_data_points(
            [
                _session("2025-01-01", _set(100, 10)),
                _session("2025-01-03T18:30:00Z", _set(50, 6), _set(50, 4)),
            ],
            "bench",
        )
        lines = create_volume_chart(points, width=10).splitlines()
        assert lines[0] == "Session Volume (kg)"
        assert lines[2].startswith("2025-01-01 │")
        assert lines[2].count("█") == 10
        assert lines[2].endswith("1,000.0 kg")
        assert lines[3].startswith("2025-01-03 │")
        assert lines[3].count("█") == 5
        assert lines[4].endswith("1,500.0 kg over 2 sessions")

    def test_volume_chart_empty(self):
        assert create_volume_chart([]) == "No sessions in the selected time frame."
