"""
Formula-focused unit tests for the analytics engine.

Values are hand-computed so the tests document the formulas:
aggregation, volume, Epley 1RM, least-squares trend, nice axes and
time-window cutoffs.
"""

import math
from datetime import datetime

import pytest

from liftlog.core.axis import nice_axis, nice_step, rescale_to_axis
from liftlog.core.config import EST_3RM_FACTOR, EST_5RM_FACTOR
from liftlog.core.metrics import (
    aggregate,
    best_est_1rm,
    calculate_est_1rm,
    rep_max_estimates,
    session_value,
    session_value_or_zero,
)
from liftlog.core.models import (
    AggMode,
    AxisScale,
    Metric,
    SetLog,
    TimeFrame,
    Trend,
    WorkoutSession,
    parse_session_datetime,
)
from liftlog.core.timeframe import EPOCH, cutoff_date, filter_sessions, shift_months
from liftlog.core.trend import classify_trend, fit_trend

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _set(
    load: float | None = None,
    reps: float | None = None,
    *,
    exercise_id: str = "bench",
    rom: float | None = None,
) -> SetLog:
    return SetLog(id="s", exercise_id=exercise_id, load_kg=load, reps=reps, rom_cm=rom)


def _session(date: str, *sets: SetLog) -> WorkoutSession:
    return WorkoutSession(id=date, date=date, sets=list(sets))


NOW = datetime(2025, 1, 1)


# =============================================================================
# Per-session aggregation
# =============================================================================

class TestAggregate:
    """max / min / avg / sum over the per-set values of one session."""

    def test_modes(self):
        values = [100.0, 80.0, 90.0]
        assert aggregate(values, AggMode.MAX) == 100.0
        assert aggregate(values, AggMode.MIN) == 80.0
        assert aggregate(values, AggMode.AVG) == pytest.approx(90.0)
        assert aggregate(values, AggMode.SUM) == 270.0

    def test_session_value_filters_other_exercises(self):
        s = _session(
            "2025-01-05",
            _set(100, 5),
            _set(140, 3, exercise_id="squat"),
            _set(80, 8),
        )
        assert session_value(s, "bench", Metric.LOAD, AggMode.MAX) == 100.0
        assert session_value(s, "bench", Metric.LOAD, AggMode.SUM) == 180.0
        assert session_value(s, "squat", Metric.LOAD) == 140.0

    def test_missing_values_count_as_zero(self):
        s = _session("2025-01-05", _set(100, 5), _set(None, 8))
        assert session_value(s, "bench", Metric.LOAD, AggMode.MIN) == 0.0
        assert session_value(s, "bench", Metric.LOAD, AggMode.AVG) == pytest.approx(50.0)

    def test_no_sets_for_exercise_is_none(self):
        s = _session("2025-01-05", _set(140, 3, exercise_id="squat"))
        assert session_value(s, "bench", Metric.LOAD) is None
        assert session_value_or_zero(s, "bench", Metric.LOAD) == 0.0


class TestVolume:
    """Volume is sum(load x reps) whatever aggregation mode is requested."""

    def test_volume_ignores_agg_mode(self):
        s = _session("2025-01-05", _set(100, 5), _set(80, 8))
        expected = 100 * 5 + 80 * 8  # 1140
        for mode in AggMode:
            assert session_value(s, "bench", Metric.VOLUME, mode) == expected

    def test_set_without_reps_adds_nothing(self):
        s = _session("2025-01-05", _set(100, 5), _set(100, None))
        assert session_value(s, "bench", Metric.VOLUME) == 500.0


# =============================================================================
# Epley 1RM and rep maxes
# =============================================================================

class TestEpley:
    """1RM = load * (1 + reps / 30)."""

    def test_formula(self):
        assert calculate_est_1rm(100, 5) == pytest.approx(100 * (1 + 5 / 30))
        assert calculate_est_1rm(60, 10) == pytest.approx(80.0)
        assert calculate_est_1rm(100, 10) == pytest.approx(133.333, abs=1e-3)

    def test_single_rep_is_the_load(self):
        assert calculate_est_1rm(120, 1) == 120

    def test_zero_reps(self):
        assert calculate_est_1rm(120, 0) == 0.0

    def test_best_skips_sets_without_load_or_reps(self):
        sessions = [
            _session("2025-01-05", _set(100, 5), _set(None, 20)),
            _session("2025-01-08", _set(200, None), _set(105, 3)),
        ]
        # 100x5 -> 116.67 beats 105x3 -> 115.5
        assert best_est_1rm(sessions, "bench") == pytest.approx(100 * (1 + 5 / 30))

    def test_best_is_zero_without_usable_sets(self):
        assert best_est_1rm([_session("2025-01-05", _set(None, 10))], "bench") == 0.0

    def test_rep_max_multipliers(self):
        one, three, five = rep_max_estimates(100.0)
        assert one == 100.0
        assert three == pytest.approx(100.0 * EST_3RM_FACTOR)
        assert five == pytest.approx(100.0 * EST_5RM_FACTOR)


# =============================================================================
# Trend fitting and classification
# =============================================================================

class TestFitTrend:
    """Least squares with x = session index."""

    def test_perfect_line(self):
        fit = fit_trend([1.0, 2.0, 3.0])
        assert fit.slope == pytest.approx(1.0)
        assert fit.intercept == pytest.approx(1.0)
        assert fit.regression_line == pytest.approx((1.0, 2.0, 3.0))

    def test_zeros_stay_in_the_fit(self):
        # Sx=6, Sy=30, Sxy=70, Sxx=14 -> slope=(280-180)/20=5, intercept=0
        fit = fit_trend([0.0, 10.0, 0.0, 20.0])
        assert fit.slope == pytest.approx(5.0)
        assert fit.intercept == pytest.approx(0.0)
        assert fit.regression_line == pytest.approx((0.0, 5.0, 10.0, 15.0))

    def test_descending(self):
        assert fit_trend([10.0, 8.0, 6.0, 4.0]).slope == pytest.approx(-2.0)

    def test_fewer_than_two_points(self):
        for values in ([], [42.0]):
            fit = fit_trend(values)
            assert fit.slope == 0.0
            assert fit.regression_line == ()


class TestClassifyTrend:

    def test_ascending(self):
        values = [0.0, 10.0, 0.0, 20.0]
        assert classify_trend(values, fit_trend(values).slope) is Trend.ASCENDING

    def test_descending(self):
        values = [10.0, 8.0, 6.0]
        assert classify_trend(values, fit_trend(values).slope) is Trend.DESCENDING

    def test_constant_series_is_plateau(self):
        values = [50.0, 50.0, 50.0]
        assert fit_trend(values).slope == pytest.approx(0.0)
        assert classify_trend(values, fit_trend(values).slope) is Trend.PLATEAUING

    def test_small_slope_is_plateau(self):
        values = [10.0, 10.05]
        assert classify_trend(values, fit_trend(values).slope) is Trend.PLATEAUING

    def test_threshold_is_exclusive(self):
        assert classify_trend([1.0, 2.0], 0.1) is Trend.PLATEAUING
        assert classify_trend([1.0, 2.0], -0.1) is Trend.PLATEAUING

    def test_needs_two_non_zero_values(self):
        values = [0.0, 10.0, 0.0]
        assert classify_trend(values, fit_trend(values).slope) is Trend.INSUFFICIENT_DATA
        assert classify_trend([], 0.0) is Trend.INSUFFICIENT_DATA


# =============================================================================
# Nice axis
# =============================================================================

class TestNiceStep:

    @pytest.mark.parametrize(
        "raw, expected",
        [(4.7, 5.0), (1.0, 1.0), (1.2, 2.0), (3.0, 5.0), (7.0, 10.0), (100.0, 100.0), (101.0, 200.0)],
    )
    def test_rounds_up_to_1_2_5(self, raw, expected):
        assert nice_step(raw) == pytest.approx(expected)

    def test_non_positive_falls_back_to_one(self):
        assert nice_step(0.0) == 1.0
        assert nice_step(-3.0) == 1.0


class TestNiceAxis:

    def test_single_value(self):
        axis = nice_axis([47.0])
        assert axis.min_value == 0.0
        assert axis.step == pytest.approx(5.0)
        assert axis.max_value == pytest.approx(50.0)
        assert axis.sections == 10

    def test_sections_times_step_covers_data(self):
        values = [12.5, 88.0, 131.0]
        axis = nice_axis(values)
        assert axis.max_value == pytest.approx(axis.min_value + axis.sections * axis.step)
        assert axis.max_value >= max(values)
        assert axis.step == pytest.approx(20.0)

    def test_small_fractions(self):
        axis = nice_axis([0.3])
        assert axis.step == pytest.approx(0.05)
        assert axis.max_value == pytest.approx(0.5)

    def test_all_zero_uses_reasonable_max(self):
        axis = nice_axis([0.0, 0.0])
        assert axis == AxisScale(min_value=0.0, max_value=10.0, step=1.0, sections=10)

    def test_empty_series(self):
        axis = nice_axis([])
        assert axis.max_value == pytest.approx(10.0)

    def test_negative_values_lower_the_minimum(self):
        axis = nice_axis([-3.0, 7.0])
        assert axis.min_value == pytest.approx(-3.0)
        assert axis.max_value == pytest.approx(7.0)
        assert axis.step == pytest.approx(1.0)

    def test_ticks(self):
        axis = nice_axis([47.0])
        ticks = axis.ticks()
        assert len(ticks) == 11
        assert ticks[0] == 0.0
        assert ticks[-1] == pytest.approx(50.0)


class TestRescale:

    def test_maps_between_axes(self):
        source = AxisScale(0.0, 10.0, 1.0, 10)
        target = AxisScale(0.0, 100.0, 10.0, 10)
        assert rescale_to_axis([0.0, 5.0, 10.0], source, target) == pytest.approx([0.0, 50.0, 100.0])

    def test_offset_axes(self):
        source = AxisScale(-5.0, 5.0, 1.0, 10)
        target = AxisScale(0.0, 50.0, 5.0, 10)
        assert rescale_to_axis([0.0], source, target) == pytest.approx([25.0])

    def test_zero_range_source(self):
        source = AxisScale(5.0, 5.0, 0.0, 10)
        target = AxisScale(0.0, 50.0, 5.0, 10)
        assert rescale_to_axis([1.0, 2.0], source, target) == [0.0, 0.0]


# =============================================================================
# Time window
# =============================================================================

class TestShiftMonths:

    def test_plain(self):
        assert shift_months(datetime(2025, 1, 1), -3) == datetime(2024, 10, 1)
        assert shift_months(datetime(2025, 1, 1), -12) == datetime(2024, 1, 1)

    def test_keeps_time_of_day(self):
        assert shift_months(datetime(2025, 5, 10, 14, 30), -1) == datetime(2025, 4, 10, 14, 30)

    def test_missing_day_overflows_into_next_month(self):
        # 31 Feb 2025 does not exist: Feb 1 + 30 days
        assert shift_months(datetime(2025, 3, 31), -1) == datetime(2025, 3, 3)
        # Leap year: Feb 1 2024 + 30 days
        assert shift_months(datetime(2024, 3, 31), -1) == datetime(2024, 3, 2)

    def test_leap_day_minus_one_year(self):
        assert shift_months(datetime(2024, 2, 29), -12) == datetime(2023, 3, 1)


class TestTimeWindow:
    """Sessions on or after the cutoff are kept."""

    SESSIONS = [
        _session("2024-01-01", _set(50, 5)),
        _session("2024-06-01", _set(55, 5)),
        _session("2024-12-01", _set(60, 5)),
    ]

    def _dates(self, time_frame: TimeFrame, custom_days: int = 30) -> list[str]:
        return [s.date for s in filter_sessions(self.SESSIONS, time_frame, custom_days, NOW)]

    def test_one_year_includes_boundary(self):
        assert self._dates(TimeFrame.ONE_YEAR) == ["2024-01-01", "2024-06-01", "2024-12-01"]

    def test_three_months(self):
        # cutoff 2024-10-01
        assert self._dates(TimeFrame.THREE_MONTHS) == ["2024-12-01"]

    def test_six_months(self):
        # cutoff 2024-07-01
        assert self._dates(TimeFrame.SIX_MONTHS) == ["2024-12-01"]

    def test_one_month_boundary_is_inclusive(self):
        assert cutoff_date(TimeFrame.ONE_MONTH, now=NOW) == datetime(2024, 12, 1)
        assert self._dates(TimeFrame.ONE_MONTH) == ["2024-12-01"]

    def test_all(self):
        assert cutoff_date(TimeFrame.ALL) == EPOCH
        assert len(self._dates(TimeFrame.ALL)) == 3

    def test_custom_days(self):
        assert cutoff_date(TimeFrame.CUSTOM, 45, NOW) == datetime(2024, 11, 17)
        assert self._dates(TimeFrame.CUSTOM, 45) == ["2024-12-01"]
        assert self._dates(TimeFrame.CUSTOM, 400) == ["2024-01-01", "2024-06-01", "2024-12-01"]

    def test_negative_custom_days_rejected(self):
        with pytest.raises(ValueError):
            cutoff_date(TimeFrame.CUSTOM, -1, NOW)

    def test_empty_history(self):
        assert filter_sessions([], TimeFrame.ONE_MONTH, now=NOW) == []

    def test_parse_time_frame(self):
        assert TimeFrame.parse("3m") is TimeFrame.THREE_MONTHS
        with pytest.raises(ValueError):
            TimeFrame.parse("2W")


class TestSessionDates:

    def test_plain_date_is_midnight(self):
        assert parse_session_datetime("2025-01-05") == datetime(2025, 1, 5)

    def test_utc_suffix(self):
        assert parse_session_datetime("2025-01-05T10:00:00Z") == datetime(2025, 1, 5, 10)

    def test_offset_converted_to_utc(self):
        assert parse_session_datetime("2025-01-05T10:00:00+02:00") == datetime(2025, 1, 5, 8)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_session_datetime("yesterday")

    def test_non_finite_metric_reads_as_zero(self):
        assert _set(math.nan, 5).metric_or_zero(Metric.LOAD) == 0.0
