"""
Tests for the stateful ExerciseAnalytics query: fetching, stale-response
handling, fetch failures and time-window changes.
"""

import asyncio
from datetime import datetime

import pytest

from liftlog.core.models import Metric, SetLog, TimeFrame, Trend, WorkoutSession
from liftlog.core.query import ExerciseAnalytics
from liftlog.io.session_store import SessionStore

NOW = datetime(2025, 1, 1)


def _session(date: str, exercise_id: str, load: float, reps: float = 5) -> WorkoutSession:
    return WorkoutSession(
        id=f"{exercise_id}-{date}",
        date=date,
        sets=[SetLog(id="s", exercise_id=exercise_id, load_kg=load, reps=reps)],
    )


BENCH = [
    _session("2024-01-01", "bench", 60),
    _session("2024-06-01", "bench", 70),
    _session("2024-12-01", "bench", 80),
]
SQUAT = [_session("2024-12-15", "squat", 120)]


class FakeStore:
    """In-memory session source with optional per-exercise gates and failures."""

    def __init__(self, histories, gates=None, failures=(), error=OSError("disk unavailable")):
        self.histories = histories
        self.gates = gates or {}
        self.failures = set(failures)
        self.error = error
        self.calls: list[str] = []

    async def fetch_exercise_history(self, exercise_id):
        self.calls.append(exercise_id)
        gate = self.gates.get(exercise_id)
        if gate is not None:
            await gate.wait()
        if exercise_id in self.failures:
            raise self.error
        return list(self.histories.get(exercise_id, []))

    async def fetch_exercises(self):
        return []


def _analytics(store) -> ExerciseAnalytics:
    return ExerciseAnalytics(store, clock=lambda: NOW)


class TestSelectExercise:

    @pytest.mark.asyncio
    async def test_fetches_history(self):
        store = FakeStore({"bench": BENCH})
        analytics = _analytics(store)

        await analytics.select_exercise("bench")

        assert store.calls == ["bench"]
        assert analytics.exercise_id == "bench"
        assert analytics.history == BENCH
        assert analytics.loading is False

    @pytest.mark.asyncio
    async def test_loading_while_fetch_in_flight(self):
        gate = asyncio.Event()
        analytics = _analytics(FakeStore({"bench": BENCH}, gates={"bench": gate}))

        task = asyncio.create_task(analytics.select_exercise("bench"))
        await asyncio.sleep(0)
        assert analytics.loading is True

        gate.set()
        await task
        assert analytics.loading is False

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self):
        slow_gate = asyncio.Event()
        store = FakeStore({"bench": BENCH, "squat": SQUAT}, gates={"squat": slow_gate})
        analytics = _analytics(store)

        slow = asyncio.create_task(analytics.select_exercise("squat"))
        await asyncio.sleep(0)
        await analytics.select_exercise("bench")

        slow_gate.set()
        await slow

        assert analytics.exercise_id == "bench"
        assert analytics.history == BENCH
        assert analytics.loading is False

    @pytest.mark.asyncio
    async def test_fetch_failure_leaves_empty_history(self):
        analytics = _analytics(FakeStore({"bench": BENCH}, failures={"bench"}))

        await analytics.select_exercise("bench")

        assert analytics.history == []
        assert analytics.loading is False
        m = analytics.compute_metrics(Metric.LOAD)
        assert m.max == 0.0
        assert m.trend is Trend.INSUFFICIENT_DATA

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [RuntimeError("backend unavailable"), TypeError("bad record"), KeyError("id")],
    )
    async def test_any_store_error_leaves_empty_history(self, error):
        analytics = _analytics(FakeStore({"bench": BENCH}, failures={"bench"}, error=error))

        await analytics.select_exercise("bench")

        assert analytics.history == []
        assert analytics.loading is False
        assert analytics.data_points() == []

    @pytest.mark.asyncio
    async def test_stale_failure_keeps_newer_loading_flag(self):
        slow_gate = asyncio.Event()
        fast_gate = asyncio.Event()
        store = FakeStore(
            {"bench": BENCH},
            gates={"squat": slow_gate, "bench": fast_gate},
            failures={"squat"},
            error=RuntimeError("backend unavailable"),
        )
        analytics = _analytics(store)

        slow = asyncio.create_task(analytics.select_exercise("squat"))
        await asyncio.sleep(0)
        fast = asyncio.create_task(analytics.select_exercise("bench"))
        await asyncio.sleep(0)

        slow_gate.set()
        await slow
        assert analytics.loading is True

        fast_gate.set()
        await fast
        assert analytics.loading is False
        assert analytics.history == BENCH

    @pytest.mark.asyncio
    async def test_malformed_store_file_leaves_empty_history(self, tmp_path):
        store = SessionStore(tmp_path / "data")
        store.init()
        store.sessions_path.write_text('{"id": "a", "date": "2025-01-01", "sets": [5]}\n')
        analytics = _analytics(store)

        await analytics.select_exercise("bench")

        assert analytics.history == []
        assert analytics.loading is False

    @pytest.mark.asyncio
    async def test_clear_selection(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")

        await analytics.select_exercise(None)

        assert analytics.exercise_id is None
        assert analytics.history == []
        assert analytics.data_points() == []


class TestWindow:

    @pytest.mark.asyncio
    async def test_default_window_is_one_month(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")

        assert analytics.time_frame is TimeFrame.ONE_MONTH
        assert [s.date for s in analytics.sessions] == ["2024-12-01"]

    @pytest.mark.asyncio
    async def test_changing_window_changes_results(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")

        analytics.set_time_frame("1Y")
        assert len(analytics.data_points()) == 3
        assert analytics.compute_metrics("load").trend is Trend.ASCENDING

        analytics.set_time_frame(TimeFrame.THREE_MONTHS)
        assert len(analytics.data_points()) == 1

    @pytest.mark.asyncio
    async def test_custom_days(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")

        analytics.set_time_frame("CUSTOM")
        analytics.set_custom_days(250)
        # cutoff 2024-04-26
        assert [s.date for s in analytics.sessions] == ["2024-06-01", "2024-12-01"]

    def test_invalid_values(self):
        analytics = _analytics(FakeStore({}))
        with pytest.raises(ValueError):
            analytics.set_time_frame("2W")
        with pytest.raises(ValueError):
            analytics.set_custom_days(-5)

    @pytest.mark.asyncio
    async def test_data_points_cached_until_window_changes(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")
        analytics.set_time_frame("ALL")

        first = analytics.data_points()
        assert analytics.data_points() is first

        analytics.set_time_frame("1M")
        assert analytics.data_points() is not first


class TestChartQueries:

    @pytest.mark.asyncio
    async def test_secondary_none_string(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")
        analytics.set_time_frame("ALL")

        chart = analytics.get_chart_data("load", "none")
        assert [c.value for c in chart] == [60.0, 70.0, 80.0]
        assert all(c.secondary_value == 0.0 for c in chart)

    @pytest.mark.asyncio
    async def test_chart_series_with_secondary(self):
        analytics = _analytics(FakeStore({"bench": BENCH}))
        await analytics.select_exercise("bench")
        analytics.set_time_frame("ALL")

        series = analytics.chart_series("load", "reps", "max", "avg")
        assert series.has_secondary
        assert series.primary_regression == pytest.approx((60.0, 70.0, 80.0))
        assert series.secondary_regression == pytest.approx((5.0, 5.0, 5.0))
