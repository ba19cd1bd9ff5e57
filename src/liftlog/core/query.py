"""
Stateful analytics query for one selected exercise.

Holds the fetched history and the window/selection state the analysis view
changes; every computation is delegated to the pure functions in
analytics, timeframe and trend. The only suspension point is
select_exercise(), which fetches history from the session store.

Rapid re-selection is safe: each fetch is tagged with a request number and
a response that is no longer the latest is discarded.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Callable

import structlog

from .analytics import ChartSeries, build_chart_series, build_data_points, compute_metrics, get_chart_data
from .config import AnalyticsSettings
from .models import AggMode, AnalyticsMetrics, ChartPoint, DataPoint, Metric, TimeFrame, WorkoutSession
from .timeframe import filter_sessions

if TYPE_CHECKING:
    from ..io.session_store import SessionSource

logger = structlog.get_logger()


class ExerciseAnalytics:
    """
    Analytics state for the exercise currently being analysed.

    Attributes read by views: sessions (time-filtered), loading,
    time_frame, custom_days, exercise_id.
    """

    def __init__(
        self,
        store: "SessionSource",
        settings: AnalyticsSettings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the query.

        Args:
            store: Session source to fetch history from
            settings: Analytics tunables (defaults to built-in values)
            clock: Returns "now" for time-window cutoffs
        """
        self.store = store
        self.settings = settings or AnalyticsSettings()
        self.clock = clock
        self.logger = logger.bind(component="exercise_analytics")

        self.exercise_id: str | None = None
        self.loading = False
        self.time_frame = TimeFrame.parse(self.settings.default_time_frame)
        self.custom_days = self.settings.default_custom_days

        self._history: list[WorkoutSession] = []
        self._request_seq = 0
        self._points_cache: tuple[tuple, list[DataPoint]] | None = None

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    async def select_exercise(self, exercise_id: str | None) -> None:
        """
        Select an exercise and fetch its history.

        A fetch failure leaves an empty history. If another selection starts
        while this fetch is in flight, this response is discarded.

        Args:
            exercise_id: Exercise to analyse, or None to clear
        """
        self._request_seq += 1
        request = self._request_seq
        self.exercise_id = exercise_id
        self._points_cache = None

        if exercise_id is None:
            self._history = []
            self.loading = False
            return

        self.loading = True
        try:
            history = await self.store.fetch_exercise_history(exercise_id)
        except Exception as e:
            self.logger.warning(
                "Error fetching exercise history",
                exercise_id=exercise_id,
                error=str(e),
                exc_info=True,
            )
            history = []
        finally:
            # A newer selection owns the flag
            if request == self._request_seq:
                self.loading = False

        if request != self._request_seq:
            self.logger.debug("Discarding stale history response", exercise_id=exercise_id)
            return

        self._history = list(history)
        self._points_cache = None

    def set_time_frame(self, time_frame: TimeFrame | str) -> None:
        self.time_frame = TimeFrame.parse(time_frame)

    def set_custom_days(self, days: int) -> None:
        if days < 0:
            raise ValueError("custom_days must be non-negative")
        self.custom_days = days

    # ------------------------------------------------------------------
    # Derived data
    # ------------------------------------------------------------------

    @property
    def history(self) -> list[WorkoutSession]:
        """Full fetched history for the selected exercise."""
        return list(self._history)

    @property
    def sessions(self) -> list[WorkoutSession]:
        """History restricted to the current time window."""
        return filter_sessions(self._history, self.time_frame, self.custom_days, self.clock())

    def data_points(self) -> list[DataPoint]:
        """
        Data points for the current window.

        Rebuilt only when the exercise or the set of sessions in the window
        changes.
        """
        if self.exercise_id is None:
            return []
        filtered = self.sessions
        key = (self.exercise_id, tuple(id(s) for s in filtered))
        if self._points_cache is not None and self._points_cache[0] == key:
            return self._points_cache[1]
        points = build_data_points(filtered, self.exercise_id)
        self._points_cache = (key, points)
        return points

    def compute_metrics(
        self,
        metric: Metric | str,
        agg_mode: AggMode | str = AggMode.MAX,
    ) -> AnalyticsMetrics:
        """Summary metrics for a variable over the current window."""
        return compute_metrics(
            self.data_points(),
            self.exercise_id or "",
            Metric.parse(metric),
            AggMode.parse(agg_mode),
            self.settings,
        )

    def get_chart_data(
        self,
        var1: Metric | str,
        var2: Metric | str | None = None,
        agg1: AggMode | str = AggMode.MAX,
        agg2: AggMode | str = AggMode.MAX,
    ) -> list[ChartPoint]:
        """
        Chart points for one or two variables.

        var2 may be None or "none" for no secondary series.
        """
        return get_chart_data(
            self.data_points(),
            self.exercise_id or "",
            Metric.parse(var1),
            _parse_secondary(var2),
            AggMode.parse(agg1),
            AggMode.parse(agg2),
        )

    def chart_series(
        self,
        var1: Metric | str,
        var2: Metric | str | None = None,
        agg1: AggMode | str = AggMode.MAX,
        agg2: AggMode | str = AggMode.MAX,
    ) -> ChartSeries:
        """Chart points with regression overlays and nice axes."""
        return build_chart_series(
            self.data_points(),
            self.exercise_id or "",
            Metric.parse(var1),
            _parse_secondary(var2),
            AggMode.parse(agg1),
            AggMode.parse(agg2),
            self.settings,
        )


def _parse_secondary(var2: Metric | str | None) -> Metric | None:
    if var2 is None:
        return None
    if isinstance(var2, str) and var2.strip().lower() == "none":
        return None
    return Metric.parse(var2)
