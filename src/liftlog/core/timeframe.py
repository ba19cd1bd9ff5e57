"""
Time-window filtering for the analysis screen.

Month and year subtraction keep the day of month and the time of day. When
that day does not exist in the target month the date overflows into the
next month (31 March - 1 month -> 3 March), the same rule calendar "set
month" operations follow on most platforms.
"""

from datetime import datetime, timedelta

from .config import TIME_FRAME_MONTHS
from .models import TimeFrame, WorkoutSession

EPOCH = datetime(1970, 1, 1)


def shift_months(dt: datetime, months: int) -> datetime:
    """
    Move a datetime by a number of calendar months (negative = back).

    Overflowing days roll into the following month.

    Args:
        dt: Starting datetime
        months: Months to add

    Returns:
        Shifted datetime
    """
    year, month0 = divmod(dt.year * 12 + (dt.month - 1) + months, 12)
    first = dt.replace(year=year, month=month0 + 1, day=1)
    return first + timedelta(days=dt.day - 1)


def cutoff_date(
    time_frame: TimeFrame,
    custom_days: int = 30,
    now: datetime | None = None,
) -> datetime:
    """
    Earliest session datetime included in a time frame.

    Args:
        time_frame: Selected range
        custom_days: Days back when time_frame is CUSTOM
        now: Evaluation time (defaults to datetime.now())

    Returns:
        Cutoff datetime (the Unix epoch for ALL)
    """
    if time_frame is TimeFrame.ALL:
        return EPOCH

    if now is None:
        now = datetime.now()

    if time_frame is TimeFrame.CUSTOM:
        if custom_days < 0:
            raise ValueError("custom_days must be non-negative")
        return now - timedelta(days=custom_days)

    return shift_months(now, -TIME_FRAME_MONTHS[time_frame.value])


def filter_sessions(
    sessions: list[WorkoutSession],
    time_frame: TimeFrame,
    custom_days: int = 30,
    now: datetime | None = None,
) -> list[WorkoutSession]:
    """
    Sessions dated on or after the time frame's cutoff, in original order.

    Args:
        sessions: Full history
        time_frame: Selected range
        custom_days: Days back when time_frame is CUSTOM
        now: Evaluation time (defaults to datetime.now())

    Returns:
        Filtered list (new list; sessions are not copied)
    """
    if not sessions:
        return []
    cutoff = cutoff_date(time_frame, custom_days, now)
    return [s for s in sessions if s.parsed_date >= cutoff]
