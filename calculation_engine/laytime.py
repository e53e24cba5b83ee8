"""
calculation_engine/laytime.py
Laytime Calculator

Elapsed time between arrival (NOR / commencement) and completion of cargo
operations.  With exclude_weekends the calendar is walked day by day and the
exact overlap with Saturdays and Sundays is removed, so a period starting
Friday 18:00 and ending Monday 06:00 counts 12 working hours.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from monitoring import get_logger, timed

log = get_logger(__name__)

_HOUR = timedelta(hours=1)
_WEEKEND = (5, 6)   # Saturday, Sunday


class InvalidIntervalError(ValueError):
    """Completion precedes arrival."""


@dataclass(frozen=True)
class LaytimeResult:
    arrival: datetime
    completion: datetime
    total_hours: float
    total_days: float
    working_days: float
    weekends_excluded: bool = False


def _as_utc(ts: datetime) -> datetime:
    # Naive timestamps are taken to be UTC so mixed inputs can be compared
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _weekend_overlap(start: datetime, end: datetime) -> timedelta:
    """Time between start and end that falls on a Saturday or Sunday."""
    overlap = timedelta(0)
    day_start = start.replace(hour=0, minute=0, second=0, microsecond=0)
    while day_start < end:
        day_end = day_start + timedelta(days=1)
        if day_start.weekday() in _WEEKEND:
            lo = max(start, day_start)
            hi = min(end, day_end)
            if hi > lo:
                overlap += hi - lo
        day_start = day_end
    return overlap


@timed("laytime")
def calculate_laytime(
    arrival: datetime,
    completion: datetime,
    exclude_weekends: bool = False,
) -> LaytimeResult:
    """
    Compute total laytime used.

    Raises:
        InvalidIntervalError: completion is earlier than arrival.
    """
    arrival    = _as_utc(arrival)
    completion = _as_utc(completion)

    if completion < arrival:
        raise InvalidIntervalError(
            f"Completion time {completion.isoformat()} is before arrival time {arrival.isoformat()}"
        )

    elapsed     = completion - arrival
    total_hours = elapsed / _HOUR
    total_days  = total_hours / 24

    working_hours = total_hours
    if exclude_weekends:
        working_hours = (elapsed - _weekend_overlap(arrival, completion)) / _HOUR

    result = LaytimeResult(
        arrival=arrival,
        completion=completion,
        total_hours=round(total_hours, 2),
        total_days=round(total_days, 2),
        working_days=round(working_hours / 24, 2),
        weekends_excluded=exclude_weekends,
    )
    log.info(
        "Laytime calculated",
        hours=result.total_hours,
        days=result.total_days,
        working_days=result.working_days,
    )
    return result
