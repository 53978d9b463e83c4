"""Calendar arithmetic shared by the leave and attendance services.

All day boundaries are local: a day runs from ``00:00:00.000`` to
``23:59:59.999``.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Union

DateLike = Union[date, datetime]

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class Period:
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def start_of_day(value: DateLike) -> datetime:
    return datetime.combine(_as_date(value), time.min)


def end_of_day(value: DateLike) -> datetime:
    return datetime.combine(_as_date(value), END_OF_DAY)


def day_bounds(value: DateLike) -> Period:
    return Period(start=start_of_day(value), end=end_of_day(value))


def inclusive_day_span(start: DateLike, end: DateLike) -> int:
    """Calendar days from start to end, both ends counted.

    Weekends count: 2024-12-06 (Fri) .. 2024-12-09 (Mon) is 4 days.
    """
    return (end - start) // timedelta(days=1) + 1


def work_days_between(start: DateLike, end: DateLike) -> int:
    """Monday-Friday days in ``[start, end]``; zero when end < start."""
    current = _as_date(start)
    last = _as_date(end)
    count = 0
    while current <= last:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def month_period(now: DateLike) -> Period:
    day = _as_date(now)
    last_day = calendar.monthrange(day.year, day.month)[1]
    return Period(
        start=start_of_day(date(day.year, day.month, 1)),
        end=end_of_day(date(day.year, day.month, last_day)),
    )


def quarter_period(now: DateLike) -> Period:
    """The three-month block containing ``now`` (Jan-Mar, Apr-Jun, ...)."""
    day = _as_date(now)
    first_month = ((day.month - 1) // 3) * 3 + 1
    last_month = first_month + 2
    last_day = calendar.monthrange(day.year, last_month)[1]
    return Period(
        start=start_of_day(date(day.year, first_month, 1)),
        end=end_of_day(date(day.year, last_month, last_day)),
    )
