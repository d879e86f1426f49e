"""Period filter: named and custom date intervals.

Two kinds of period exist.  Calendar months back the historical windows,
and pay cycles (25th of one month to the 24th of the next) back the
default "current period".  Historical windows are always anchored on
today, never on the period the user is looking at.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, List, Optional

import pandas as pd

from . import config
from .models import to_date

THIS_MONTH = 'This Month'
LAST_MONTH = 'Last Month'
LAST_3_MONTHS = 'Last 3 Months'
LAST_6_MONTHS = 'Last 6 Months'
THIS_YEAR = 'This Year'
THIS_PAY_CYCLE = 'This Pay Cycle'
LAST_PAY_CYCLE = 'Last Pay Cycle'

PRESET_LABELS = [
    THIS_PAY_CYCLE, LAST_PAY_CYCLE, THIS_MONTH, LAST_MONTH, LAST_3_MONTHS, LAST_6_MONTHS, THIS_YEAR,
]


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date
    label: str

    def contains(self, value: Any) -> bool:
        """True when a date or instant falls on a day inside the range."""
        if isinstance(value, datetime):
            stamp = pd.Timestamp(value)
            return pd.Timestamp(self.start_date) <= stamp < pd.Timestamp(self.end_date + timedelta(days=1))
        day = to_date(value)
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat(),
            'label': self.label,
        }


def _today(today: Optional[date]) -> date:
    return today or date.today()


def month_bounds(period: pd.Period) -> tuple:
    return period.start_time.date(), period.end_time.date()


def calendar_month(today: Optional[date] = None, offset: int = 0) -> DateRange:
    """Calendar month ``offset`` months from today's month (negative is past)."""
    period = pd.Period(_today(today), freq='M') + offset
    start, end = month_bounds(period)
    return DateRange(start, end, period.strftime('%b %Y'))


def pay_cycle(today: Optional[date] = None, offset: int = 0) -> DateRange:
    """Pay cycle containing today, shifted by ``offset`` cycles.

    Example:
        >>> pay_cycle(date(2024, 3, 10))
        DateRange(start_date=datetime.date(2024, 2, 25), end_date=datetime.date(2024, 3, 24), ...)
    """
    day = _today(today)
    anchor = pd.Period(day, freq='M')
    if day.day < config.PAY_CYCLE_START_DAY:
        anchor -= 1
    anchor += offset
    start = date(anchor.year, anchor.month, config.PAY_CYCLE_START_DAY)
    following = anchor + 1
    end = date(following.year, following.month, config.PAY_CYCLE_START_DAY) - timedelta(days=1)
    return DateRange(start, end, f"Pay cycle {start.strftime('%d %b')} - {end.strftime('%d %b %Y')}")


def preset_range(label: str, today: Optional[date] = None) -> DateRange:
    """Resolve a named preset into a concrete range."""
    day = _today(today)
    current = pd.Period(day, freq='M')
    if label == THIS_MONTH:
        start, end = month_bounds(current)
    elif label == LAST_MONTH:
        start, end = month_bounds(current - 1)
    elif label == LAST_3_MONTHS:
        start, end = month_bounds(current - 2)[0], month_bounds(current)[1]
    elif label == LAST_6_MONTHS:
        start, end = month_bounds(current - 5)[0], month_bounds(current)[1]
    elif label == THIS_YEAR:
        start, end = date(day.year, 1, 1), date(day.year, 12, 31)
    elif label == THIS_PAY_CYCLE:
        cycle = pay_cycle(day)
        start, end = cycle.start_date, cycle.end_date
    elif label == LAST_PAY_CYCLE:
        cycle = pay_cycle(day, offset=-1)
        start, end = cycle.start_date, cycle.end_date
    else:
        raise ValueError(f"Unknown period preset '{label}'")
    return DateRange(start, end, label)


def preset_ranges(today: Optional[date] = None) -> List[DateRange]:
    return [preset_range(label, today) for label in PRESET_LABELS]


def custom_range(start: Any, end: Any) -> DateRange:
    """Explicit range; bounds are swapped if given in reverse order."""
    start_day, end_day = to_date(start), to_date(end)
    if end_day < start_day:
        start_day, end_day = end_day, start_day
    label = f"{start_day.strftime('%b %d')} - {end_day.strftime('%b %d, %Y')}"
    return DateRange(start_day, end_day, label)


def default_range(today: Optional[date] = None) -> DateRange:
    return preset_range(THIS_PAY_CYCLE, today)


def trailing_months(today: Optional[date] = None, months: int = config.HISTORY_MONTHS) -> List[pd.Period]:
    """The ``months`` calendar months before today's month, oldest first."""
    current = pd.Period(_today(today), freq='M')
    return [current - i for i in range(months, 0, -1)]
