"""Recurrence evaluation: does an item fall due inside a week window?

Pure functions only.  Dates are compared at day granularity; a window is
the inclusive span ``[week_start, week_end]`` (seven days in a forecast).
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, Dict, Iterator, NamedTuple

from .parsers import BIWEEKLY, MONTHLY, WEEKLY

BIWEEKLY_PERIOD_DAYS = 14


class OccurrenceCheck(NamedTuple):
    """Result of :func:`occurrence_in_week`.

    When ``is_due`` is false ``actual_date`` is the anchor date, not an
    occurrence; check ``is_due`` before displaying it.
    """

    is_due: bool
    actual_date: date


def _days(week_start: date, week_end: date) -> Iterator[date]:
    day = week_start
    while day <= week_end:
        yield day
        day += timedelta(days=1)


def _weekly(anchor: date, day: date) -> bool:
    # No lower bound: weekly items recur in weeks before the anchor too.
    return day.weekday() == anchor.weekday()


def _biweekly(anchor: date, day: date) -> bool:
    offset = (day - anchor).days
    return offset >= 0 and offset % BIWEEKLY_PERIOD_DAYS == 0


def _monthly(anchor: date, day: date) -> bool:
    # Anchor days missing from a month (e.g. the 31st) produce no occurrence that month.
    return day.day == anchor.day and day >= anchor


RULES: Dict[str, Callable[[date, date], bool]] = {
    WEEKLY: _weekly,
    BIWEEKLY: _biweekly,
    MONTHLY: _monthly,
}


def occurrence_in_week(next_date: date, frequency: str, week_start: date, week_end: date) -> OccurrenceCheck:
    """Find the first day in ``[week_start, week_end]`` on which the item recurs.

    Parameters
    ----------
    next_date : datetime.date
        The item's anchor date.
    frequency : str
        ``weekly``, ``biweekly`` or ``monthly``.  Unknown frequencies are
        never due.
    week_start, week_end : datetime.date
        Inclusive window bounds.

    Returns
    -------
    OccurrenceCheck
        ``(True, day)`` for the qualifying day, else ``(False, next_date)``.
    """
    rule = RULES.get(frequency)
    if rule is not None:
        for day in _days(week_start, week_end):
            if rule(next_date, day):
                return OccurrenceCheck(True, day)
    return OccurrenceCheck(False, next_date)
