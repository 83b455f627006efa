from datetime import date, timedelta

from cashflow_forecast.recurrence import OccurrenceCheck, occurrence_in_week


def _window(start: date):
    return start, start + timedelta(days=6)


def test_weekly_matches_anchor_weekday():
    # 2024-01-10 is a Wednesday; the window Jan 15-21 holds Wednesday the 17th
    result = occurrence_in_week(date(2024, 1, 10), 'weekly', *_window(date(2024, 1, 15)))
    assert result == OccurrenceCheck(True, date(2024, 1, 17))


def test_weekly_is_due_before_its_anchor():
    result = occurrence_in_week(date(2024, 3, 6), 'weekly', *_window(date(2024, 1, 1)))
    assert result.is_due
    assert result.actual_date == date(2024, 1, 3)


def test_biweekly_due_on_anchor_and_every_fourteen_days():
    anchor = date(2024, 1, 3)
    assert occurrence_in_week(anchor, 'biweekly', *_window(date(2024, 1, 1))) == (True, date(2024, 1, 3))
    assert not occurrence_in_week(anchor, 'biweekly', *_window(date(2024, 1, 8))).is_due
    assert occurrence_in_week(anchor, 'biweekly', *_window(date(2024, 1, 15))) == (True, date(2024, 1, 17))


def test_biweekly_not_due_before_anchor():
    result = occurrence_in_week(date(2024, 1, 20), 'biweekly', *_window(date(2024, 1, 6)))
    assert result == OccurrenceCheck(False, date(2024, 1, 20))


def test_monthly_due_on_matching_day_of_month():
    result = occurrence_in_week(date(2024, 1, 15), 'monthly', *_window(date(2024, 2, 12)))
    assert result == OccurrenceCheck(True, date(2024, 2, 15))


def test_monthly_is_never_retroactive():
    # Dec 20 matches the day of month but is before the anchor
    result = occurrence_in_week(date(2024, 1, 20), 'monthly', *_window(date(2023, 12, 18)))
    assert not result.is_due
    assert result.actual_date == date(2024, 1, 20)


def test_monthly_anchor_day_missing_from_month_is_skipped():
    anchor = date(2024, 1, 31)
    assert not occurrence_in_week(anchor, 'monthly', *_window(date(2024, 4, 28))).is_due
    assert occurrence_in_week(anchor, 'monthly', *_window(date(2024, 5, 27))) == (True, date(2024, 5, 31))


def test_unknown_frequency_falls_back_to_anchor():
    anchor = date(2024, 1, 2)
    assert occurrence_in_week(anchor, 'yearly', *_window(date(2024, 1, 1))) == (False, anchor)


def test_window_bounds_are_inclusive():
    start, end = _window(date(2024, 1, 1))
    assert occurrence_in_week(start, 'monthly', start, end) == (True, start)
    assert occurrence_in_week(end, 'biweekly', start, end) == (True, end)
