"""Week-by-week cash-flow forecast built from recurring items.

The builder walks :data:`~cashflow_forecast.config.FORECAST_WEEKS`
consecutive seven-day windows starting at a reference date, asks the
recurrence evaluator which items fall due in each window, and threads a
running balance from one week to the next.  It is a pure function of its
arguments: no clock reads, no I/O and no mutation of the items it is given.

Helpers for the forecast *cycle* (which week of the current six-week plan
"today" falls in, closing a week out, starting over) live here as well
because they are defined in terms of the forecast itself.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

import pandas as pd

from .config import DAYS_PER_WEEK, FORECAST_WEEKS
from .models import EXPENSE, INCOME, ForecastState, Occurrence, RecurringItem, WeekSummary
from .recurrence import occurrence_in_week

FRAME_COLUMNS = [
    'Week',
    'Start',
    'End',
    'Inflow',
    'Outflow',
    'Net Change',
    'Starting Balance',
    'Ending Balance',
    'Items Due',
    'Deficit',
]


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _due_occurrences(items: Sequence[RecurringItem], kind: str, week_start: date, week_end: date) -> List[Occurrence]:
    occurrences: List[Occurrence] = []
    for item in items:
        check = occurrence_in_week(item.next_date, item.frequency, week_start, week_end)
        if not check.is_due:
            continue
        occurrences.append(
            Occurrence(
                name=item.display_name,
                amount=item.amount,
                type=kind,
                date=check.actual_date,
                is_essential=item.is_essential if kind == EXPENSE else None,
            )
        )
    return occurrences


def build_forecast(
    starting_balance: float,
    incomes: Sequence[RecurringItem],
    expenses: Sequence[RecurringItem],
    reference_date: date | datetime,
    weeks: int = FORECAST_WEEKS,
) -> List[WeekSummary]:
    """Project the balance forward one week at a time.

    Week ``n`` covers ``reference_date + 7(n-1)`` through six days later.
    Each week's starting balance is the previous week's ending balance;
    week 1 starts from ``starting_balance``.

    Example:
        >>> weeks = build_forecast(100.0, [], [], date(2024, 1, 1))
        >>> [w.ending_balance for w in weeks]
        [100.0, 100.0, 100.0, 100.0, 100.0, 100.0]
    """
    start = _as_day(reference_date)
    balance = float(starting_balance)
    forecast: List[WeekSummary] = []

    for week in range(1, weeks + 1):
        week_start = start + timedelta(days=(week - 1) * DAYS_PER_WEEK)
        week_end = week_start + timedelta(days=DAYS_PER_WEEK - 1)

        income_due = _due_occurrences(incomes, INCOME, week_start, week_end)
        expense_due = _due_occurrences(expenses, EXPENSE, week_start, week_end)
        inflow = sum(item.amount for item in income_due)
        outflow = sum(item.amount for item in expense_due)
        net_change = inflow - outflow

        week_starting_balance = balance
        balance += net_change

        forecast.append(
            WeekSummary(
                week_number=week,
                start_date=week_start,
                end_date=week_end,
                inflow=float(inflow),
                outflow=float(outflow),
                net_change=float(net_change),
                starting_balance=week_starting_balance,
                ending_balance=balance,
                items_due=tuple(income_due + expense_due),
            )
        )

    return forecast


def forecast_for_state(state: ForecastState, reference_date: Optional[date] = None) -> List[WeekSummary]:
    """Forecast a profile snapshot from ``reference_date`` (default: today)."""
    return build_forecast(
        state.current_balance,
        state.incomes,
        state.expenses,
        reference_date or date.today(),
    )


def forecast_to_frame(forecast: Sequence[WeekSummary]) -> pd.DataFrame:
    """Flatten a forecast into one row per week for tables and charts."""
    rows = [
        {
            'Week': week.week_number,
            'Start': pd.Timestamp(week.start_date),
            'End': pd.Timestamp(week.end_date),
            'Inflow': week.inflow,
            'Outflow': week.outflow,
            'Net Change': week.net_change,
            'Starting Balance': week.starting_balance,
            'Ending Balance': week.ending_balance,
            'Items Due': len(week.items_due),
            'Deficit': week.is_deficit,
        }
        for week in forecast
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def occurrences_to_frame(forecast: Sequence[WeekSummary]) -> pd.DataFrame:
    """One row per due occurrence across the whole forecast, sorted by date."""
    rows = [
        {
            'Week': week.week_number,
            'Date': pd.Timestamp(item.date),
            'Name': item.name,
            'Type': item.type,
            'Amount': item.amount,
            'Essential': bool(item.is_essential),
        }
        for week in forecast
        for item in week.items_due
    ]
    frame = pd.DataFrame(rows, columns=['Week', 'Date', 'Name', 'Type', 'Amount', 'Essential'])
    if frame.empty:
        return frame
    return frame.sort_values(['Date', 'Type', 'Name'], kind='stable').reset_index(drop=True)


# ---------------------------------------------------------------------------
# Forecast cycle
# ---------------------------------------------------------------------------


def current_week_number(forecast_start_date: date, today: Optional[date] = None, weeks: int = FORECAST_WEEKS) -> int:
    """Which week of the cycle ``today`` falls in, clamped to ``1..weeks``."""
    today = _as_day(today or date.today())
    elapsed = (today - _as_day(forecast_start_date)).days
    week = elapsed // DAYS_PER_WEEK + 1
    return max(1, min(weeks, week))


def advance_week(state: ForecastState, today: Optional[date] = None) -> ForecastState:
    """Close out the current week and carry its ending balance forward.

    In the last week of the cycle the final balance is carried over and a
    fresh cycle starts ``today``; otherwise the cycle continues from the day
    after the closed week.
    """
    today = _as_day(today or date.today())
    forecast = forecast_for_state(state, today)
    week = current_week_number(state.forecast_start_date, today, len(forecast))
    closed = forecast[week - 1]

    if week >= len(forecast):
        return replace(state, current_balance=closed.ending_balance, forecast_start_date=today)
    return replace(
        state,
        current_balance=closed.ending_balance,
        forecast_start_date=closed.end_date + timedelta(days=1),
    )


def reset_cycle(state: ForecastState, today: Optional[date] = None) -> ForecastState:
    """Restart the cycle at ``today``, keeping the balance."""
    return replace(state, forecast_start_date=_as_day(today or date.today()))
