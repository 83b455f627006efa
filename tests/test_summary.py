from datetime import date

import pytest

from cashflow_forecast.forecast import build_forecast
from cashflow_forecast.models import EXPENSE, INCOME, ForecastState, RecurringItem
from cashflow_forecast.summary import (
    SUCCESS,
    WARNING,
    build_action_plan,
    deficit_weeks,
    describe_item,
    monthly_equivalent,
    summarize_cash_flow,
)

START = date(2024, 1, 1)


def _state(balance=5000.0, savings=0):
    return ForecastState(
        incomes=(RecurringItem(kind=INCOME, name='Pay', amount=1000.0, frequency='biweekly', next_date=START),),
        expenses=(
            RecurringItem(kind=EXPENSE, name='Rent', amount=1200.0, next_date=START, is_essential=True),
            RecurringItem(kind=EXPENSE, name='Coffee', amount=20.0, frequency='weekly', next_date=START),
        ),
        current_balance=balance,
        savings_percent=savings,
        forecast_start_date=START,
    )


@pytest.mark.parametrize(
    'amount, frequency, expected',
    [
        (100, 'weekly', 433.0),
        (100, 'biweekly', 217.0),
        (100, 'monthly', 100.0),
        (100, 'quarterly', 100.0),
        (0, 'weekly', 0.0),
        (None, 'weekly', 0.0),
    ],
)
def test_monthly_equivalent(amount, frequency, expected):
    assert monthly_equivalent(amount, frequency) == pytest.approx(expected)


def test_summarize_cash_flow_splits_essential_spending():
    summary = summarize_cash_flow(_state(savings=50))

    assert summary.monthly_income == pytest.approx(2170.0)
    assert summary.essential_expenses == pytest.approx(1200.0)
    assert summary.non_essential_expenses == pytest.approx(86.6)
    assert summary.monthly_expenses == pytest.approx(1286.6)
    assert summary.net_monthly == pytest.approx(883.4)
    assert summary.savings_amount == pytest.approx(441.7)
    assert summary.net_after_savings == pytest.approx(441.7)


def test_no_savings_out_of_a_shortfall():
    state = _state(savings=50).replace_items(INCOME, [])
    summary = summarize_cash_flow(state)
    assert summary.net_monthly < 0
    assert summary.savings_amount == 0.0


def test_describe_item_shows_monthly_figure_for_non_monthly_items():
    rent, coffee = _state().expenses
    assert describe_item(rent) == 'Rent: $1,200.00 (monthly)'
    assert describe_item(coffee) == 'Coffee: $20.00 (weekly → $86.60/mo)'


def test_action_plan_for_healthy_profile():
    state = _state()
    plan = build_action_plan(state, build_forecast(state.current_balance, state.incomes, state.expenses, START))

    assert [section.title for section in plan] == [
        'Healthy Financial Position',
        'Income Breakdown',
        'Expense Breakdown',
        'Recommendations',
    ]
    assert plan[0].level == SUCCESS
    expenses = plan[2].lines
    assert expenses[0] == 'Essential Expenses:'
    assert 'Non-Essential Expenses:' in expenses
    assert expenses[-1] == 'Total Monthly Expenses: $1,286.60'
    # 5000 is above three months of expenses
    assert plan[3].lines[1] == 'Consider investment opportunities for surplus funds'


def test_action_plan_flags_shortfall_and_deficit_weeks():
    state = _state(balance=100.0).replace_items(INCOME, [])
    forecast = build_forecast(state.current_balance, state.incomes, state.expenses, START)
    plan = build_action_plan(state, forecast)

    assert plan[0].title == 'Negative Cash Flow Detected'
    assert plan[0].level == WARNING
    assert plan[0].lines[0] == 'Your expenses exceed your income by $1,286.60 per month.'

    assert plan[1].title == 'Projected Deficit Weeks'
    assert plan[1].lines[0] == 'Your forecast shows 6 week(s) with negative balance:'
    assert plan[1].lines[1] == 'Week 1: -$1,120.00'
    assert len(deficit_weeks(forecast)) == 6

    assert plan[2].lines == ('No income sources configured',)
    assert plan[-1].lines[:2] == (
        'Focus on reducing non-essential expenses first',
        'Build an emergency fund of 3-6 months expenses',
    )


def test_action_plan_without_items():
    state = ForecastState(forecast_start_date=START)
    plan = build_action_plan(state, build_forecast(0, [], [], START))
    assert [section.title for section in plan][0] == 'Healthy Financial Position'
    assert plan[2].lines == ('No expenses configured',)
