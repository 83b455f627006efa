from datetime import date

from cashflow_forecast.forecast import build_forecast
from cashflow_forecast.models import EXPENSE, INCOME, ForecastState, RecurringItem
from cashflow_forecast.visualization import (
    BALANCE_COLOR,
    OUTFLOW_COLOR,
    create_expense_breakdown_chart,
    create_forecast_chart,
)

START = date(2024, 1, 1)


def test_forecast_chart_traces_and_deficit_markers():
    rent = RecurringItem(kind=EXPENSE, name='Rent', amount=1200.0, next_date=date(2024, 1, 15))
    pay = RecurringItem(kind=INCOME, name='Pay', amount=300.0, frequency='weekly', next_date=START)
    forecast = build_forecast(500.0, [pay], [rent], START)

    fig = create_forecast_chart(forecast)

    assert [trace.name for trace in fig.data] == ['Income', 'Expenses', 'Ending Balance']
    assert list(fig.data[0].x) == [f'Week {n}' for n in range(1, 7)]
    # 800, 1100, 200, 500, 800, 1100
    colors = list(fig.data[2].marker.color)
    assert colors == [BALANCE_COLOR] * 6

    broke = build_forecast(-100.0, [], [], START)
    assert list(create_forecast_chart(broke).data[2].marker.color) == [OUTFLOW_COLOR] * 6


def test_forecast_chart_empty():
    fig = create_forecast_chart([])
    assert fig.layout.title.text == 'No forecast to display'
    assert len(fig.data) == 0


def test_expense_breakdown_chart():
    state = ForecastState(
        expenses=(
            RecurringItem(kind=EXPENSE, name='Rent', amount=1200.0, next_date=START, is_essential=True),
            RecurringItem(kind=EXPENSE, name='Free', amount=0.0, next_date=START),
        ),
        forecast_start_date=START,
    )
    fig = create_expense_breakdown_chart(state)
    assert len(fig.data) >= 1
    labels = [label for trace in fig.data for label in trace.labels]
    assert labels == ['Rent']


def test_expense_breakdown_chart_empty():
    fig = create_expense_breakdown_chart(ForecastState(forecast_start_date=START))
    assert fig.layout.title.text == 'No expenses to display'
