"""Plotly visualisation helpers for the cash-flow forecaster.

Each function accepts engine output (a forecast or a profile snapshot) and
returns a :class:`plotly.graph_objects.Figure` that Streamlit renders via
``st.plotly_chart``.  Empty inputs produce an empty figure with a
placeholder title rather than raising.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .forecast import forecast_to_frame
from .models import ForecastState, WeekSummary
from .summary import monthly_equivalent

INFLOW_COLOR = "#10b981"
OUTFLOW_COLOR = "#ef4444"
BALANCE_COLOR = "#3b82f6"


def _empty_figure(title: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_forecast_chart(forecast: Sequence[WeekSummary], title: str | None = None) -> go.Figure:
    """Weekly inflow/outflow bars with the running ending balance on top.

    Parameters
    ----------
    forecast : sequence of WeekSummary
        Output of :func:`cashflow_forecast.forecast.build_forecast`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Grouped bar chart plus a balance line; weeks ending below zero get
        red balance markers.
    """
    frame = forecast_to_frame(forecast)
    if frame.empty:
        return _empty_figure("No forecast to display")

    labels = [f"Week {week}" for week in frame["Week"]]
    marker_colors = np.where(frame["Ending Balance"] < 0, OUTFLOW_COLOR, BALANCE_COLOR)

    fig = go.Figure()
    fig.add_trace(go.Bar(x=labels, y=frame["Inflow"], name="Income", marker_color=INFLOW_COLOR))
    fig.add_trace(go.Bar(x=labels, y=frame["Outflow"], name="Expenses", marker_color=OUTFLOW_COLOR))
    fig.add_trace(
        go.Scatter(
            x=labels,
            y=frame["Ending Balance"],
            name="Ending Balance",
            mode="lines+markers",
            line=dict(color=BALANCE_COLOR, width=3),
            marker=dict(color=marker_colors.tolist(), size=10),
        )
    )
    fig.add_hline(y=0, line_dash="dot", line_color="#64748b")
    fig.update_layout(
        title=title or "6-Week Cash Flow Forecast",
        barmode="group",
        xaxis_title="Week",
        yaxis_title="Amount",
        hovermode="x unified",
    )
    return fig


def create_expense_breakdown_chart(state: ForecastState, title: str | None = None) -> go.Figure:
    """Pie chart of monthly-equivalent expenses, split essential vs. non-essential."""
    rows = [
        {
            "Expense": item.display_name,
            "Monthly": monthly_equivalent(item.amount, item.frequency),
            "Group": "Essential" if item.is_essential else "Non-Essential",
        }
        for item in state.expenses
    ]
    df = pd.DataFrame(rows, columns=["Expense", "Monthly", "Group"])
    df = df[df["Monthly"] > 0]
    if df.empty:
        return _empty_figure("No expenses to display")

    fig = px.pie(
        df,
        names="Expense",
        values="Monthly",
        color="Group",
        color_discrete_map={"Essential": OUTFLOW_COLOR, "Non-Essential": "#f59e0b"},
    )
    fig.update_layout(title=title or "Monthly expenses")
    return fig
