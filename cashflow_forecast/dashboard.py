"""Streamlit app for the cash-flow forecaster.

The app owns everything the engine deliberately does not: the profile
store, editing tables, CSV/JSON import and export, and rendering.  Each
edit produces a new :class:`~cashflow_forecast.models.ForecastState`
which is written straight back to the current profile.

To run the dashboard from the command line::

    streamlit run cashflow_forecast/dashboard.py

or use ``python run_dashboard.py`` from the project root.
"""

from __future__ import annotations

import os
import sys
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import streamlit as st

# Conditional imports to support execution both as part of a package and
# directly via ``streamlit run cashflow_forecast/dashboard.py``.
if __package__:
    from . import visualization as viz
    from .config import configure_logging
    from .csv_import import CsvImport, CsvImportError, merge_import, parse_csv
    from .forecast import advance_week, current_week_number, forecast_for_state, reset_cycle
    from .formatting import (
        escape_dollar_for_markdown,
        escape_markdown_dollars,
        format_currency,
        format_date_range,
        format_short_date,
        format_signed_currency,
    )
    from .models import EXPENSE, INCOME, ForecastState, RecurringItem
    from .parsers import FREQUENCIES, parse_amount
    from .profile_storage import (
        ProfileError,
        ProfileStore,
        export_filename,
        export_profile_json,
        import_profile_json,
    )
    from .summary import SUCCESS, WARNING, build_action_plan, summarize_cash_flow
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from cashflow_forecast import visualization as viz  # type: ignore
    from cashflow_forecast.config import configure_logging  # type: ignore
    from cashflow_forecast.csv_import import CsvImport, CsvImportError, merge_import, parse_csv  # type: ignore
    from cashflow_forecast.forecast import (  # type: ignore
        advance_week,
        current_week_number,
        forecast_for_state,
        reset_cycle,
    )
    from cashflow_forecast.formatting import (  # type: ignore
        escape_dollar_for_markdown,
        escape_markdown_dollars,
        format_currency,
        format_date_range,
        format_short_date,
        format_signed_currency,
    )
    from cashflow_forecast.models import EXPENSE, INCOME, ForecastState, RecurringItem  # type: ignore
    from cashflow_forecast.parsers import FREQUENCIES, parse_amount  # type: ignore
    from cashflow_forecast.profile_storage import (  # type: ignore
        ProfileError,
        ProfileStore,
        export_filename,
        export_profile_json,
        import_profile_json,
    )
    from cashflow_forecast.summary import SUCCESS, WARNING, build_action_plan, summarize_cash_flow  # type: ignore


EDITOR_COLUMNS = ['id', 'Name', 'Amount', 'Frequency', 'Next Date', 'Essential']


# ---------------------------------------------------------------------------
# Table <-> item conversion
# ---------------------------------------------------------------------------


def items_to_frame(items: Sequence[RecurringItem], kind: str) -> pd.DataFrame:
    """Editable table for a list of items; income tables have no Essential column."""
    columns = EDITOR_COLUMNS if kind == EXPENSE else EDITOR_COLUMNS[:-1]
    rows = [
        {
            'id': item.id,
            'Name': item.name,
            'Amount': item.amount,
            'Frequency': item.frequency,
            'Next Date': item.next_date,
            'Essential': item.is_essential,
        }
        for item in items
    ]
    return pd.DataFrame(rows, columns=EDITOR_COLUMNS)[columns]


def frame_to_items(frame: pd.DataFrame, kind: str, today: Optional[date] = None) -> List[RecurringItem]:
    """Turn an edited table back into items, dropping rows left entirely blank."""
    items: List[RecurringItem] = []
    for row in frame.to_dict('records'):
        cleaned = {key: (None if _is_missing(value) else value) for key, value in row.items()}
        if not any(cleaned.get(column) not in (None, '') for column in ('Name', 'Amount', 'Next Date')):
            continue
        next_date = cleaned.get('Next Date')
        if isinstance(next_date, pd.Timestamp):
            next_date = next_date.date()
        items.append(
            RecurringItem.from_record(
                {
                    'id': cleaned.get('id'),
                    'name': cleaned.get('Name'),
                    'amount': cleaned.get('Amount'),
                    'frequency': cleaned.get('Frequency'),
                    'nextDate': next_date,
                    'isEssential': bool(cleaned.get('Essential')),
                },
                kind,
                today,
            )
        )
    return items


def csv_preview_text(parsed: CsvImport, assume: Optional[str] = None) -> str:
    """``Found 3 items: 1 income sources, 2 expenses.`` counted the way the import will split them."""
    if assume is None:
        incomes, expenses = parsed.income_count, parsed.expense_count
    elif assume == INCOME:
        incomes, expenses = len(parsed.rows), 0
    else:
        incomes, expenses = 0, len(parsed.rows)
    return f"Found {len(parsed.rows)} items: {incomes} income sources, {expenses} expenses."


def _is_missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


def _store() -> ProfileStore:
    if 'profile_store' not in st.session_state:
        st.session_state['profile_store'] = ProfileStore()
    return st.session_state['profile_store']


def _state() -> ForecastState:
    return _store().get()


def _save_state(state: ForecastState) -> None:
    _store().put(state)


def _rerun() -> None:
    rerun = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun is not None:
        rerun()


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def render_profile_sidebar() -> None:
    store = _store()
    st.sidebar.header("Profile")
    names = store.names()
    selected = st.sidebar.selectbox("Active profile", names, index=names.index(store.current))
    if selected != store.current:
        store.switch(selected)
        _rerun()

    with st.sidebar.expander("Manage profiles"):
        action = st.radio("Action", ["New", "Copy current", "Rename", "Delete"], horizontal=True)
        name = st.text_input("Profile name", key='profile_action_name')
        if st.button("Apply", key='profile_action_apply'):
            try:
                if action == "New":
                    store.create(name)
                elif action == "Copy current":
                    store.copy(name)
                elif action == "Rename":
                    store.rename(store.current, name)
                else:
                    store.delete(name or store.current)
            except ProfileError as exc:
                st.error(str(exc))
            else:
                _rerun()


def render_overview(state: ForecastState) -> None:
    summary = summarize_cash_flow(state)
    cols = st.columns(4)
    cols[0].metric("Current Balance", format_currency(summary.current_balance, decimals=0))
    cols[1].metric("Total Income", format_currency(summary.monthly_income, decimals=0))
    cols[2].metric("Total Expenses", format_currency(summary.monthly_expenses, decimals=0))
    cols[3].metric("Net Monthly", format_currency(summary.net_monthly, decimals=0))
    if summary.savings_percent > 0:
        save_cols = st.columns(2)
        save_cols[0].metric(f"Savings ({summary.savings_percent}%)", format_currency(summary.savings_amount, decimals=0))
        save_cols[1].metric("After Savings", format_currency(summary.net_after_savings, decimals=0))
    st.plotly_chart(viz.create_expense_breakdown_chart(state), use_container_width=True)


def render_configuration(state: ForecastState) -> None:
    with st.form("balance_form"):
        balance_text = st.text_input("Current balance", value=f"{state.current_balance:.2f}")
        savings = st.slider("Savings goal (% of surplus)", 0, 100, state.savings_percent)
        if st.form_submit_button("Save balance"):
            state = replace(state, current_balance=parse_amount(balance_text), savings_percent=int(savings))
            _save_state(state)

    for kind, label in ((INCOME, "Income"), (EXPENSE, "Expenses")):
        st.subheader(label)
        column_config: Dict[str, Any] = {
            'id': None,
            'Name': st.column_config.TextColumn("Name"),
            'Amount': st.column_config.NumberColumn("Amount", min_value=0.0, format="%.2f"),
            'Frequency': st.column_config.SelectboxColumn("Frequency", options=list(FREQUENCIES), default='monthly'),
            'Next Date': st.column_config.DateColumn("Next Date"),
        }
        if kind == EXPENSE:
            column_config['Essential'] = st.column_config.CheckboxColumn("Essential", default=False)
        edited = st.data_editor(
            items_to_frame(state.items(kind), kind),
            num_rows="dynamic",
            hide_index=True,
            column_config=column_config,
            key=f"editor_{kind}",
        )
        if st.button(f"Save {label}", key=f"save_{kind}"):
            state = state.replace_items(kind, frame_to_items(edited, kind))
            _save_state(state)
            st.success(f"{label} saved.")


def render_forecast(state: ForecastState, today: date) -> None:
    forecast = forecast_for_state(state, today)
    week = current_week_number(state.forecast_start_date, today)
    current = forecast[week - 1]
    st.markdown(f"**Week {week}** · {format_date_range(current.start_date, current.end_date)}")

    cols = st.columns(2)
    if cols[0].button("Complete current week"):
        _save_state(advance_week(state, today))
        _rerun()
    if cols[1].button("Reset forecast cycle"):
        _save_state(reset_cycle(state, today))
        _rerun()

    st.plotly_chart(viz.create_forecast_chart(forecast), use_container_width=True)

    card_cols = st.columns(3)
    for index, summary in enumerate(forecast):
        with card_cols[index % 3].container(border=True):
            marker = " · CURRENT" if summary.week_number == week else ""
            st.markdown(f"**Week {summary.week_number}**{marker}")
            st.caption(format_date_range(summary.start_date, summary.end_date))
            st.markdown(
                f"Income: {escape_dollar_for_markdown(summary.inflow)}  \n"
                f"Expenses: {escape_dollar_for_markdown(summary.outflow)}  \n"
                f"Net Change: {escape_markdown_dollars(format_signed_currency(summary.net_change))}  \n"
                f"Ending Balance: {escape_dollar_for_markdown(summary.ending_balance)}"
            )
            items = summary.items_by_date()
            if not items:
                st.caption("No items due this week")
            for item in items:
                sign = '+' if item.type == INCOME else '-'
                badge = " (Essential)" if item.is_essential else ""
                amount = escape_dollar_for_markdown(item.amount)
                st.caption(f"{format_short_date(item.date)} · {item.name}{badge} {sign}{amount}")


def render_action_plan(state: ForecastState, today: date) -> None:
    forecast = forecast_for_state(state, today)
    for section in build_action_plan(state, forecast):
        body = "\n".join(f"- {escape_markdown_dollars(line)}" for line in section.lines)
        if section.level == SUCCESS:
            st.success(f"**{section.title}**\n\n{body}")
        elif section.level == WARNING:
            st.warning(f"**{section.title}**\n\n{body}")
        else:
            st.markdown(f"**{section.title}**\n\n{body}")


def render_import_export(state: ForecastState, today: date) -> None:
    store = _store()
    st.download_button(
        "Export profile (JSON)",
        data=export_profile_json(store.current, state),
        file_name=export_filename(store.current, today),
        mime="application/json",
    )

    uploaded = st.file_uploader("Import JSON or CSV", type=["json", "csv"])
    if uploaded is None:
        return
    content = uploaded.getvalue().decode("utf-8-sig")

    if uploaded.name.lower().endswith(".csv"):
        try:
            parsed = parse_csv(content, today)
        except CsvImportError as exc:
            st.error(str(exc))
            return
        assume = None
        if not parsed.has_type_column:
            choice = st.radio("No type column detected. These rows are:", ["Expenses", "Income"], horizontal=True)
            assume = EXPENSE if choice == "Expenses" else INCOME
        st.markdown(csv_preview_text(parsed, assume))
        st.write({name: ("✓" if parsed.detected(name) else "✗") for name in parsed.columns})
        mode = st.radio("Existing items", ["Append", "Replace"], horizontal=True)
        if st.button("Import CSV"):
            incomes, expenses = parsed.split(assume)
            _save_state(merge_import(state, incomes, expenses, replace_existing=(mode == "Replace")))
            st.success(f"Added {len(incomes)} income sources and {len(expenses)} expenses.")
    elif st.button("Replace current profile with JSON"):
        try:
            _save_state(import_profile_json(content, today))
        except ProfileError as exc:
            st.error(str(exc))
        else:
            st.success("Data imported successfully!")


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(page_title="Cash Flow Forecast", layout="wide", initial_sidebar_state="expanded")
    st.title("Cash Flow Forecast")
    render_profile_sidebar()

    today = date.today()
    overview, configure, forecast, plan, transfer = st.tabs(
        ["Dashboard", "Configure", "Forecast", "Action Plan", "Import / Export"]
    )
    with overview:
        render_overview(_state())
    with configure:
        render_configuration(_state())
    with forecast:
        render_forecast(_state(), today)
    with plan:
        render_action_plan(_state(), today)
    with transfer:
        render_import_export(_state(), today)


if __name__ == "__main__":
    main()
