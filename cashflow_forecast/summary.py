"""Monthly-equivalent reporting and the action plan.

None of this feeds the forecast arithmetic.  It expresses recurring items as
average monthly figures for the overview stats and turns a forecast plus a
profile snapshot into a short, ordered list of advice sections.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .formatting import format_currency
from .models import ForecastState, RecurringItem, WeekSummary
from .parsers import BIWEEKLY, MONTHLY, WEEKLY

# Approximations kept as-is so reported figures match earlier releases:
# 4.33 ~ 52/12 weeks per month, 2.17 ~ 26/12 pay periods per month.
MONTHLY_MULTIPLIERS = {
    WEEKLY: 4.33,
    BIWEEKLY: 2.17,
    MONTHLY: 1.0,
}

EMERGENCY_FUND_MONTHS = 3


def monthly_equivalent(amount: Optional[float], frequency: str) -> float:
    """Express a recurring amount as an average monthly figure.

    Unknown frequencies are treated as monthly; a missing or zero amount
    is ``0``.

    Example:
        >>> monthly_equivalent(100, 'weekly')
        433.0
    """
    if not amount:
        return 0.0
    return amount * MONTHLY_MULTIPLIERS.get(frequency, 1.0)


def total_monthly(items: Iterable[RecurringItem]) -> float:
    return sum(monthly_equivalent(item.amount, item.frequency) for item in items)


@dataclass(frozen=True)
class CashFlowSummary:
    current_balance: float
    monthly_income: float
    monthly_expenses: float
    essential_expenses: float
    non_essential_expenses: float
    savings_percent: int
    savings_amount: float

    @property
    def net_monthly(self) -> float:
        return self.monthly_income - self.monthly_expenses

    @property
    def net_after_savings(self) -> float:
        return self.net_monthly - self.savings_amount


def summarize_cash_flow(state: ForecastState) -> CashFlowSummary:
    """Monthly totals for a profile; savings only come out of a surplus."""
    income = total_monthly(state.incomes)
    expenses = total_monthly(state.expenses)
    essential = total_monthly(item for item in state.expenses if item.is_essential)
    net = income - expenses
    savings = net * state.savings_percent / 100 if net > 0 else 0.0
    return CashFlowSummary(
        current_balance=state.current_balance,
        monthly_income=income,
        monthly_expenses=expenses,
        essential_expenses=essential,
        non_essential_expenses=expenses - essential,
        savings_percent=state.savings_percent,
        savings_amount=savings,
    )


# ---------------------------------------------------------------------------
# Action plan
# ---------------------------------------------------------------------------

SUCCESS = 'success'
WARNING = 'warning'
INFO = 'info'


@dataclass(frozen=True)
class ActionPlanSection:
    level: str
    title: str
    lines: Tuple[str, ...] = ()


def describe_item(item: RecurringItem) -> str:
    """``Rent: $1,200.00 (monthly)``; non-monthly items also show the monthly figure."""
    label = f"{item.name or 'Unnamed'}: {format_currency(item.amount)} ({item.frequency}"
    if item.frequency != MONTHLY:
        label += f" → {format_currency(monthly_equivalent(item.amount, item.frequency))}/mo"
    return label + ")"


def deficit_weeks(forecast: Sequence[WeekSummary]) -> List[WeekSummary]:
    """Weeks that end below zero."""
    return [week for week in forecast if week.ending_balance < 0]


def build_action_plan(state: ForecastState, forecast: Sequence[WeekSummary]) -> List[ActionPlanSection]:
    summary = summarize_cash_flow(state)
    sections: List[ActionPlanSection] = []

    if summary.net_monthly >= 0 and state.current_balance >= 0:
        sections.append(ActionPlanSection(
            SUCCESS,
            'Healthy Financial Position',
            (
                'Your finances are in good shape! You have positive cash flow and a healthy balance.',
                'Consider building an emergency fund (3-6 months of expenses)',
                'Look into investment opportunities',
                'Review discretionary expenses for optimization',
            ),
        ))
    elif summary.net_monthly < 0:
        sections.append(ActionPlanSection(
            WARNING,
            'Negative Cash Flow Detected',
            (
                f"Your expenses exceed your income by {format_currency(abs(summary.net_monthly))} per month.",
                'Identify and reduce non-essential expenses',
                'Look for additional income opportunities',
                'Prioritize essential expenses',
            ),
        ))

    negative = deficit_weeks(forecast)
    if negative:
        sections.append(ActionPlanSection(
            WARNING,
            'Projected Deficit Weeks',
            (f"Your forecast shows {len(negative)} week(s) with negative balance:",)
            + tuple(f"Week {week.week_number}: {format_currency(week.ending_balance)}" for week in negative),
        ))

    sections.append(_income_breakdown(state, summary))
    sections.append(_expense_breakdown(state, summary))
    sections.append(_recommendations(summary))
    return sections


def _income_breakdown(state: ForecastState, summary: CashFlowSummary) -> ActionPlanSection:
    if not state.incomes:
        return ActionPlanSection(INFO, 'Income Breakdown', ('No income sources configured',))
    lines = tuple(describe_item(item) for item in state.incomes)
    lines += (f"Total Monthly Income: {format_currency(summary.monthly_income)}",)
    return ActionPlanSection(INFO, 'Income Breakdown', lines)


def _expense_breakdown(state: ForecastState, summary: CashFlowSummary) -> ActionPlanSection:
    if not state.expenses:
        return ActionPlanSection(INFO, 'Expense Breakdown', ('No expenses configured',))

    lines: Tuple[str, ...] = ()
    for heading, essential, subtotal in (
        ('Essential Expenses:', True, summary.essential_expenses),
        ('Non-Essential Expenses:', False, summary.non_essential_expenses),
    ):
        group = [item for item in state.expenses if item.is_essential == essential]
        lines += (heading,)
        if group:
            lines += tuple(describe_item(item) for item in group)
            lines += (f"Subtotal: {format_currency(subtotal)}/mo",)
        else:
            lines += ('None',)
    lines += (f"Total Monthly Expenses: {format_currency(summary.monthly_expenses)}",)
    return ActionPlanSection(INFO, 'Expense Breakdown', lines)


def _recommendations(summary: CashFlowSummary) -> ActionPlanSection:
    if summary.net_monthly < 0:
        first = 'Focus on reducing non-essential expenses first'
    else:
        first = 'Continue maintaining positive cash flow'
    if summary.current_balance < summary.monthly_expenses * EMERGENCY_FUND_MONTHS:
        second = 'Build an emergency fund of 3-6 months expenses'
    else:
        second = 'Consider investment opportunities for surplus funds'
    return ActionPlanSection(
        INFO,
        'Recommendations',
        (
            first,
            second,
            'Review and adjust your budget monthly',
            'Track actual spending vs. projected spending',
        ),
    )
