"""Record types shared by the forecast engine and its collaborators."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, Optional, Tuple

from .parsers import FREQUENCIES, MONTHLY, parse_amount, parse_boolean, parse_frequency, to_date

INCOME = 'income'
EXPENSE = 'expense'
ITEM_KINDS = (INCOME, EXPENSE)

UNNAMED_LABELS = {INCOME: 'Unnamed Income', EXPENSE: 'Unnamed Expense'}


def new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RecurringItem:
    """One income or expense source with a repeating schedule.

    ``next_date`` is the anchor the recurrence is computed from.  Construction
    validates the fields; use :meth:`from_record` for untyped input.
    """

    kind: str
    name: str = ''
    amount: float = 0.0
    frequency: str = MONTHLY
    next_date: date = field(default_factory=date.today)
    is_essential: bool = False
    id: str = field(default_factory=new_item_id)

    def __post_init__(self) -> None:
        if self.kind not in ITEM_KINDS:
            raise ValueError(f"Unknown item kind: {self.kind!r}")
        if self.frequency not in FREQUENCIES:
            raise ValueError(f"Unknown frequency: {self.frequency!r}")
        if not math.isfinite(self.amount) or self.amount < 0:
            raise ValueError(f"Amount must be a non-negative number, got {self.amount!r}")
        if not isinstance(self.next_date, date):
            raise ValueError(f"next_date must be a date, got {self.next_date!r}")

    @property
    def display_name(self) -> str:
        return self.name or UNNAMED_LABELS[self.kind]

    @classmethod
    def from_record(cls, record: Dict[str, Any], kind: str, today: Optional[date] = None) -> 'RecurringItem':
        """Build an item from a stored/imported dict, coercing every field.

        Negative amounts are taken as magnitudes (bank exports often sign
        debits); the item's kind carries the direction.
        """
        raw_id = record.get('id')
        amount = round(abs(parse_amount(record.get('amount'))), 2)
        return cls(
            kind=kind,
            name=str(record.get('name') or '').strip(),
            amount=amount,
            frequency=parse_frequency(record.get('frequency')),
            next_date=to_date(record.get('nextDate', record.get('next_date')), today),
            is_essential=kind == EXPENSE and parse_boolean(record.get('isEssential', record.get('is_essential'))),
            id=str(raw_id) if raw_id not in (None, '') else new_item_id(),
        )

    def to_record(self) -> Dict[str, Any]:
        record: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'amount': self.amount,
            'frequency': self.frequency,
            'nextDate': self.next_date.isoformat(),
        }
        if self.kind == EXPENSE:
            record['isEssential'] = self.is_essential
        return record


@dataclass(frozen=True)
class Occurrence:
    """One concrete due instance of a recurring item inside a week."""

    name: str
    amount: float
    type: str
    date: date
    is_essential: Optional[bool] = None


@dataclass(frozen=True)
class WeekSummary:
    week_number: int
    start_date: date
    end_date: date
    inflow: float
    outflow: float
    net_change: float
    starting_balance: float
    ending_balance: float
    items_due: Tuple[Occurrence, ...] = ()

    @property
    def is_deficit(self) -> bool:
        return self.net_change < 0

    def items_by_date(self) -> Tuple[Occurrence, ...]:
        return tuple(sorted(self.items_due, key=lambda item: item.date))


@dataclass(frozen=True)
class ForecastState:
    """Snapshot of everything one profile feeds into the forecast.

    Updates return new instances; callers keep the old snapshot valid for
    whatever computation is already using it.
    """

    incomes: Tuple[RecurringItem, ...] = ()
    expenses: Tuple[RecurringItem, ...] = ()
    current_balance: float = 0.0
    savings_percent: int = 0
    forecast_start_date: date = field(default_factory=date.today)

    def items(self, kind: str) -> Tuple[RecurringItem, ...]:
        return self.incomes if kind == INCOME else self.expenses

    def add_item(self, item: RecurringItem) -> 'ForecastState':
        if item.kind == INCOME:
            return replace(self, incomes=self.incomes + (item,))
        return replace(self, expenses=self.expenses + (item,))

    def remove_item(self, item_id: str) -> 'ForecastState':
        return replace(
            self,
            incomes=tuple(item for item in self.incomes if item.id != item_id),
            expenses=tuple(item for item in self.expenses if item.id != item_id),
        )

    def update_item(self, item_id: str, **changes: Any) -> 'ForecastState':
        """Return a state where the item ``item_id`` has ``changes`` applied.

        Only the named dataclass fields can change; unknown ids leave the
        state as it was.
        """
        changes.pop('id', None)
        changes.pop('kind', None)

        def _apply(items: Iterable[RecurringItem]) -> Tuple[RecurringItem, ...]:
            return tuple(replace(item, **changes) if item.id == item_id else item for item in items)

        return replace(self, incomes=_apply(self.incomes), expenses=_apply(self.expenses))

    def replace_items(self, kind: str, items: Iterable[RecurringItem]) -> 'ForecastState':
        if kind == INCOME:
            return replace(self, incomes=tuple(items))
        return replace(self, expenses=tuple(items))

    @classmethod
    def from_record(cls, record: Dict[str, Any], today: Optional[date] = None) -> 'ForecastState':
        today = today or date.today()
        incomes = record.get('incomes') or []
        expenses = record.get('expenses') or []
        return cls(
            incomes=tuple(RecurringItem.from_record(r, INCOME, today) for r in incomes if isinstance(r, dict)),
            expenses=tuple(RecurringItem.from_record(r, EXPENSE, today) for r in expenses if isinstance(r, dict)),
            current_balance=parse_amount(record.get('currentBalance')),
            savings_percent=_parse_percent(record.get('savingsPercent')),
            forecast_start_date=to_date(record.get('forecastStartDate'), today),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            'incomes': [item.to_record() for item in self.incomes],
            'expenses': [item.to_record() for item in self.expenses],
            'currentBalance': self.current_balance,
            'savingsPercent': self.savings_percent,
            'forecastStartDate': self.forecast_start_date.isoformat(),
        }


def _parse_percent(value: Any) -> int:
    percent = int(parse_amount(value))
    return max(0, min(100, percent))
