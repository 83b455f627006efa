"""Import recurring items from loosely structured CSV exports.

Spreadsheets people keep their bills in rarely agree on column names, so
columns are found by fuzzy header matching and every cell is coerced through
:mod:`cashflow_forecast.parsers`.  Rows are never rejected individually; only
a file without a header and at least one data row is refused.

Whether the rows are incomes or expenses is read from a type/category
column when there is one.  Otherwise the caller has to decide (the dashboard
asks the user) and pass that decision to :meth:`CsvImport.split`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from .models import EXPENSE, INCOME, ForecastState, RecurringItem, new_item_id
from .parsers import parse_amount, parse_boolean, parse_frequency, to_date

logger = logging.getLogger(__name__)

COLUMN_CANDIDATES: Dict[str, List[str]] = {
    'name': ['name', 'expense', 'description', 'item'],
    'amount': ['amount', 'cost', 'price', 'value'],
    'date': ['date', 'due date', 'due', 'next date', 'duedate'],
    'frequency': ['frequency', 'freq', 'recurring', 'period'],
    'essential': ['essential', 'necessary', 'required', 'priority'],
    'type': ['type', 'category'],
}

INCOME_TYPE_KEYWORDS = ('income', 'revenue')


class CsvImportError(ValueError):
    """Raised when CSV text cannot be treated as a header plus data rows."""


def parse_line(line: str) -> List[str]:
    """Split one CSV line on commas that sit outside double quotes.

    Quote characters only toggle quoting and are dropped; every field is
    trimmed.  Trailing empty fields are kept.

    Example:
        >>> parse_line('Rent,"1,200.00",2024-01-01')
        ['Rent', '1,200.00', '2024-01-01']
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(''.join(current))
            current = []
        else:
            current.append(char)
    fields.append(''.join(current))

    return [value.strip('"').strip() for value in fields]


def find_column_index(headers: Sequence[str], candidates: Sequence[str]) -> Optional[int]:
    """Index of the first header equal to or containing a candidate name.

    Candidates are tried in priority order, so an exact-or-substring hit on
    an earlier candidate wins over any hit on a later one.  ``None`` when
    nothing matches.
    """
    for name in candidates:
        for index, header in enumerate(headers):
            if header == name or name in header:
                return index
    return None


def detect_columns(headers: Sequence[str]) -> Dict[str, Optional[int]]:
    normalized = [header.lower().strip() for header in headers]
    return {field_name: find_column_index(normalized, names) for field_name, names in COLUMN_CANDIDATES.items()}


@dataclass(frozen=True)
class ImportedRow:
    item: RecurringItem
    is_income: bool
    essential: bool = True


@dataclass(frozen=True)
class CsvImport:
    """Parsed CSV rows plus which columns were recognised."""

    rows: Tuple[ImportedRow, ...]
    columns: Dict[str, Optional[int]] = field(default_factory=dict)

    @property
    def has_type_column(self) -> bool:
        return self.columns.get('type') is not None

    @property
    def income_count(self) -> int:
        return sum(1 for row in self.rows if row.is_income)

    @property
    def expense_count(self) -> int:
        return len(self.rows) - self.income_count

    def detected(self, field_name: str) -> bool:
        return self.columns.get(field_name) is not None

    def split(self, assume: Optional[str] = None) -> Tuple[Tuple[RecurringItem, ...], Tuple[RecurringItem, ...]]:
        """Return ``(incomes, expenses)``.

        ``assume`` (``'income'`` or ``'expense'``) overrides per-row
        classification and is required when the file has no type column.
        """
        if assume is None and not self.has_type_column:
            raise CsvImportError("No type column detected; specify whether the rows are income or expenses.")
        if assume is not None and assume not in (INCOME, EXPENSE):
            raise ValueError(f"assume must be 'income' or 'expense', got {assume!r}")

        incomes: List[RecurringItem] = []
        expenses: List[RecurringItem] = []
        for row in self.rows:
            is_income = row.is_income if assume is None else assume == INCOME
            kind = INCOME if is_income else EXPENSE
            item = row.item
            if item.kind != kind:
                item = replace(item, kind=kind, is_essential=row.essential and kind == EXPENSE)
            (incomes if is_income else expenses).append(item)
        return tuple(incomes), tuple(expenses)


def _cell(values: Sequence[str], index: Optional[int]) -> Optional[str]:
    if index is None or index >= len(values):
        return None
    return values[index]


def parse_csv(text: str, today: Optional[date] = None) -> CsvImport:
    """Parse CSV text into recurring items.

    Missing columns default to an empty name, a zero amount, a monthly
    frequency, ``today`` and essential.

    Raises
    ------
    CsvImportError
        If the text has fewer than two lines (header plus one row).
    """
    today = today or date.today()
    lines = text.strip().split('\n')
    if len(lines) < 2:
        raise CsvImportError('CSV file appears to be empty or invalid.')

    columns = detect_columns(parse_line(lines[0]))
    missing = [name for name, index in columns.items() if index is None]
    if missing:
        logger.info("CSV columns not detected: %s", ', '.join(missing))

    rows: List[ImportedRow] = []
    for line in lines[1:]:
        values = parse_line(line)
        if all(not value for value in values):
            continue

        type_value = (_cell(values, columns['type']) or '').lower()
        is_income = any(keyword in type_value for keyword in INCOME_TYPE_KEYWORDS)
        essential = True
        if columns['essential'] is not None:
            essential = parse_boolean(_cell(values, columns['essential']))

        item = RecurringItem(
            kind=INCOME if is_income else EXPENSE,
            name=_cell(values, columns['name']) or '',
            amount=round(abs(parse_amount(_cell(values, columns['amount']))), 2),
            frequency=parse_frequency(_cell(values, columns['frequency'])),
            next_date=to_date(_cell(values, columns['date']), today),
            is_essential=essential and not is_income,
            id=new_item_id(),
        )
        rows.append(ImportedRow(item=item, is_income=is_income, essential=essential))

    logger.info("Parsed %d CSV rows (%d income, %d expense)", len(rows),
                sum(1 for row in rows if row.is_income), sum(1 for row in rows if not row.is_income))
    return CsvImport(rows=tuple(rows), columns=columns)


def merge_import(
    state: ForecastState,
    incomes: Sequence[RecurringItem],
    expenses: Sequence[RecurringItem],
    replace_existing: bool = False,
) -> ForecastState:
    """Replace or append imported items; returns a new state."""
    if replace_existing:
        return replace(state, incomes=tuple(incomes), expenses=tuple(expenses))
    return replace(state, incomes=state.incomes + tuple(incomes), expenses=state.expenses + tuple(expenses))
