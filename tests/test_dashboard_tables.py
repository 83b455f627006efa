from datetime import date

import pandas as pd

from cashflow_forecast.csv_import import parse_csv
from cashflow_forecast.dashboard import csv_preview_text, frame_to_items, items_to_frame
from cashflow_forecast.models import EXPENSE, INCOME, RecurringItem

TODAY = date(2024, 1, 1)


def test_income_table_has_no_essential_column():
    pay = RecurringItem(kind=INCOME, name='Pay', amount=100.0, next_date=TODAY)
    frame = items_to_frame([pay], INCOME)
    assert 'Essential' not in frame.columns
    assert frame.loc[0, 'Name'] == 'Pay'


def test_table_round_trip_keeps_items():
    rent = RecurringItem(kind=EXPENSE, name='Rent', amount=1200.0, next_date=TODAY, is_essential=True)
    gym = RecurringItem(kind=EXPENSE, name='Gym', amount=45.0, frequency='weekly', next_date=date(2024, 1, 3))

    frame = items_to_frame([rent, gym], EXPENSE)
    assert frame_to_items(frame, EXPENSE, TODAY) == [rent, gym]


def test_edited_rows_are_coerced_and_blank_rows_dropped():
    frame = pd.DataFrame([
        {'id': None, 'Name': 'Phone', 'Amount': '$60', 'Frequency': 'Monthly',
         'Next Date': pd.Timestamp('2024-01-20'), 'Essential': True},
        {'id': None, 'Name': None, 'Amount': None, 'Frequency': None, 'Next Date': None, 'Essential': None},
    ])

    items = frame_to_items(frame, EXPENSE, TODAY)

    assert len(items) == 1
    phone = items[0]
    assert (phone.name, phone.amount, phone.frequency) == ('Phone', 60.0, 'monthly')
    assert phone.next_date == date(2024, 1, 20)
    assert phone.is_essential is True
    assert phone.id


def test_csv_preview_counts_follow_type_decision():
    typed = parse_csv("Name,Amount,Type\nPay,100,Income\nRent,900,Expense\nGym,40,Expense", TODAY)
    assert csv_preview_text(typed) == 'Found 3 items: 1 income sources, 2 expenses.'

    untyped = parse_csv("Item,Cost\nNetflix,15.99\nSpotify,9.99", TODAY)
    assert csv_preview_text(untyped, INCOME) == 'Found 2 items: 2 income sources, 0 expenses.'
    assert csv_preview_text(untyped, EXPENSE) == 'Found 2 items: 0 income sources, 2 expenses.'
