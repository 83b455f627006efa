import json
from datetime import date, datetime

import pytest

from cashflow_forecast.models import EXPENSE, ForecastState, RecurringItem
from cashflow_forecast.profile_storage import (
    ProfileError,
    ProfileStore,
    export_filename,
    export_profile,
    export_profile_json,
    import_profile_json,
)

TODAY = date(2024, 1, 31)


RENT_STATE = ForecastState(
    expenses=(
        RecurringItem(kind=EXPENSE, name='Rent', amount=1200.0, next_date=date(2024, 2, 1), is_essential=True),
    ),
    current_balance=800.0,
    forecast_start_date=TODAY,
)


def _store(tmp_path):
    return ProfileStore(tmp_path / 'profiles.json', today=TODAY)


def test_new_store_has_default_profile(tmp_path):
    store = _store(tmp_path)

    assert store.names() == ['Personal']
    assert store.current == 'Personal'
    assert store.get() == ForecastState(forecast_start_date=TODAY)
    assert (tmp_path / 'profiles.json').exists()


def test_put_persists_across_instances(tmp_path):
    store = _store(tmp_path)
    store.put(RENT_STATE)

    reloaded = _store(tmp_path)
    assert reloaded.get() == RENT_STATE


def test_last_profile_is_remembered(tmp_path):
    store = _store(tmp_path)
    store.create('Business')
    store.switch('Business')

    assert _store(tmp_path).current == 'Business'


def test_create_rejects_blank_and_duplicate_names(tmp_path):
    store = _store(tmp_path)
    with pytest.raises(ProfileError, match='provide a profile name'):
        store.create('   ')
    with pytest.raises(ProfileError, match='already exists'):
        store.create('Personal')


def test_copy_is_independent(tmp_path):
    store = _store(tmp_path)
    store.put(RENT_STATE)
    copied = store.copy('Scenario')

    assert copied == RENT_STATE
    store.put(ForecastState(forecast_start_date=TODAY), 'Scenario')
    assert store.get('Personal') == RENT_STATE


def test_rename_keeps_position_and_current(tmp_path):
    store = _store(tmp_path)
    store.create('Business')
    store.rename('Personal', 'Household')

    assert store.names() == ['Household', 'Business']
    assert store.current == 'Household'
    with pytest.raises(ProfileError, match='not found'):
        store.rename('Personal', 'Other')


def test_delete_refuses_last_profile(tmp_path):
    store = _store(tmp_path)
    with pytest.raises(ProfileError, match='last profile'):
        store.delete('Personal')

    store.create('Business')
    store.delete('Personal')
    assert store.names() == ['Business']
    assert store.current == 'Business'


def test_unknown_profile_raises(tmp_path):
    store = _store(tmp_path)
    with pytest.raises(ProfileError):
        store.get('Nope')
    with pytest.raises(ProfileError):
        store.switch('Nope')


def test_corrupt_store_falls_back_to_default(tmp_path):
    path = tmp_path / 'profiles.json'
    path.write_text('{not json', encoding='utf-8')

    store = ProfileStore(path, today=TODAY)
    assert store.names() == ['Personal']
    assert json.loads(path.read_text(encoding='utf-8'))['lastProfile'] == 'Personal'


def test_unknown_last_profile_uses_first(tmp_path):
    path = tmp_path / 'profiles.json'
    path.write_text(json.dumps({'profiles': {'A': {}, 'B': {}}, 'lastProfile': 'Z'}), encoding='utf-8')

    assert ProfileStore(path, today=TODAY).current == 'A'


def test_export_payload_shape():
    payload = export_profile('Personal', RENT_STATE, datetime(2024, 1, 31, 9, 30))

    assert payload['profileName'] == 'Personal'
    assert payload['exportDate'] == '2024-01-31T09:30:00'
    assert payload['currentBalance'] == 800.0
    assert payload['expenses'][0]['isEssential'] is True


def test_export_import_round_trip():
    text = export_profile_json('Personal', RENT_STATE)
    assert import_profile_json(text, TODAY) == RENT_STATE


@pytest.mark.parametrize('text', ['not json', '[1, 2]'])
def test_import_rejects_bad_documents(text):
    with pytest.raises(ProfileError):
        import_profile_json(text, TODAY)


def test_export_filename():
    assert export_filename('My Profile', TODAY) == 'cashflow-my-profile-2024-01-31.json'
    assert export_filename('!!!', TODAY) == 'cashflow-profile-2024-01-31.json'
