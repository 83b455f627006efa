"""Persistence for named forecast profiles (Personal, Business, ...).

All profiles live in one JSON document::

    {"profiles": {"Personal": {...state record...}}, "lastProfile": "Personal"}

State records use the same keys as profile exports so a file exported from
one install can be imported into another.  A missing or corrupt store is
replaced by a single empty default profile.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_PROFILE_NAME, PROFILES_PATH
from .formatting import safe_filename
from .models import ForecastState

logger = logging.getLogger(__name__)

EXPORT_PREFIX = 'cashflow'


class ProfileError(ValueError):
    """Raised for unknown or conflicting profile names and bad imports."""


def _default_profiles(today: date) -> Dict[str, Dict[str, Any]]:
    return {DEFAULT_PROFILE_NAME: ForecastState(forecast_start_date=today).to_record()}


class ProfileStore:
    """Loads, edits and saves the profile document.

    Every mutating call is written through to disk immediately.
    """

    def __init__(self, path: Optional[Path] = None, today: Optional[date] = None) -> None:
        self.path = Path(path or PROFILES_PATH)
        self._today = today
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self.current: str = DEFAULT_PROFILE_NAME
        self.load()

    @property
    def today(self) -> date:
        return self._today or date.today()

    # Public API -------------------------------------------------------------

    def load(self) -> None:
        data = self._read()
        profiles = data.get('profiles') if isinstance(data, dict) else None
        if not isinstance(profiles, dict) or not profiles:
            self._profiles = _default_profiles(self.today)
            self.current = DEFAULT_PROFILE_NAME
            self.save()
            return

        self._profiles = {str(name): record for name, record in profiles.items() if isinstance(record, dict)}
        if not self._profiles:
            self._profiles = _default_profiles(self.today)
        last = data.get('lastProfile')
        self.current = last if last in self._profiles else next(iter(self._profiles))

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {'profiles': self._profiles, 'lastProfile': self.current}
        with self.path.open('w', encoding='utf-8') as handle:
            json.dump(payload, handle, indent=2, sort_keys=True)

    def names(self) -> List[str]:
        return list(self._profiles)

    def get(self, name: Optional[str] = None) -> ForecastState:
        name = name or self.current
        self._require(name)
        return ForecastState.from_record(self._profiles[name], self.today)

    def put(self, state: ForecastState, name: Optional[str] = None) -> None:
        name = name or self.current
        self._require(name)
        self._profiles[name] = state.to_record()
        self.save()

    def switch(self, name: str) -> ForecastState:
        self._require(name)
        self.current = name
        self.save()
        return self.get(name)

    def create(self, name: str) -> ForecastState:
        name = self._new_name(name)
        state = ForecastState(forecast_start_date=self.today)
        self._profiles[name] = state.to_record()
        self.save()
        logger.info("Created profile %s", name)
        return state

    def copy(self, new_name: str, source: Optional[str] = None) -> ForecastState:
        source = source or self.current
        self._require(source)
        new_name = self._new_name(new_name)
        self._profiles[new_name] = json.loads(json.dumps(self._profiles[source]))
        self.save()
        logger.info("Copied profile %s to %s", source, new_name)
        return self.get(new_name)

    def rename(self, old_name: str, new_name: str) -> None:
        if not old_name or not new_name:
            raise ProfileError('Please provide both old and new profile names.')
        self._require(old_name)
        new_name = self._new_name(new_name)
        # rebuild to keep the profile's position in the listing
        self._profiles = {
            (new_name if name == old_name else name): record for name, record in self._profiles.items()
        }
        if self.current == old_name:
            self.current = new_name
        self.save()
        logger.info("Renamed profile %s to %s", old_name, new_name)

    def delete(self, name: str) -> None:
        self._require(name)
        if len(self._profiles) == 1:
            raise ProfileError('Cannot delete the last profile. Create a new one first.')
        del self._profiles[name]
        if self.current == name:
            self.current = next(iter(self._profiles))
        self.save()
        logger.info("Deleted profile %s", name)

    # Internal ----------------------------------------------------------------

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read profile store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _require(self, name: str) -> None:
        if name not in self._profiles:
            raise ProfileError(f'Profile "{name}" not found.')

    def _new_name(self, name: str) -> str:
        name = (name or '').strip()
        if not name:
            raise ProfileError('Please provide a profile name.')
        if name in self._profiles:
            raise ProfileError(f'Profile "{name}" already exists.')
        return name


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


def export_profile(name: str, state: ForecastState, exported_at: Optional[datetime] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {'profileName': name}
    payload.update(state.to_record())
    payload['exportDate'] = (exported_at or datetime.now()).isoformat()
    return payload


def export_profile_json(name: str, state: ForecastState, exported_at: Optional[datetime] = None) -> str:
    return json.dumps(export_profile(name, state, exported_at), indent=2)


def export_filename(name: str, today: Optional[date] = None) -> str:
    """``cashflow-my-profile-2024-01-31.json``"""
    today = today or date.today()
    return f"{EXPORT_PREFIX}-{safe_filename(name, default='profile')}-{today.isoformat()}.json"


def import_profile_json(text: str, today: Optional[date] = None) -> ForecastState:
    """Rebuild a state from exported JSON.

    Raises
    ------
    ProfileError
        If the text is not a JSON object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProfileError(f"Error importing data: {exc}") from exc
    if not isinstance(data, dict):
        raise ProfileError('Error importing data: expected a JSON object.')
    return ForecastState.from_record(data, today)
