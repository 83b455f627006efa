#!/usr/bin/env python3
"""Print the six-week forecast for a saved profile."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cashflow_forecast.config import PROFILES_PATH, configure_logging
from cashflow_forecast.forecast import forecast_for_state, forecast_to_frame, occurrences_to_frame
from cashflow_forecast.profile_storage import ProfileError, ProfileStore


def main(path: Path, profile: Optional[str], start: Optional[date], show_items: bool) -> int:
    store = ProfileStore(path)
    try:
        state = store.get(profile)
    except ProfileError as exc:
        print(exc)
        print(f"Known profiles: {', '.join(store.names())}")
        return 1

    forecast = forecast_for_state(state, start or date.today())
    frame = forecast_to_frame(forecast)
    print(f"Profile: {profile or store.current}  starting balance: {state.current_balance:,.2f}")
    print(frame.drop(columns=['Items Due']).to_string(index=False, float_format=lambda v: f"{v:,.2f}"))

    if show_items:
        items = occurrences_to_frame(forecast)
        print("\nItems due:")
        print("None" if items.empty else items.to_string(index=False))
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show the week-by-week forecast for a profile.')
    parser.add_argument('--path', type=Path, default=PROFILES_PATH, help='Profile store JSON file')
    parser.add_argument('--profile', help='Profile name (defaults to the last used profile)')
    parser.add_argument('--start', type=date.fromisoformat, help='Reference date, YYYY-MM-DD (defaults to today)')
    parser.add_argument('--items', action='store_true', help='List every due item')
    args = parser.parse_args()
    configure_logging()
    raise SystemExit(main(args.path, args.profile, args.start, args.items))
