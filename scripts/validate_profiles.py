#!/usr/bin/env python3
"""Lightweight validator for the profile store JSON document."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cashflow_forecast.config import PROFILES_PATH
from cashflow_forecast.parsers import FREQUENCIES

ITEM_KEYS = ('name', 'amount', 'frequency', 'nextDate')


def validate_profile(name: str, record: Any) -> List[str]:
    if not isinstance(record, dict):
        return [f"{name}: profile is not an object"]

    errors = []
    for list_key in ('incomes', 'expenses'):
        items = record.get(list_key, [])
        if not isinstance(items, list):
            errors.append(f"{name}.{list_key} must be a list")
            continue
        for index, item in enumerate(items):
            where = f"{name}.{list_key}[{index}]"
            if not isinstance(item, dict):
                errors.append(f"{where} is not an object")
                continue
            missing = [key for key in ITEM_KEYS if key not in item]
            if missing:
                errors.append(f"{where} missing {', '.join(missing)}")
            if item.get('frequency') not in FREQUENCIES:
                errors.append(f"{where} has frequency {item.get('frequency')!r} (will load as monthly)")
    return errors


def validate_store(path: Path) -> List[str]:
    with path.open("r", encoding="utf-8") as handle:
        data: Any = json.load(handle)

    if not isinstance(data, dict):
        return ["store is not a JSON object"]

    profiles = data.get('profiles')
    if not isinstance(profiles, dict) or not profiles:
        return ["missing or empty 'profiles' block"]

    errors = []
    for name, record in profiles.items():
        errors.extend(validate_profile(name, record))
    if data.get('lastProfile') not in profiles:
        errors.append(f"lastProfile {data.get('lastProfile')!r} is not a known profile")
    return errors


def main(path: Path) -> int:
    if not path.exists():
        print(f"Profile store not found: {path}")
        return 1

    try:
        issues = validate_store(path)
    except json.JSONDecodeError as exc:
        print(f"Profile store is not valid JSON: {exc}")
        return 1

    if issues:
        print("Profile validation failed:")
        for message in issues:
            print(f"  - {message}")
        return 1

    print("All profiles validated successfully.")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Validate the profile store document.')
    parser.add_argument('--path', type=Path, default=PROFILES_PATH, help='Profile store JSON file')
    args = parser.parse_args()
    raise SystemExit(main(args.path))
