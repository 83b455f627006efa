"""Configuration management for the cash-flow forecaster.

This module centralizes all configuration values including paths,
forecast defaults, logging setup and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Base project root - assumes this file is in cashflow_forecast/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directory
DATA_DIR = Path(os.getenv("CASHFLOW_DATA_DIR", _PROJECT_ROOT / "data"))

# Profile store (one JSON document holding every named profile)
PROFILES_PATH = Path(
    os.getenv("CASHFLOW_PROFILES_PATH", DATA_DIR / "profiles.json")
).resolve()

LOG_LEVEL = os.getenv("CASHFLOW_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Forecast horizon
FORECAST_WEEKS = 6
DAYS_PER_WEEK = 7

DEFAULT_PROFILE_NAME = "Personal"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts and the streamlit app."""
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
