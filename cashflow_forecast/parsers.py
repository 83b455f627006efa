"""Defensive text-to-value coercions for stored and imported item fields.

Values read back from the profile store or pulled out of a CSV export are
untyped text.  The helpers here never raise: anything they cannot make
sense of collapses to a safe default (``0``, today, ``monthly``, ``False``)
so that one bad cell never takes down a whole import or forecast.
"""

from __future__ import annotations

import logging
import math
import re
import warnings
from datetime import date, datetime, timedelta
from typing import Any, Optional

import pandas as pd

logger = logging.getLogger(__name__)

WEEKLY = 'weekly'
BIWEEKLY = 'biweekly'
MONTHLY = 'monthly'
FREQUENCIES = (WEEKLY, BIWEEKLY, MONTHLY)

TRUTHY_VALUES = {'true', 'yes', '1', 'y'}

MONTH_NUMBERS = {
    'jan': 1, 'january': 1,
    'feb': 2, 'february': 2,
    'mar': 3, 'march': 3,
    'apr': 4, 'april': 4,
    'may': 5,
    'jun': 6, 'june': 6,
    'jul': 7, 'july': 7,
    'aug': 8, 'august': 8,
    'sep': 9, 'september': 9,
    'oct': 10, 'october': 10,
    'nov': 11, 'november': 11,
    'dec': 12, 'december': 12,
}

_STRIP_CHARS = re.compile(r'[$€£¥,\s]')
_LEADING_NUMBER = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_MONTH_DAY = re.compile(r'^([A-Za-z]+)\s+(\d{1,2})$')


def parse_amount(value: Any) -> float:
    """Parse a monetary amount such as ``"$1,234.56"``.

    Currency symbols, thousands separators and whitespace are stripped and
    the leading decimal number is read.  Empty or unparseable input is ``0``.

    Example:
        >>> parse_amount("$1,234.56")
        1234.56
        >>> parse_amount("abc")
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0

    cleaned = _STRIP_CHARS.sub('', str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    number = float(match.group(0))
    return number if math.isfinite(number) else 0.0


def parse_date(value: Any, today: Optional[date] = None) -> str:
    """Coerce a date-ish value into an ISO ``YYYY-MM-DD`` string.

    Accepted forms, in order:

    * ISO ``YYYY-MM-DD`` (returned unchanged when it is a real date);
    * ``"Month Day"`` / ``"Mon Day"`` in English, assumed to be in
      ``today``'s year.  Days past the end of the month roll into the next
      month (``"Feb 30"`` is 1 or 2 March);
    * anything :func:`pandas.to_datetime` understands.

    Whatever is left falls back to ``today``.
    """
    today = today or date.today()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if value is None:
        return today.isoformat()
    text = str(value).strip()
    if not text:
        return today.isoformat()

    if _ISO_DATE.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            pass

    month_day = _MONTH_DAY.match(text)
    if month_day:
        month = MONTH_NUMBERS.get(month_day.group(1).lower())
        if month is not None:
            day = int(month_day.group(2))
            return (date(today.year, month, 1) + timedelta(days=day - 1)).isoformat()

    parsed = _parse_generic_date(text)
    if parsed is not None:
        return parsed.isoformat()

    logger.debug("Unparseable date %r, defaulting to %s", text, today)
    return today.isoformat()


def parse_frequency(value: Any) -> str:
    """Map free-text frequency labels onto ``weekly``/``biweekly``/``monthly``.

    Matching is case-insensitive and by substring; anything unrecognised is
    ``monthly``.
    """
    if not value:
        return MONTHLY
    normalized = str(value).lower().strip()

    if 'week' in normalized and 'bi' not in normalized:
        return WEEKLY
    if 'biweek' in normalized or 'bi-week' in normalized or 'every 2 week' in normalized:
        return BIWEEKLY
    if 'month' in normalized:
        return MONTHLY
    return MONTHLY


def parse_boolean(value: Any) -> bool:
    """Return ``True`` for ``true``/``yes``/``1``/``y`` (any case), else ``False``."""
    if value is None:
        return False
    return str(value).lower().strip() in TRUTHY_VALUES


def to_date(value: Any, today: Optional[date] = None) -> date:
    """Like :func:`parse_date` but returns a :class:`datetime.date`."""
    return date.fromisoformat(parse_date(value, today))


def _parse_generic_date(text: str) -> Optional[date]:
    with warnings.catch_warnings():
        # pandas warns when it has to guess the format; guessing is the point here
        warnings.simplefilter('ignore')
        try:
            parsed = pd.to_datetime(text, errors='coerce')
        except (ValueError, TypeError, OverflowError):
            return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()
