"""Formatting utilities for currency and date display.

The forecast engine itself emits plain numbers and dates; these helpers
are for the presentation layer (streamlit pages, action plan text, the
report script).
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Union


def escape_dollar_for_markdown(amount: float) -> str:
    """Format a dollar amount and escape the dollar sign for markdown rendering.

    Streamlit markdown treats ``$`` as a LaTeX delimiter, so a bare dollar
    sign turns the rest of the line into math.

    Example:
        >>> escape_dollar_for_markdown(1234.56)
        '\\\\$1,234.56'
    """
    return escape_markdown_dollars(format_currency(amount))


def escape_markdown_dollars(text: str) -> str:
    """Escape every dollar sign in already formatted text."""
    return text.replace("$", "\\$")


def format_currency(amount: Union[float, int], include_sign: bool = True, decimals: int = 2) -> str:
    """Format a currency amount with thousands separators.

    Negative amounts put the minus ahead of the dollar sign.

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-50, decimals=0)
        '-$50'
    """
    formatted = f"{abs(amount):,.{decimals}f}"
    prefix = "-" if amount < 0 and round(abs(amount), decimals) != 0 else ""
    return f"{prefix}${formatted}" if include_sign else f"{prefix}{formatted}"


def format_signed_currency(amount: Union[float, int]) -> str:
    """Currency with an explicit ``+`` for non-negative values."""
    if amount >= 0:
        return f"+{format_currency(amount)}"
    return format_currency(amount)


def format_short_date(value: date) -> str:
    """``Jan 8`` style label."""
    return f"{value.strftime('%b')} {value.day}"


def format_date_range(start: date, end: date) -> str:
    return f"{format_short_date(start)} - {format_short_date(end)}"


def safe_filename(name: str, default: str = 'file', max_length: Optional[int] = None) -> str:
    """Create a lowercase, hyphenated filename fragment from a user-provided name.

    Example:
        >>> safe_filename("My Budget 2024!")
        'my-budget-2024'
        >>> safe_filename("", default="profile")
        'profile'
    """
    if not name:
        return default

    cleaned = ''.join(c for c in name if c.isalnum() or c in {' ', '_', '-'})
    cleaned = '-'.join(cleaned.lower().split())

    while '--' in cleaned:
        cleaned = cleaned.replace('--', '-')

    if max_length is not None and len(cleaned) > max_length:
        cleaned = cleaned[:max_length]

    cleaned = cleaned.strip('-')
    return cleaned if cleaned else default
