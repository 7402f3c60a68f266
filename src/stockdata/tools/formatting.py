"""Text formatting helpers shared by the tool handlers."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional


def format_currency(value: float) -> str:
    """Two decimals with thousands separators: ``1234.5`` -> ``"1,234.50"``."""
    return f"{value:,.2f}"


def format_large_number(value: float) -> str:
    """Abbreviate with T/B/M suffixes; smaller numbers get separators only."""
    if value >= 1e12:
        return f"{value / 1e12:.2f}T"
    if value >= 1e9:
        return f"{value / 1e9:.2f}B"
    if value >= 1e6:
        return f"{value / 1e6:.2f}M"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def signed_money(value: float) -> str:
    """``2.5`` -> ``"+$2.50"``, ``-2.5`` -> ``"-$2.50"``."""
    sign = "+" if value >= 0 else "-"
    return f"{sign}${format_currency(abs(value))}"


def signed_percent(value: float) -> str:
    """``1.686`` -> ``"+1.69%"``; zero counts as positive."""
    return f"{value:+.2f}%"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def short_date(timestamp: float) -> str:
    """UNIX seconds -> ``"Jan 5"`` (UTC)."""
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return f"{dt:%b} {dt.day}"


def short_datetime(timestamp: float) -> str:
    """UNIX seconds -> ``"Jan 5, 3:04 PM"`` (UTC)."""
    dt = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    hour = dt.hour % 12 or 12
    return f"{dt:%b} {dt.day}, {hour}:{dt:%M} {dt:%p}"


def optional_number(
    value: Optional[float],
    prefix: str = "",
    suffix: str = "",
    scale: float = 1.0,
    large: bool = False,
    decimals: Optional[int] = None,
) -> str:
    """Render a possibly-missing metric, ``"N/A"`` when absent.

    Args:
        value: The raw number, or ``None``.
        prefix: Prepended to the number (e.g. ``"$"``).
        suffix: Appended to the number (e.g. ``"%"``).
        scale: Multiplier applied first (Finnhub reports many values in millions).
        large: Use :func:`format_large_number` instead of two-decimal currency style.
        decimals: Fixed decimal places without separators (overrides the above).
    """
    if value is None:
        return "N/A"
    number = value * scale
    if decimals is not None:
        body = f"{number:.{decimals}f}"
    elif large:
        body = format_large_number(number)
    else:
        body = format_currency(number)
    return f"{prefix}{body}{suffix}"
