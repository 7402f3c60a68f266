"""Pydantic input models for every tool.

Each model doubles as the tool's published JSON schema (via
``model_json_schema()``) and as its validator, so what a caller is told and
what the handler accepts cannot drift apart.

Normalisation happens here rather than in the handlers: ticker symbols are
stripped and upper-cased, and the numeric ranges (``days``, ``limit``) are
clamped instead of rejected -- a missing, zero, or non-numeric value falls
back to the default first.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Resolution = Literal["1", "5", "15", "30", "60", "D", "W", "M"]

DEFAULT_DAYS = 30
MAX_DAYS = 365
DEFAULT_NEWS_LIMIT = 5
MAX_NEWS_LIMIT = 20


def clamp(value: Any, default: int, low: int, high: int) -> int:
    """Coerce *value* to an int within ``[low, high]``.

    Falsy and non-numeric values become *default* before clamping.
    """
    try:
        number = int(float(value)) if value else default
    except (TypeError, ValueError, OverflowError):
        number = default
    if number == 0:
        number = default
    return min(max(number, low), high)


def _normalize_symbol(value: str) -> str:
    return value.strip().upper()


class SymbolInput(BaseModel):
    """Input for tools that take a single ticker."""

    symbol: str = Field(min_length=1, description="Ticker symbol (e.g. AAPL)")

    @field_validator("symbol")
    @classmethod
    def _upper(cls, value: str) -> str:
        symbol = _normalize_symbol(value)
        if not symbol:
            raise ValueError("symbol must not be blank")
        return symbol


class QuoteInput(SymbolInput):
    symbol: str = Field(
        min_length=1, description="Ticker symbol (e.g. AAPL, TSLA, SPY, QQQ, VOO)"
    )


class QuotesInput(BaseModel):
    symbols: list[str] = Field(
        min_length=1,
        description='Array of ticker symbols (e.g. ["AAPL", "GOOGL", "SPY"])',
    )

    @field_validator("symbols")
    @classmethod
    def _upper_all(cls, value: list[str]) -> list[str]:
        symbols = [_normalize_symbol(s) for s in value]
        if not all(symbols):
            raise ValueError("symbols must not contain blank entries")
        return symbols


class SearchInput(BaseModel):
    query: str = Field(
        min_length=1,
        description="Company name or keyword to search "
        "(e.g. 'Apple', 'electric vehicle', 'semiconductor')",
    )


class CandlesInput(SymbolInput):
    resolution: Resolution = Field(
        default="D",
        description="Candle resolution: 1, 5, 15, 30, 60 (minutes), D (day), W (week), M (month)",
    )
    days: int = Field(
        default=DEFAULT_DAYS,
        ge=1,
        le=MAX_DAYS,
        description="Number of days of historical data to fetch (default: 30, max: 365)",
    )

    @field_validator("resolution", mode="before")
    @classmethod
    def _default_resolution(cls, value: Any) -> Any:
        if value is None or value == "":
            return "D"
        return str(value).upper()

    @field_validator("days", mode="before")
    @classmethod
    def _clamp_days(cls, value: Any) -> int:
        return clamp(value, DEFAULT_DAYS, 1, MAX_DAYS)


class NewsInput(BaseModel):
    symbol: Optional[str] = Field(
        default=None,
        description="Ticker symbol for company-specific news. Omit for general market news.",
    )
    limit: int = Field(
        default=DEFAULT_NEWS_LIMIT,
        ge=1,
        le=MAX_NEWS_LIMIT,
        description="Number of articles to return (default: 5, max: 20)",
    )

    @field_validator("symbol")
    @classmethod
    def _upper_or_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _normalize_symbol(value) or None

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value: Any) -> int:
        return clamp(value, DEFAULT_NEWS_LIMIT, 1, MAX_NEWS_LIMIT)
