"""Tool handler implementations.

:class:`StockTools` holds one coroutine per tool. Every handler receives an
already-validated input model, reads the API key through the host context,
issues its upstream calls through :class:`~stockdata.client.CachedClient`,
and returns the rendered text. Handlers signal failure by raising a
:class:`~stockdata.exceptions.StockDataError`; the registry folds that into
an error :class:`~stockdata.models.ToolResult`.

Multi-symbol handlers (``quotes`` and ``peers``) fetch concurrently with
:func:`asyncio.gather` and render one line per symbol in input order. A
failing symbol only replaces its own line.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from stockdata.client import CachedClient
from stockdata.context import PluginContext, require_api_key
from stockdata.exceptions import EmptyResultError
from stockdata.tools.formatting import (
    format_currency,
    format_large_number,
    optional_number,
    round_half_up,
    short_date,
    short_datetime,
    signed_money,
    signed_percent,
    truncate,
)
from stockdata.tools.schemas import (
    CandlesInput,
    NewsInput,
    QuoteInput,
    QuotesInput,
    SearchInput,
    SymbolInput,
)

SEARCH_TYPES = frozenset({"Common Stock", "ETP", "ETF", "REIT", "ADR"})
MAX_SEARCH_RESULTS = 10
RAW_SEARCH_RESULTS = 5
MAX_PEERS = 8
CANDLE_TAIL = 5
NEWS_LOOKBACK_DAYS = 7
SUMMARY_LIMIT = 200
SECONDS_PER_DAY = 86_400


def _has_quote(quote: Any) -> bool:
    return isinstance(quote, dict) and bool(quote.get("c") or quote.get("o"))


def _quote_summary(symbol: str, quote: dict[str, Any]) -> str:
    return f"{symbol}: ${format_currency(quote['c'])} ({signed_percent(quote.get('dp') or 0)})"


class StockTools:
    """The eight stock tools, bound to one client and one host context.

    Args:
        client: Caching upstream client shared with the REST routes.
        ctx: Host context used for the API key and logging.
        now: Wall-clock source in UNIX seconds, injectable for tests.
    """

    def __init__(
        self,
        client: CachedClient,
        ctx: PluginContext,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._ctx = ctx
        self._now = now

    # ------------------------------------------------------------------ #
    # Quotes
    # ------------------------------------------------------------------ #

    async def quote(self, params: QuoteInput) -> str:
        symbol = params.symbol
        quote = await self._client.get("/quote", require_api_key(self._ctx), {"symbol": symbol})
        if not _has_quote(quote):
            raise EmptyResultError(
                f'No data found for symbol "{symbol}". Check the ticker and try again.'
            )

        lines = [
            f"{symbol}: ${format_currency(quote['c'])}",
            f"Change: {signed_money(quote.get('d') or 0)} ({signed_percent(quote.get('dp') or 0)})",
            f"Open: ${format_currency(quote.get('o') or 0)}  |  "
            f"Prev Close: ${format_currency(quote.get('pc') or 0)}",
            f"High: ${format_currency(quote.get('h') or 0)}  |  "
            f"Low: ${format_currency(quote.get('l') or 0)}",
        ]
        return "\n".join(lines)

    async def quotes(self, params: QuotesInput) -> str:
        api_key = require_api_key(self._ctx)

        def render(symbol: str, quote: dict[str, Any]) -> str:
            if not _has_quote(quote):
                return f"{symbol}: No data"
            return _quote_summary(symbol, quote)

        lines = await self._gather_lines(
            params.symbols,
            lambda symbol: self._client.get("/quote", api_key, {"symbol": symbol}),
            render,
            "Error fetching",
        )
        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # Reference data
    # ------------------------------------------------------------------ #

    async def search(self, params: SearchInput) -> str:
        query = params.query
        data = await self._client.get("/search", require_api_key(self._ctx), {"q": query})
        results = (data or {}).get("result") or []
        if not results:
            raise EmptyResultError(f'No results for "{query}".')

        filtered = [r for r in results if not r.get("type") or r.get("type") in SEARCH_TYPES]
        filtered = filtered[:MAX_SEARCH_RESULTS]

        if not filtered:
            raw = "\n".join(
                f"{r.get('symbol')} - {r.get('description')} ({r.get('type')})"
                for r in results[:RAW_SEARCH_RESULTS]
            )
            return f"Found results but none were common stocks/ETFs. Raw results:\n{raw}"

        lines = []
        for r in filtered:
            kind = f" ({r['type']})" if r.get("type") else ""
            lines.append(f"{r.get('symbol')} - {r.get('description')}{kind}")
        return f'Search results for "{query}":\n' + "\n".join(lines)

    async def company_profile(self, params: SymbolInput) -> str:
        symbol = params.symbol
        profile = await self._client.get(
            "/stock/profile2", require_api_key(self._ctx), {"symbol": symbol}
        )
        if not isinstance(profile, dict) or not profile.get("name"):
            raise EmptyResultError(f'No company profile found for "{symbol}".')

        def text(key: str) -> str:
            return profile.get(key) or "N/A"

        lines = [
            f"{profile['name']} ({profile.get('ticker') or symbol})",
            f"Industry: {text('finnhubIndustry')}",
            f"Exchange: {text('exchange')}",
            f"Market Cap: {optional_number(profile.get('marketCapitalization'), '$', scale=1e6, large=True)}",
            f"Shares Outstanding: {optional_number(profile.get('shareOutstanding'), scale=1e6, large=True)}",
            f"IPO Date: {text('ipo')}",
            f"Country: {text('country')}",
            f"Currency: {text('currency')}",
            f"Website: {text('weburl')}",
        ]
        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # History
    # ------------------------------------------------------------------ #

    async def candles(self, params: CandlesInput) -> str:
        symbol, resolution, days = params.symbol, params.resolution, params.days
        to_ts = int(self._now())
        from_ts = to_ts - days * SECONDS_PER_DAY

        data = await self._client.get(
            "/stock/candle",
            require_api_key(self._ctx),
            {"symbol": symbol, "resolution": resolution, "from": str(from_ts), "to": str(to_ts)},
        )
        data = data or {}
        closes = data.get("c") or []
        if data.get("s") != "ok" or not closes:
            raise EmptyResultError(
                f'No candle data for "{symbol}" with resolution {resolution} over {days} days.'
            )

        highs, lows = data.get("h") or [], data.get("l") or []
        opens, volumes, stamps = data.get("o") or [], data.get("v") or [], data.get("t") or []

        count = len(closes)
        latest, earliest = closes[-1], closes[0]
        period_return = (latest - earliest) / earliest * 100 if earliest else 0.0
        avg_volume = sum(volumes) / len(volumes) if volumes else 0

        lines = [
            f"{symbol} - {count} candles ({resolution} resolution, {days} days)",
            "",
            f"Latest Close: ${format_currency(latest)}",
            f"Period Start: ${format_currency(earliest)}",
            f"Period Return: {signed_percent(period_return)}",
            f"Period High: ${format_currency(max(highs or closes))}",
            f"Period Low: ${format_currency(min(lows or closes))}",
            f"Avg Volume: {format_large_number(round_half_up(avg_volume))}",
        ]

        tail = min(CANDLE_TAIL, count)
        lines.extend(["", f"Last {tail} data points:"])
        for i in range(count - tail, count):
            lines.append(
                f"  {short_date(stamps[i])}: O ${format_currency(opens[i])} "
                f"H ${format_currency(highs[i])} L ${format_currency(lows[i])} "
                f"C ${format_currency(closes[i])} V {format_large_number(volumes[i])}"
            )
        return "\n".join(lines)

    async def news(self, params: NewsInput) -> str:
        symbol, limit = params.symbol, params.limit
        api_key = require_api_key(self._ctx)

        if symbol:
            today = datetime.fromtimestamp(self._now(), tz=timezone.utc).date()
            start = today - timedelta(days=NEWS_LOOKBACK_DAYS)
            articles = await self._client.get(
                "/company-news",
                api_key,
                {"symbol": symbol, "from": start.isoformat(), "to": today.isoformat()},
            )
        else:
            articles = await self._client.get("/news", api_key, {"category": "general"})

        if not articles:
            return f"No recent news for {symbol}." if symbol else "No market news available."

        lines = [f"News for {symbol}:" if symbol else "Market News:"]
        for article in articles[:limit]:
            lines.append("")
            lines.append(f"[{short_datetime(article.get('datetime') or 0)}] {article.get('headline')}")
            if article.get("summary"):
                lines.append(f"  {truncate(article['summary'], SUMMARY_LIMIT)}")
            lines.append(f"  Source: {article.get('source')} | {article.get('url')}")
        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # Comparison
    # ------------------------------------------------------------------ #

    async def peers(self, params: SymbolInput) -> str:
        symbol = params.symbol
        api_key = require_api_key(self._ctx)
        peers = await self._client.get(
            "/stock/peers", api_key, {"symbol": symbol, "grouping": "industry"}
        )
        if not peers:
            raise EmptyResultError(f'No peers found for "{symbol}".')

        top = [p for p in peers if p != symbol][:MAX_PEERS]

        def render(peer: str, quote: dict[str, Any]) -> str:
            if not isinstance(quote, dict) or not quote.get("c"):
                return f"{peer}: No data"
            return _quote_summary(peer, quote)

        lines = await self._gather_lines(
            top,
            lambda peer: self._client.get("/quote", api_key, {"symbol": peer}),
            render,
            "Error",
        )
        return f"Peers of {symbol}:\n" + "\n".join(lines)

    async def metrics(self, params: SymbolInput) -> str:
        symbol = params.symbol
        data = await self._client.get(
            "/stock/metric", require_api_key(self._ctx), {"symbol": symbol, "metric": "all"}
        )
        m = (data or {}).get("metric") or {}
        if not m:
            raise EmptyResultError(f'No metrics found for "{symbol}".')

        lines = [
            f"Key Metrics for {symbol}:",
            "",
            f"52-Week High: {optional_number(m.get('52WeekHigh'), '$')}",
            f"52-Week Low: {optional_number(m.get('52WeekLow'), '$')}",
            f"52-Week Return: {optional_number(m.get('52WeekPriceReturnDaily'), suffix='%')}",
            "",
            f"P/E (TTM): {optional_number(m.get('peTTM'), decimals=2)}",
            f"P/B (Quarterly): {optional_number(m.get('pbQuarterly'), decimals=2)}",
            f"EPS (TTM): {optional_number(m.get('epsTTM'), '$')}",
            "",
            f"Beta: {optional_number(m.get('beta'), decimals=3)}",
            f"Dividend Yield: {optional_number(m.get('dividendYieldIndicatedAnnual'), suffix='%', decimals=2)}",
            f"Dividend Per Share: {optional_number(m.get('dividendPerShareAnnual'), '$')}",
            "",
            f"Market Cap: {optional_number(m.get('marketCapitalization'), '$', scale=1e6, large=True)}",
            f"Revenue (TTM): {optional_number(m.get('revenueTTM'), '$', scale=1e6, large=True)}",
            f"Net Income (TTM): {optional_number(m.get('netIncomeTTM'), '$', scale=1e6, large=True)}",
            f"ROE (TTM): {optional_number(m.get('roeTTM'), suffix='%', decimals=2)}",
        ]
        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _gather_lines(
        self,
        symbols: list[str],
        fetch: Callable[[str], Awaitable[Any]],
        render: Callable[[str, Any], str],
        failure: str,
    ) -> list[str]:
        """Fetch every symbol concurrently and render one line each, in input order.

        A symbol whose fetch or rendering fails becomes ``"<symbol>: <failure>"``
        without affecting the others.
        """
        results = await asyncio.gather(*(fetch(s) for s in symbols), return_exceptions=True)
        lines: list[str] = []
        for symbol, result in zip(symbols, results):
            if isinstance(result, Exception):
                self._ctx.log.warning("Fetching %s failed: %s", symbol, result)
                lines.append(f"{symbol}: {failure}")
            elif isinstance(result, BaseException):
                raise result
            else:
                try:
                    lines.append(render(symbol, result))
                except Exception as exc:
                    self._ctx.log.warning("Formatting %s failed: %s", symbol, exc)
                    lines.append(f"{symbol}: {failure}")
        return lines


ToolHandler = Callable[[Any], Awaitable[str]]
"""Signature shared by every :class:`StockTools` coroutine method."""
