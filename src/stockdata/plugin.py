"""Plugin lifecycle: construct, inject, and tear down the shared components.

:class:`StockDataPlugin` is what a host loads. Its lifecycle is:

1. Instantiation -- no I/O; optional cache/request settings.
2. :meth:`~StockDataPlugin.activate` -- called once with a
   :class:`~stockdata.context.PluginContext`. Builds the
   :class:`~stockdata.cache.ResponseCache`, the upstream
   :class:`~stockdata.client.FinnhubClient`, the caching wrapper, and the
   tool registry and router that share them.
3. Tool and route calls -- zero or more.
4. :meth:`~StockDataPlugin.deactivate` -- clears the cache and closes the
   HTTP client.

Nothing is module-level: two plugin instances own two independent caches.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
from fastapi import APIRouter

from stockdata import __version__
from stockdata.cache import ResponseCache
from stockdata.client import CachedClient, FinnhubClient
from stockdata.context import PluginContext
from stockdata.exceptions import StockDataError
from stockdata.models import CacheConfig, RequestConfig
from stockdata.routes import build_router
from stockdata.tools import StockTools, ToolRegistry, build_registry


@dataclass
class PluginRegistrations:
    """What the plugin hands back to its host on activation.

    Attributes:
        tools: Registry of the eight stock tools.
        router: REST routes, to be mounted under a plugin-specific prefix.
    """

    tools: ToolRegistry
    router: APIRouter


class StockDataPlugin:
    """Finnhub stock data plugin.

    Args:
        cache_config: TTL for the response cache.
        request_config: Upstream base URL and timeout.
        transport: Optional httpx transport for the upstream client.
        clock: Monotonic clock for cache expiry.
        now: Wall clock (UNIX seconds) for date-ranged requests.

    Example::

        plugin = StockDataPlugin()
        registrations = plugin.activate(LocalContext(load_config()))
        result = await registrations.tools.invoke("stock_quote", {"symbol": "AAPL"})
        await plugin.deactivate()
    """

    name = "stock-data"
    version = __version__
    description = "Live stock quotes, ETF data, company profiles, candles, and market news via Finnhub."

    def __init__(
        self,
        cache_config: Optional[CacheConfig] = None,
        request_config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._cache_config = cache_config or CacheConfig()
        self._request_config = request_config or RequestConfig()
        self._transport = transport
        self._clock = clock
        self._now = now
        self._cache: Optional[ResponseCache] = None
        self._upstream: Optional[FinnhubClient] = None
        self._registrations: Optional[PluginRegistrations] = None

    @property
    def is_active(self) -> bool:
        return self._registrations is not None

    @property
    def cache(self) -> Optional[ResponseCache]:
        """The live cache while active, ``None`` otherwise."""
        return self._cache

    def activate(self, ctx: PluginContext) -> PluginRegistrations:
        """Build the cache, clients, tools, and routes for *ctx*.

        Raises:
            StockDataError: If the plugin is already active.
        """
        if self._registrations is not None:
            raise StockDataError(f"Plugin '{self.name}' is already active")

        ctx.log.info("Activating %s plugin v%s", self.name, self.version)
        self._cache = ResponseCache(self._cache_config.ttl_seconds, clock=self._clock)
        self._upstream = FinnhubClient(self._request_config, transport=self._transport)
        client = CachedClient(self._upstream, self._cache)

        self._registrations = PluginRegistrations(
            tools=build_registry(StockTools(client, ctx, now=self._now)),
            router=build_router(client, ctx),
        )
        return self._registrations

    async def deactivate(self) -> None:
        """Drop every cached entry and release the HTTP client. Idempotent."""
        if self._cache is not None:
            self._cache.clear()
        if self._upstream is not None:
            await self._upstream.aclose()
        self._cache = None
        self._upstream = None
        self._registrations = None
