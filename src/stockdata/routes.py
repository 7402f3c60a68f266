"""REST facade: two read-only routes on a FastAPI :class:`~fastapi.APIRouter`.

* ``GET /quote/{symbol}`` -- the upper-cased symbol merged with the raw quote.
* ``GET /search/{query}`` -- the raw search payload.

Failures never change the HTTP status: the body becomes ``{"error": msg}``.
Both routes go through the same :class:`~stockdata.client.CachedClient` as
the tools, so a quote fetched by either surface is served to the other from
cache.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from stockdata.client import CachedClient
from stockdata.context import PluginContext, require_api_key
from stockdata.exceptions import StockDataError


def build_router(client: CachedClient, ctx: PluginContext) -> APIRouter:
    """Create the plugin's router. The host decides the mount prefix."""
    router = APIRouter(tags=["stock-data"])

    @router.get("/quote/{symbol}")
    async def get_quote(symbol: str) -> dict[str, Any]:
        symbol = symbol.upper()
        try:
            quote = await client.get("/quote", require_api_key(ctx), {"symbol": symbol})
            return {"symbol": symbol, **quote}
        except StockDataError as exc:
            return {"error": str(exc)}
        except Exception as exc:
            ctx.log.exception("Unexpected error in GET /quote/%s", symbol)
            return {"error": str(exc) or type(exc).__name__}

    @router.get("/search/{query}")
    async def search(query: str) -> Any:
        try:
            return await client.get("/search", require_api_key(ctx), {"q": query})
        except StockDataError as exc:
            return {"error": str(exc)}
        except Exception as exc:
            ctx.log.exception("Unexpected error in GET /search/%s", query)
            return {"error": str(exc) or type(exc).__name__}

    return router
