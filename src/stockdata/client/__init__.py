"""HTTP client module for stockdata.

Provides the upstream client and its caching wrapper:

    :class:`FinnhubClient` -- one authenticated GET per call, backed by
    :class:`httpx.AsyncClient`, with typed errors and no retry.
    :class:`CachedClient` -- consults a
    :class:`~stockdata.cache.ResponseCache` before delegating to
    :class:`FinnhubClient`.

Example::

    from stockdata.cache import ResponseCache
    from stockdata.client import CachedClient, FinnhubClient

    async with FinnhubClient() as upstream:
        client = CachedClient(upstream, ResponseCache(ttl_seconds=15))
        quote = await client.get("/quote", api_key, {"symbol": "AAPL"})
"""

from stockdata.client.async_client import FinnhubClient
from stockdata.client.cached import CachedClient

__all__ = ["FinnhubClient", "CachedClient"]
