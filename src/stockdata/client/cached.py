"""Caching wrapper that sits between handlers and :class:`FinnhubClient`.

:class:`CachedClient` exposes the same ``get(path, api_key, params)`` call as
the raw client. A live cache entry is returned without touching the network;
on a miss the upstream client is awaited and, only if it succeeds, the
payload is stored for the cache's TTL. Errors propagate unchanged and leave
the cache untouched.

Two concurrent misses on the same key both reach the upstream; the later
write replaces the earlier one.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from stockdata.cache import ResponseCache
from stockdata.client.async_client import FinnhubClient

logger = logging.getLogger(__name__)


class CachedClient:
    """Serve recent identical upstream requests from a :class:`ResponseCache`.

    Args:
        client: The upstream client to delegate misses to.
        cache: The shared response cache.
    """

    def __init__(self, client: FinnhubClient, cache: ResponseCache) -> None:
        self._client = client
        self._cache = cache

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def get(
        self,
        path: str,
        api_key: str,
        params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Return the payload for ``path`` + ``params``, from cache when live.

        The API key is not part of the cache key.

        Raises:
            UpstreamError: Propagated from the upstream client on a miss.
            TransportError: Propagated from the upstream client on a miss.
        """
        cached = self._cache.get(path, params)
        if cached is not None:
            logger.debug("Cache hit: %s", path)
            return cached

        data = await self._client.get(path, api_key, params)
        self._cache.set(path, params, data)
        return data
