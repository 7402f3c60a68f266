"""In-memory response caching for stockdata.

This package provides :class:`ResponseCache`, a TTL cache that keeps
recently fetched upstream payloads in memory so that identical lookups
within the TTL window do not reach the provider again. Entries are keyed by
endpoint path and sorted query parameters.

The cache is owned by :class:`~stockdata.plugin.StockDataPlugin`, consulted
through :class:`~stockdata.client.CachedClient`, and cleared on deactivation.
"""

from stockdata.cache.cache import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache"]
