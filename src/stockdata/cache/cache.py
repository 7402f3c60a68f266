"""In-memory, time-boxed cache for upstream responses.

Entries are keyed by endpoint path plus the query parameters and expire a
fixed number of seconds after they were stored. Expired entries are treated
as absent and dropped lazily by the lookup that notices them; the whole
store is dropped by :meth:`ResponseCache.clear` when the plugin deactivates.
Nothing is persisted.

Cache keys are ``path?{sorted JSON params}`` so that identical requests
always resolve to the same entry regardless of the order the parameters
were supplied in.

See Also:
    :class:`~stockdata.models.CacheConfig` -- holds ``ttl_seconds``.
    :class:`~stockdata.client.CachedClient` -- the wrapper that consults
    this cache before calling the upstream client.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from stockdata.models import DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """One stored upstream payload.

    Attributes:
        key: The derived cache key.
        value: The decoded response payload, stored as-is.
        expires_at: Clock reading after which the entry is no longer servable.
    """

    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class ResponseCache:
    """Thread-safe TTL cache for decoded upstream responses.

    Only successful responses ever reach :meth:`set`; the cache itself never
    inspects payloads. Concurrent writers to the same key are serialised by
    a lock and the last write wins.

    Args:
        ttl_seconds: Lifetime shared by every entry.
        clock: Monotonic time source, injectable for tests.

    Example::

        cache = ResponseCache(ttl_seconds=15)
        cache.set("/quote", {"symbol": "AAPL"}, {"c": 150.0})
        hit = cache.get("/quote", {"symbol": "AAPL"})
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @staticmethod
    def make_key(path: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Derive the cache key for an endpoint path and its query parameters.

        Parameter names are sorted before serialisation, so two mappings with
        the same items always produce the same key.
        """
        encoded = json.dumps(dict(params or {}), sort_keys=True, separators=(",", ":"))
        return f"{path}?{encoded}"

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Optional[Any]:
        """Look up a live entry.

        Args:
            path: Endpoint path, e.g. ``"/quote"``.
            params: Query parameters used to form the key.

        Returns:
            The stored payload on a hit, or ``None`` on a miss. An entry whose
            expiry has passed counts as a miss and is evicted.
        """
        key = self.make_key(path, params)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache entry expired: %s", key)
                return None
            self._hits += 1
            return entry.value

    def set(self, path: str, params: Optional[Mapping[str, Any]], value: Any) -> None:
        """Store *value*, replacing any existing entry for the same key.

        Args:
            path: Endpoint path.
            params: Query parameters used to form the key.
            value: The decoded payload of a successful upstream call.
        """
        key = self.make_key(path, params)
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + self._ttl)
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, path: str, params: Optional[Mapping[str, Any]] = None) -> None:
        """Remove a specific entry if present."""
        key = self.make_key(path, params)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return cache statistics.

        Returns:
            A ``dict`` with ``size`` (stored entries, expired ones included
            until a lookup evicts them), ``ttl_seconds``, ``hits`` and
            ``misses``.
        """
        with self._lock:
            return {
                "size": len(self._entries),
                "ttl_seconds": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
