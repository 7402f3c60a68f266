"""Tests for CachedClient: hit/miss behaviour and failure handling."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from stockdata.cache import ResponseCache
from stockdata.client import CachedClient, FinnhubClient
from stockdata.exceptions import TransportError, UpstreamError


@pytest.fixture()
def cache(fake_clock):
    return ResponseCache(ttl_seconds=15, clock=fake_clock)


def _cached(finnhub, cache: ResponseCache) -> CachedClient:
    return CachedClient(FinnhubClient(transport=finnhub.transport), cache)


class TestCaching:
    @pytest.mark.asyncio
    async def test_second_call_within_ttl_hits_cache(self, finnhub, cache, fake_clock) -> None:
        finnhub.on("/quote", {"c": 150.0, "o": 149.0})
        client = _cached(finnhub, cache)

        first = await client.get("/quote", "k", {"symbol": "AAPL"})
        fake_clock.advance(10)
        second = await client.get("/quote", "k", {"symbol": "AAPL"})

        assert first == second == {"c": 150.0, "o": 149.0}
        assert finnhub.calls("/quote") == 1

    @pytest.mark.asyncio
    async def test_refetches_after_ttl(self, finnhub, cache, fake_clock) -> None:
        finnhub.on("/quote", {"c": 150.0})
        client = _cached(finnhub, cache)

        await client.get("/quote", "k", {"symbol": "AAPL"})
        fake_clock.advance(16)
        await client.get("/quote", "k", {"symbol": "AAPL"})

        assert finnhub.calls("/quote") == 2

    @pytest.mark.asyncio
    async def test_param_order_shares_entry(self, finnhub, cache) -> None:
        finnhub.on("/stock/peers", ["MSFT"])
        client = _cached(finnhub, cache)

        await client.get("/stock/peers", "k", {"symbol": "AAPL", "grouping": "industry"})
        await client.get("/stock/peers", "k", {"grouping": "industry", "symbol": "AAPL"})

        assert finnhub.calls() == 1

    @pytest.mark.asyncio
    async def test_api_key_not_part_of_key(self, finnhub, cache) -> None:
        finnhub.on("/quote", {"c": 1.0})
        client = _cached(finnhub, cache)

        await client.get("/quote", "key-one", {"symbol": "AAPL"})
        await client.get("/quote", "key-two", {"symbol": "AAPL"})

        assert finnhub.calls() == 1

    @pytest.mark.asyncio
    async def test_distinct_params_miss(self, finnhub, cache) -> None:
        finnhub.on("/quote", {"c": 1.0})
        client = _cached(finnhub, cache)

        await client.get("/quote", "k", {"symbol": "AAPL"})
        await client.get("/quote", "k", {"symbol": "MSFT"})

        assert finnhub.calls() == 2

    @pytest.mark.asyncio
    async def test_concurrent_misses_both_fetch(self, finnhub, cache) -> None:
        async def slow(request: httpx.Request) -> dict:
            await asyncio.sleep(0.01)
            return {"c": 1.0}

        finnhub.on("/quote", handler=slow)
        client = _cached(finnhub, cache)

        await asyncio.gather(
            client.get("/quote", "k", {"symbol": "AAPL"}),
            client.get("/quote", "k", {"symbol": "AAPL"}),
        )

        assert finnhub.calls() == 2
        assert len(cache) == 1


class TestFailuresNotCached:
    @pytest.mark.asyncio
    async def test_upstream_error_not_cached(self, finnhub, cache) -> None:
        finnhub.on("/quote", "rate limited", status=429)
        client = _cached(finnhub, cache)

        with pytest.raises(UpstreamError):
            await client.get("/quote", "k", {"symbol": "AAPL"})
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_retry_after_failure_calls_upstream(self, finnhub, cache) -> None:
        finnhub.on("/quote", "rate limited", status=429)
        client = _cached(finnhub, cache)
        with pytest.raises(UpstreamError):
            await client.get("/quote", "k", {"symbol": "AAPL"})

        finnhub.on("/quote", {"c": 150.0})
        assert await client.get("/quote", "k", {"symbol": "AAPL"}) == {"c": 150.0}
        assert finnhub.calls() == 2

    @pytest.mark.asyncio
    async def test_transport_error_not_cached(self, finnhub, cache) -> None:
        def fail(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        finnhub.on("/quote", handler=fail)
        client = _cached(finnhub, cache)

        with pytest.raises(TransportError):
            await client.get("/quote", "k", {"symbol": "AAPL"})
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_null_payload_not_served_from_cache(self, finnhub, cache) -> None:
        finnhub.on("/quote", None)
        client = _cached(finnhub, cache)

        assert await client.get("/quote", "k", {"symbol": "AAPL"}) is None
        assert await client.get("/quote", "k", {"symbol": "AAPL"}) is None
        assert finnhub.calls() == 2
