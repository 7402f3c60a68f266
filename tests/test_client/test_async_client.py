"""Tests for the asynchronous Finnhub client."""

from __future__ import annotations

import httpx
import pytest

from stockdata.client import FinnhubClient
from stockdata.exceptions import TransportError, UpstreamError
from stockdata.exit_codes import EXIT_TRANSPORT_ERROR, EXIT_UPSTREAM_ERROR
from stockdata.models import RequestConfig


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    @pytest.mark.asyncio
    async def test_enter_creates_client(self) -> None:
        client = FinnhubClient()
        assert client._client is None
        async with client:
            assert client._client is not None
        assert client._client is None

    @pytest.mark.asyncio
    async def test_aclose_is_idempotent(self) -> None:
        client = FinnhubClient()
        await client.aclose()
        await client.aclose()
        assert client._client is None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestGet:
    @pytest.mark.asyncio
    async def test_sends_token_and_params(self, finnhub) -> None:
        finnhub.on("/quote", {"c": 150.0})
        async with FinnhubClient(transport=finnhub.transport) as client:
            data = await client.get("/quote", "secret", {"symbol": "AAPL"})

        assert data == {"c": 150.0}
        request = finnhub.requests[0]
        assert request.method == "GET"
        assert request.url.host == "finnhub.io"
        assert request.url.path == "/api/v1/quote"
        assert finnhub.params() == {"token": "secret", "symbol": "AAPL"}

    @pytest.mark.asyncio
    async def test_custom_base_url(self) -> None:
        seen: list[httpx.URL] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url)
            return httpx.Response(200, json=[])

        config = RequestConfig(base_url="http://localhost:9999/v2")
        async with FinnhubClient(config, transport=httpx.MockTransport(handler)) as client:
            await client.get("/news", "k", {"category": "general"})

        assert str(seen[0]).startswith("http://localhost:9999/v2/news?")

    @pytest.mark.asyncio
    async def test_list_payload(self, finnhub) -> None:
        finnhub.on("/stock/peers", ["AAPL", "MSFT"])
        async with FinnhubClient(transport=finnhub.transport) as client:
            assert await client.get("/stock/peers", "k", {"symbol": "AAPL"}) == ["AAPL", "MSFT"]

    @pytest.mark.asyncio
    async def test_single_attempt(self, finnhub) -> None:
        finnhub.on("/quote", "boom", status=500)
        async with FinnhubClient(transport=finnhub.transport) as client:
            with pytest.raises(UpstreamError):
                await client.get("/quote", "k", {"symbol": "AAPL"})
        assert finnhub.calls() == 1


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.asyncio
    async def test_non_success_status(self, finnhub) -> None:
        finnhub.on("/quote", "API limit reached", status=429)
        async with FinnhubClient(transport=finnhub.transport) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get("/quote", "k", {"symbol": "AAPL"})

        exc = exc_info.value
        assert exc.status_code == 429
        assert exc.body == "API limit reached"
        assert str(exc) == "Finnhub 429: API limit reached"
        assert exc.exit_code == EXIT_UPSTREAM_ERROR

    @pytest.mark.asyncio
    async def test_unauthorized(self, finnhub) -> None:
        finnhub.on("/quote", "Invalid API key", status=401)
        async with FinnhubClient(transport=finnhub.transport) as client:
            with pytest.raises(UpstreamError, match="Finnhub 401"):
                await client.get("/quote", "bad", {"symbol": "AAPL"})

    @pytest.mark.asyncio
    async def test_unrouted_path_is_upstream_error(self, finnhub) -> None:
        async with FinnhubClient(transport=finnhub.transport) as client:
            with pytest.raises(UpstreamError) as exc_info:
                await client.get("/nope", "k")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_connection_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with FinnhubClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.get("/quote", "k", {"symbol": "AAPL"})

        assert str(exc_info.value).startswith("Finnhub request failed:")
        assert "connection refused" in str(exc_info.value)
        assert exc_info.value.exit_code == EXIT_TRANSPORT_ERROR

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with FinnhubClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(TransportError, match="timed out"):
                await client.get("/quote", "k", {"symbol": "AAPL"})

    @pytest.mark.asyncio
    async def test_invalid_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        async with FinnhubClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(UpstreamError, match="invalid JSON body"):
                await client.get("/quote", "k", {"symbol": "AAPL"})
