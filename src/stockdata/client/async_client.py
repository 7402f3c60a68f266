"""Asynchronous Finnhub HTTP client.

This module provides :class:`FinnhubClient`, a thin wrapper around
:class:`httpx.AsyncClient` that performs exactly one authenticated GET per
call, decodes the JSON body, and maps failures onto the stockdata
exception hierarchy:

- a non-2xx status raises :class:`~stockdata.exceptions.UpstreamError`
  carrying the status code and raw body;
- any :class:`httpx.TransportError` (DNS, connect, read timeout, ...) raises
  :class:`~stockdata.exceptions.TransportError`.

There is no retry and no backoff: a failed attempt is surfaced to the caller
immediately. Callers normally go through
:class:`~stockdata.client.cached.CachedClient` rather than using this class
directly.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import httpx

from stockdata.exceptions import TransportError, UpstreamError
from stockdata.models import RequestConfig

logger = logging.getLogger(__name__)

TOKEN_PARAM = "token"
"""Query parameter Finnhub reads the API key from."""


class FinnhubClient:
    """Asynchronous client for the Finnhub REST API.

    The underlying :class:`httpx.AsyncClient` is created lazily on the first
    request (or on entering the async context manager) and released by
    :meth:`aclose`.

    Args:
        config: Base URL and timeout. Defaults to :class:`RequestConfig()`.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        async with FinnhubClient() as client:
            quote = await client.get("/quote", api_key, {"symbol": "AAPL"})
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> FinnhubClient:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client. Safe to call more than once."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request method
    # ------------------------------------------------------------------ #

    async def get(
        self,
        path: str,
        api_key: str,
        params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        """Fetch one endpoint and return its decoded JSON body.

        Args:
            path: Endpoint path appended to the base URL, e.g. ``"/quote"``.
            api_key: Finnhub token, sent as the ``token`` query parameter.
            params: Additional query parameters.

        Returns:
            The decoded JSON payload (``dict``, ``list``, ...).

        Raises:
            UpstreamError: On a non-2xx status, or a body that is not JSON.
            TransportError: When the request cannot be completed.
        """
        client = self._ensure_client()
        query: dict[str, str] = {TOKEN_PARAM: api_key}
        query.update(params or {})

        logger.debug("GET %s %s", path, sorted(k for k in query if k != TOKEN_PARAM))
        try:
            response = await client.get(path, params=query)
        except httpx.TransportError as exc:
            raise TransportError(f"Finnhub request failed: {exc}") from exc

        if not response.is_success:
            raise UpstreamError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                response.status_code, f"invalid JSON body: {response.text[:200]}"
            ) from exc

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: dict[str, Any] = {
                "base_url": self._config.base_url,
                "timeout": self._config.timeout_seconds,
                "headers": {"Accept": "application/json"},
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client
