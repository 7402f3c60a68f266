"""Shared test fixtures for stockdata.

Provides a scripted fake of the Finnhub API (served through
:class:`httpx.MockTransport`), a host context with in-memory settings,
isolated config directories, output-state management, and a CLI runner.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from stockdata.cache import ResponseCache
from stockdata.client import CachedClient, FinnhubClient
from stockdata.config import API_KEY_ENV_VARS
from stockdata.context import PluginContext
from stockdata.output import OutputFormat, OutputManager, reset_output, set_output
from stockdata.tools import StockTools, ToolRegistry, build_registry

API_PREFIX = "/api/v1"
TEST_API_KEY = "test-key"
FIXED_NOW = 1_700_000_000.0
"""2023-11-14 22:13:20 UTC."""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake Finnhub upstream
# ---------------------------------------------------------------------------


class FakeFinnhub:
    """Scripted Finnhub API behind an :class:`httpx.MockTransport`.

    Routes are registered per endpoint path (without the ``/api/v1``
    prefix). A route is either a fixed payload or a handler taking the
    :class:`httpx.Request`; handlers may be coroutines and may return a
    payload or a ready-made :class:`httpx.Response`. Unrouted paths answer
    404. Every request is recorded in :attr:`requests`.
    """

    def __init__(self) -> None:
        self._routes: dict[str, Callable[[httpx.Request], Any]] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        path: str,
        payload: Any = None,
        status: int = 200,
        handler: Optional[Callable[[httpx.Request], Any]] = None,
    ) -> None:
        if handler is None:
            if status == 200:
                handler = lambda request: payload  # noqa: E731
            else:
                body = payload if isinstance(payload, str) else ""
                handler = lambda request: httpx.Response(status, text=body)  # noqa: E731
        self._routes[path] = handler

    def calls(self, path: Optional[str] = None) -> int:
        if path is None:
            return len(self.requests)
        return sum(1 for r in self.requests if _endpoint(r) == path)

    def params(self, index: int = -1) -> dict[str, str]:
        return dict(self.requests[index].url.params)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get(_endpoint(request))
        if handler is None:
            return httpx.Response(404, text="no route")
        result = handler(request)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(
            200,
            content=json.dumps(result).encode(),
            headers={"content-type": "application/json"},
        )


def _endpoint(request: httpx.Request) -> str:
    path = request.url.path
    if path.startswith(API_PREFIX):
        return path[len(API_PREFIX):]
    return path


@pytest.fixture
def finnhub() -> FakeFinnhub:
    return FakeFinnhub()


# ---------------------------------------------------------------------------
# Host context
# ---------------------------------------------------------------------------


class FakeContext(PluginContext):
    """Host context whose settings are a plain dict."""

    def __init__(self, settings: Optional[dict[str, Any]] = None, name: str = "stock-data") -> None:
        self.settings = dict(settings or {})
        self._name = name

    @property
    def plugin_name(self) -> str:
        return self._name

    def get_setting(self, key: str) -> Optional[Any]:
        return self.settings.get(key)


@pytest.fixture
def ctx() -> FakeContext:
    """Context with a configured API key."""
    return FakeContext({"finnhub_api_key": TEST_API_KEY})


@pytest.fixture
def keyless_ctx() -> FakeContext:
    """Context with no API key."""
    return FakeContext()


# ---------------------------------------------------------------------------
# Tool wiring
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class ToolEnv:
    registry: ToolRegistry
    cache: ResponseCache
    clock: FakeClock
    finnhub: FakeFinnhub
    ctx: FakeContext


def make_env(finnhub: FakeFinnhub, ctx: FakeContext) -> ToolEnv:
    clock = FakeClock()
    cache = ResponseCache(15, clock=clock)
    client = CachedClient(FinnhubClient(transport=finnhub.transport), cache)
    tools = StockTools(client, ctx, now=lambda: FIXED_NOW)
    return ToolEnv(build_registry(tools), cache, clock, finnhub, ctx)


@pytest.fixture
def env(finnhub: FakeFinnhub, ctx: FakeContext) -> ToolEnv:
    """Registry of all eight tools wired to the fake upstream."""
    return make_env(finnhub, ctx)


@pytest.fixture
def keyless_env(finnhub: FakeFinnhub, keyless_ctx: FakeContext) -> ToolEnv:
    """Same wiring, but the host has no API key configured."""
    return make_env(finnhub, keyless_ctx)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, forces the XDG layout, and
    clears the API key environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("stockdata.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in API_KEY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
