"""stockdata -- Finnhub market data exposed as agent tools and a REST facade.

This package wraps the Finnhub HTTP API (quotes, symbol search, company
profiles, historical candles, news, peers, and basic financials) behind two
uniform surfaces:

* a *tool* interface -- named tools with a JSON-schema input that return a
  structured text result flagged as success or error;
* a small REST facade built on FastAPI.

Both surfaces share one short-lived in-memory response cache so that bursts
of identical lookups stay under the provider's rate limit.

Typical workflow::

    stockdata config set settings.finnhub_api_key <key>
    stockdata quote AAPL
    stockdata serve --port 8000

Modules:
    app: Typer application and CLI entry point.
    plugin: Plugin lifecycle (``activate`` / ``deactivate``).
    context: Host capabilities injected into the plugin.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and API-key resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
