"""Typer application and CLI entry point for stockdata.

This module wires together the top-level Typer application: the ``tools``
and ``call`` commands that drive the tool registry, one shortcut command per
stock tool, ``serve`` for the REST facade, and the ``config`` sub-group.

Every tool command runs a full plugin lifecycle: the config file is loaded,
a :class:`~stockdata.context.LocalContext` is built from it, the plugin is
activated, the tool is invoked, and the plugin is deactivated again.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`stockdata.config`: Config file and API key resolution.
    :mod:`stockdata.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import typer

from stockdata import __version__
from stockdata.exit_codes import EXIT_CONFIG_ERROR, EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE

if TYPE_CHECKING:
    from stockdata.context import PluginContext
    from stockdata.models import StockDataConfig, ToolResult
    from stockdata.plugin import StockDataPlugin


_API_KEY_HINT = "Run: stockdata config set settings.finnhub_api_key <key>"


app = typer.Typer(
    name="stockdata",
    help="Live stock quotes, company data, candles, and market news via Finnhub.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"stockdata {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logger = logging.getLogger("stockdata")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    if verbose:
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.NOTSET)


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~stockdata.output.OutputManager` from
    CLI flags and sets the ``stockdata`` logger level.

    Args:
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output and logging.
    """
    from stockdata.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )
    _configure_logging(verbose)


# ------------------------------------------------------------------ #
# Tool invocation
# ------------------------------------------------------------------ #


def _build_plugin(config: StockDataConfig) -> StockDataPlugin:
    """Create the plugin for one CLI invocation from the loaded *config*."""
    from stockdata.plugin import StockDataPlugin

    return StockDataPlugin(cache_config=config.cache, request_config=config.request)


async def _invoke(
    plugin: StockDataPlugin, ctx: PluginContext, name: str, arguments: dict[str, Any]
) -> ToolResult:
    registrations = plugin.activate(ctx)
    try:
        return await registrations.tools.invoke(name, arguments)
    finally:
        await plugin.deactivate()


def _run_tool(name: str, arguments: dict[str, Any]) -> None:
    """Invoke tool *name* and print its result.

    Text goes to stdout, or the whole result object in ``--json`` mode. An
    error result is printed to stderr and exits with the code of the error
    category that produced it.
    """
    from stockdata.config import load_config
    from stockdata.context import LocalContext
    from stockdata.output import OutputFormat, debug, error, get_output, print_data, suggest

    config = load_config()
    ctx = LocalContext(config)
    plugin = _build_plugin(config)

    debug(f"Invoking {name} with {arguments}")
    result = asyncio.run(_invoke(plugin, ctx, name, arguments))

    if result.is_error:
        error(result.text)
        if result.exit_code == EXIT_CONFIG_ERROR:
            suggest(_API_KEY_HINT)
        raise typer.Exit(code=result.exit_code)

    if get_output().format == OutputFormat.JSON:
        print_data(json.dumps(result.model_dump(by_alias=True), indent=2, ensure_ascii=False))
    else:
        print_data(result.text)


@app.command("tools")
def tools_command() -> None:
    """List the available tools and their descriptions."""
    from stockdata.context import LocalContext
    from stockdata.models import StockDataConfig
    from stockdata.output import OutputFormat, get_output, print_data, print_table
    from stockdata.plugin import StockDataPlugin

    # Definitions need no API key and the HTTP client is never opened.
    plugin = StockDataPlugin()
    registry = plugin.activate(LocalContext(StockDataConfig())).tools
    asyncio.run(plugin.deactivate())
    if get_output().format == OutputFormat.JSON:
        defs = [d.model_dump(by_alias=True) for d in registry.definitions()]
        print_data(json.dumps(defs, indent=2, ensure_ascii=False))
        return
    rows = [[tool.name, tool.description] for tool in registry]
    print_table(["Name", "Description"], rows, title=f"{StockDataPlugin.name} tools")


@app.command("call")
def call_command(
    name: str = typer.Argument(help="Tool name, e.g. 'stock_quote'."),
    args: str = typer.Option("{}", "--args", "-a", help="Tool arguments as a JSON object."),
) -> None:
    """Invoke any tool by name.

    Example::

        stockdata call stock_candles --args '{"symbol": "AAPL", "days": 90}'
    """
    from stockdata.output import error

    try:
        arguments = json.loads(args)
    except json.JSONDecodeError as exc:
        error(f"--args is not valid JSON: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    if not isinstance(arguments, dict):
        error("--args must be a JSON object")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    _run_tool(name, arguments)


@app.command("quote")
def quote_command(symbol: str = typer.Argument(help="Ticker symbol.")) -> None:
    """Real-time quote for one symbol."""
    _run_tool("stock_quote", {"symbol": symbol})


@app.command("quotes")
def quotes_command(
    symbols: list[str] = typer.Argument(help="One or more ticker symbols."),
) -> None:
    """Real-time quotes for several symbols at once."""
    _run_tool("stock_quotes", {"symbols": symbols})


@app.command("search")
def search_command(query: str = typer.Argument(help="Company name or keyword.")) -> None:
    """Search for ticker symbols."""
    _run_tool("stock_search", {"query": query})


@app.command("profile")
def profile_command(symbol: str = typer.Argument(help="Ticker symbol.")) -> None:
    """Company profile."""
    _run_tool("stock_company_profile", {"symbol": symbol})


@app.command("candles")
def candles_command(
    symbol: str = typer.Argument(help="Ticker symbol."),
    resolution: str = typer.Option(
        "D", "--resolution", "-r", help="Candle resolution: 1, 5, 15, 30, 60, D, W, M."
    ),
    days: int = typer.Option(30, "--days", "-d", help="Days of history (1-365)."),
) -> None:
    """Historical OHLCV candles with period statistics."""
    _run_tool("stock_candles", {"symbol": symbol, "resolution": resolution, "days": days})


@app.command("news")
def news_command(
    symbol: Optional[str] = typer.Option(
        None, "--symbol", "-s", help="Company symbol. Omit for general market news."
    ),
    limit: int = typer.Option(5, "--limit", "-l", help="Number of articles (1-20)."),
) -> None:
    """Latest market or company news."""
    arguments: dict[str, Any] = {"limit": limit}
    if symbol:
        arguments["symbol"] = symbol
    _run_tool("stock_news", arguments)


@app.command("peers")
def peers_command(symbol: str = typer.Argument(help="Ticker symbol.")) -> None:
    """Peer companies with live quotes."""
    _run_tool("stock_peers", {"symbol": symbol})


@app.command("metrics")
def metrics_command(symbol: str = typer.Argument(help="Ticker symbol.")) -> None:
    """Key financial metrics."""
    _run_tool("stock_metrics", {"symbol": symbol})


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
) -> None:
    """Serve the REST routes over HTTP.

    Routes are mounted under ``server.prefix`` from the config file, e.g.
    ``GET /plugins/stock-data/quote/AAPL``.
    """
    import uvicorn

    from stockdata.config import load_config
    from stockdata.context import LocalContext, require_api_key
    from stockdata.exceptions import ConfigurationError
    from stockdata.output import info, warning
    from stockdata.server import create_app

    config = load_config()
    ctx = LocalContext(config)
    try:
        require_api_key(ctx)
    except ConfigurationError:
        warning("No Finnhub API key configured; routes will answer with errors until one is set.")
    server_app = create_app(_build_plugin(config), ctx, config.server.prefix)

    bind_host = host or config.server.host
    bind_port = port or config.server.port
    info(f"Serving {config.server.prefix} on http://{bind_host}:{bind_port}")
    uvicorn.run(server_app, host=bind_host, port=bind_port, log_level="info")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from stockdata.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def _register_commands() -> None:
    from stockdata.commands.config import config_app

    app.add_typer(config_app, name="config", help="Configuration management.")


_register_commands()


def main() -> None:
    """CLI entry point invoked by the ``stockdata`` console script.

    Unhandled :class:`~stockdata.exceptions.StockDataError` instances cause
    a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app(standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from stockdata.exceptions import ConfigurationError, StockDataError
        from stockdata.output import error, suggest

        if isinstance(exc, StockDataError):
            error(str(exc))
            if isinstance(exc, ConfigurationError):
                suggest(_API_KEY_HINT)
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
