"""Config commands -- view and modify the stockdata configuration file.

Provides the ``stockdata config`` sub-command group for reading, updating,
and resetting :class:`~stockdata.models.StockDataConfig`. The most common
use is storing the Finnhub API key::

    stockdata config set settings.finnhub_api_key <key>
"""

from __future__ import annotations

import typer

from stockdata.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

_SECRET_KEYS = frozenset({"finnhub_api_key"})


def _mask(value: str) -> str:
    if len(value) <= 4:
        return "****"
    return f"{value[:2]}{'*' * (len(value) - 4)}{value[-2:]}"


@config_app.command("show")
def config_show() -> None:
    """Show the current configuration with secrets masked.

    Example::

        stockdata config show
        stockdata --json config show
    """
    from stockdata.config import get_config_dir, load_config

    data = load_config().model_dump(mode="json")
    for key in _SECRET_KEYS:
        value = data["settings"].get(key)
        if value:
            data["settings"][key] = _mask(value)
    info(f"Config directory: {get_config_dir()}")
    format_response(data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'cache.ttl_seconds')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (bool, int, float, or str) and the result is
    validated against :class:`~stockdata.models.StockDataConfig` before
    saving.

    Example::

        stockdata config set settings.finnhub_api_key abc123
        stockdata config set cache.ttl_seconds 30
        stockdata config set server.port 9000
    """
    from stockdata.config import load_config, save_config
    from stockdata.models import StockDataConfig

    data = load_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: object = value
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, (int, float)):
        # Model validation rejects a fractional value for an int field.
        number_type = float if isinstance(current, float) or "." in value else int
        try:
            coerced = number_type(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=2) from None

    target[final_key] = coerced

    try:
        new_config = StockDataConfig.model_validate(data)
    except Exception as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_config(new_config)
    shown = _mask(value) if final_key in _SECRET_KEYS else coerced
    success(f"Set {key} = {shown}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults (this also forgets the stored API key)."""
    from stockdata.config import save_config
    from stockdata.models import StockDataConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_config(StockDataConfig())
    success("Configuration reset to defaults.")
