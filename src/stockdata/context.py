"""Host capabilities injected into the plugin.

The plugin never reaches for global state to learn its settings or where to
log. A host hands it a :class:`PluginContext` in
:meth:`~stockdata.plugin.StockDataPlugin.activate`; every tool and route
handler reads the API key through that context on each call.

:class:`LocalContext` is the implementation used by the bundled CLI and
server: settings come from :class:`~stockdata.models.StockDataConfig` with
environment-variable overrides for the API key, and logging goes to a
standard :mod:`logging` logger. Other hosts provide their own subclass.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from stockdata.config import API_KEY_SETTING, resolve_api_key
from stockdata.exceptions import ConfigurationError
from stockdata.models import StockDataConfig


class PluginContext(ABC):
    """Capabilities a host exposes to the plugin.

    Subclasses must implement :attr:`plugin_name` and :meth:`get_setting`.
    :attr:`log` defaults to a child of the ``stockdata.plugin`` logger named
    after the plugin.
    """

    @property
    @abstractmethod
    def plugin_name(self) -> str:
        """Name the host registered the plugin under."""
        ...

    @abstractmethod
    def get_setting(self, key: str) -> Optional[Any]:
        """Return a plugin setting, or ``None`` if it is not set."""
        ...

    @property
    def log(self) -> logging.Logger:
        return logging.getLogger(f"stockdata.plugin.{self.plugin_name}")


class LocalContext(PluginContext):
    """Context backed by the local config file and environment.

    Args:
        config: Loaded configuration. Defaults to an empty config, i.e.
            only environment variables can supply the API key.
        plugin_name: Name used for the logger.

    Example::

        ctx = LocalContext(load_config())
        ctx.get_setting("finnhub_api_key")
    """

    def __init__(
        self,
        config: Optional[StockDataConfig] = None,
        plugin_name: str = "stock-data",
    ) -> None:
        self._config = config or StockDataConfig()
        self._plugin_name = plugin_name

    @property
    def plugin_name(self) -> str:
        return self._plugin_name

    @property
    def config(self) -> StockDataConfig:
        return self._config

    def get_setting(self, key: str) -> Optional[Any]:
        if key == API_KEY_SETTING:
            return resolve_api_key(self._config)
        settings = self._config.settings
        if key in type(settings).model_fields:
            return getattr(settings, key)
        return (settings.model_extra or {}).get(key)


def require_api_key(ctx: PluginContext) -> str:
    """Return the configured API key or fail before any network call.

    Raises:
        ConfigurationError: If the ``finnhub_api_key`` setting is empty.
    """
    key = ctx.get_setting(API_KEY_SETTING)
    if not key:
        raise ConfigurationError("Finnhub API key not configured. Set it in plugin settings.")
    return str(key)
