"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for stockdata:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.stockdata/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Config file** -- a single :class:`~stockdata.models.StockDataConfig`
  JSON file holding plugin settings, cache TTL, request and server options.
* **API key resolution** -- :func:`resolve_api_key` applies the precedence
  chain environment variable > config file.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from stockdata.exceptions import ConfigurationError
from stockdata.models import StockDataConfig

_APP_NAME = "stockdata"
_CONFIG_FILENAME = "config.json"

API_KEY_SETTING = "finnhub_api_key"
"""Name of the plugin setting holding the Finnhub token."""

API_KEY_ENV_VARS = ("STOCKDATA_FINNHUB_API_KEY", "FINNHUB_API_KEY")
"""Environment variables checked, in order, before the config file."""


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/stockdata/`` (default ``~/.config/stockdata/``).
    On macOS/Windows: ``~/.stockdata/``.

    Returns:
        Absolute path to the configuration directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/stockdata/`` (default ``~/.local/share/stockdata/``).
    On macOS/Windows: ``~/.stockdata/logs/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Config file ---


def config_path() -> Path:
    """Path to the config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> StockDataConfig:
    """Load the configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~stockdata.models.StockDataConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigurationError: If the file exists but contains invalid JSON or
            fails Pydantic validation.
    """
    path = config_path()
    if not path.is_file():
        return StockDataConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return StockDataConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc}") from exc


def save_config(config: StockDataConfig) -> None:
    """Persist the configuration atomically to disk.

    Args:
        config: The configuration to save.
    """
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- API key resolution ---


def resolve_api_key(config: StockDataConfig) -> Optional[str]:
    """Return the Finnhub API key, or ``None`` when none is configured.

    Precedence (high to low):
        1. ``STOCKDATA_FINNHUB_API_KEY``
        2. ``FINNHUB_API_KEY``
        3. ``settings.finnhub_api_key`` in the config file

    Empty strings count as unset.
    """
    for var in API_KEY_ENV_VARS:
        value = os.environ.get(var)
        if value:
            return value
    return config.settings.finnhub_api_key or None
