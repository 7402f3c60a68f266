"""Exception hierarchy for stockdata.

All exceptions inherit from :class:`StockDataError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`stockdata.exit_codes`.
Tool and route handlers catch ``StockDataError`` and turn it into an error
result; the CLI entry point in :func:`stockdata.app.main` exits with the
error's code.

Subclass hierarchy::

    StockDataError (exit 1)
    +-- InvalidInputError   (exit 2)
    +-- ConfigurationError  (exit 3)
    +-- EmptyResultError    (exit 4)
    +-- UpstreamError       (exit 5)
    +-- TransportError      (exit 6)
"""

from stockdata.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_TRANSPORT_ERROR,
    EXIT_UPSTREAM_ERROR,
)


class StockDataError(Exception):
    """Base exception for all stockdata errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`stockdata.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidInputError(StockDataError):
    """Raised for an unknown tool name or arguments that fail schema validation."""

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(StockDataError):
    """Raised when the API key is missing or the config file is unreadable.

    Always raised before any network call is attempted.
    """

    exit_code = EXIT_CONFIG_ERROR


class EmptyResultError(StockDataError):
    """Raised when the upstream call succeeded but returned nothing usable.

    A zero-value quote, an empty search, or an empty candle series are
    domain-level "not found" answers, not faults.
    """

    exit_code = EXIT_NOT_FOUND


class UpstreamError(StockDataError):
    """Raised when the upstream API responds with a non-2xx HTTP status.

    Args:
        status_code: The HTTP status returned by the provider.
        body: The raw response body text.
    """

    exit_code = EXIT_UPSTREAM_ERROR

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Finnhub {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class TransportError(StockDataError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_TRANSPORT_ERROR
