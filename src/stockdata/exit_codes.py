"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~stockdata.exceptions.StockDataError` subclass.
Shell wrappers can inspect the exit code to tell a missing API key from an
upstream outage without parsing stderr.

Example::

    $ stockdata quote AAPL
    $ echo $?
    3   # EXIT_CONFIG_ERROR -- no API key configured
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or a tool returned an error result."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with an unknown tool or invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""The API key is missing or the configuration file is invalid."""

EXIT_NOT_FOUND = 4
"""The upstream call succeeded but returned no usable data."""

EXIT_UPSTREAM_ERROR = 5
"""The upstream API answered with a non-success HTTP status."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
