"""Canonical Pydantic models shared across all stockdata modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`PluginSettings`, :class:`CacheConfig`, :class:`RequestConfig`,
    :class:`ServerConfig`, and :class:`StockDataConfig`.

**Tool models** -- the shapes exchanged across the tool-invocation boundary:
    :class:`ToolDefinition`, :class:`TextContent`, and :class:`ToolResult`.

Upstream payloads are deliberately *not* modelled here: the client decodes
JSON and hands it back untouched, and the cache stores it opaquely.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from stockdata.exit_codes import EXIT_GENERIC_FAILURE, EXIT_SUCCESS

DEFAULT_BASE_URL = "https://finnhub.io/api/v1"
"""Root URL every upstream endpoint path is appended to."""

DEFAULT_CACHE_TTL_SECONDS = 15
"""Lifetime of a cached upstream response."""


# --- Configuration ---


class PluginSettings(BaseModel):
    """Settings the host stores on behalf of the plugin.

    Unknown keys are preserved in ``model_extra`` so that a host can keep
    its own values alongside ours.
    """

    model_config = ConfigDict(extra="allow")

    finnhub_api_key: Optional[str] = Field(
        default=None, description="Finnhub API token"
    )


class CacheConfig(BaseModel):
    """Response cache settings. The TTL is shared by every entry."""

    ttl_seconds: float = Field(
        default=DEFAULT_CACHE_TTL_SECONDS, gt=0, description="Cache TTL in seconds"
    )


class RequestConfig(BaseModel):
    """Upstream HTTP settings."""

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Finnhub API root")
    timeout_seconds: float = Field(default=10.0, description="Request timeout in seconds")


class ServerConfig(BaseModel):
    """Settings for ``stockdata serve``."""

    host: str = "127.0.0.1"
    port: int = 8000
    prefix: str = Field(
        default="/plugins/stock-data", description="Path prefix for the REST routes"
    )


class StockDataConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/stockdata/config.json``.

    Loaded and saved by :func:`~stockdata.config.load_config` and
    :func:`~stockdata.config.save_config`. Environment variables take
    precedence over the API key stored here; see
    :func:`~stockdata.config.resolve_api_key`.
    """

    settings: PluginSettings = Field(default_factory=PluginSettings)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


# --- Tool boundary ---


class ToolDefinition(BaseModel):
    """Name, description, and JSON-schema input of one tool.

    Serialises with the camel-case ``inputSchema`` key that tool-calling
    hosts expect.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class TextContent(BaseModel):
    """A single block of text returned by a tool."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Outcome of a tool invocation.

    Success carries one or more text blocks; an error carries exactly one
    block describing the failure. Faults never cross the tool boundary as
    exceptions -- they are folded into a result with ``is_error=True``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")
    exit_code: int = Field(default=EXIT_SUCCESS, exclude=True)
    """Process exit code for CLI callers; never serialised."""

    @property
    def text(self) -> str:
        """All text blocks joined with newlines."""
        return "\n".join(block.text for block in self.content)

    @classmethod
    def ok(cls, text: str) -> ToolResult:
        """Build a successful single-block result."""
        return cls(content=[TextContent(text=text)], is_error=False)

    @classmethod
    def error(cls, text: str, exit_code: int = EXIT_GENERIC_FAILURE) -> ToolResult:
        """Build an error result."""
        return cls(content=[TextContent(text=text)], is_error=True, exit_code=exit_code)
