"""Tool definitions and the registry that dispatches invocations.

A :class:`StockTool` pairs a :class:`~stockdata.models.ToolDefinition` with
its input model and handler coroutine. :meth:`StockTool.run` is the tool
boundary: arguments are validated against the input model, the handler is
awaited, and every outcome -- success, a
:class:`~stockdata.exceptions.StockDataError`, or an unexpected exception --
comes back as a :class:`~stockdata.models.ToolResult`.

:class:`ToolRegistry` keeps tools in registration order and resolves them by
name. :func:`build_registry` wires the eight stock tools to a
:class:`~stockdata.tools.handlers.StockTools` instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from stockdata.exceptions import InvalidInputError, StockDataError
from stockdata.exit_codes import EXIT_INVALID_USAGE
from stockdata.models import ToolDefinition, ToolResult
from stockdata.tools.handlers import StockTools, ToolHandler
from stockdata.tools.schemas import (
    CandlesInput,
    NewsInput,
    QuoteInput,
    QuotesInput,
    SearchInput,
    SymbolInput,
)

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


@dataclass(frozen=True)
class StockTool:
    """One callable tool.

    Attributes:
        name: Unique tool name, e.g. ``"stock_quote"``.
        description: One-paragraph description shown to the invoking agent.
        input_model: Pydantic model that validates and normalises arguments.
        handler: Coroutine taking the validated model and returning text.
    """

    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=self.input_model.model_json_schema(),
        )

    async def run(self, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """Validate *arguments*, run the handler, and fold any failure into a result."""
        try:
            params = self.input_model.model_validate(arguments or {})
        except ValidationError as exc:
            return ToolResult.error(
                f"Invalid arguments for {self.name}: {_describe_validation_error(exc)}",
                EXIT_INVALID_USAGE,
            )

        try:
            text = await self.handler(params)
        except StockDataError as exc:
            logger.debug("Tool %s failed: %s", self.name, exc)
            return ToolResult.error(str(exc), exc.exit_code)
        except Exception as exc:
            logger.exception("Unexpected error in tool %s", self.name)
            return ToolResult.error(str(exc) or type(exc).__name__)
        return ToolResult.ok(text)


class ToolRegistry:
    """Ordered collection of :class:`StockTool` objects keyed by name."""

    def __init__(self, tools: Optional[list[StockTool]] = None) -> None:
        self._tools: dict[str, StockTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: StockTool) -> None:
        """Add *tool*.

        Raises:
            InvalidInputError: If a tool with the same name is already registered.
        """
        if tool.name in self._tools:
            raise InvalidInputError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def get(self, name: str) -> StockTool:
        """Return the tool called *name*.

        Raises:
            InvalidInputError: If no such tool exists.
        """
        try:
            return self._tools[name]
        except KeyError:
            raise InvalidInputError(f"Unknown tool: {name}") from None

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    async def invoke(self, name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResult:
        """Run the named tool. Never raises for tool-level failures."""
        try:
            tool = self.get(name)
        except InvalidInputError as exc:
            return ToolResult.error(str(exc), exc.exit_code)
        return await tool.run(arguments)

    def __iter__(self):
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


def build_registry(tools: StockTools) -> ToolRegistry:
    """Register the eight stock tools, bound to *tools*."""
    return ToolRegistry(
        [
            StockTool(
                name="stock_quote",
                description="Get a real-time stock or ETF quote. Returns current price, "
                "change, high, low, open, and previous close.",
                input_model=QuoteInput,
                handler=tools.quote,
            ),
            StockTool(
                name="stock_quotes",
                description="Get real-time quotes for multiple symbols at once. "
                "Useful for comparing stocks or checking a portfolio.",
                input_model=QuotesInput,
                handler=tools.quotes,
            ),
            StockTool(
                name="stock_search",
                description="Search for stock/ETF ticker symbols by company name or keyword. "
                "Use this when you don't know the exact ticker.",
                input_model=SearchInput,
                handler=tools.search,
            ),
            StockTool(
                name="stock_company_profile",
                description="Get company profile including market cap, industry, IPO date, "
                "website, and share count.",
                input_model=SymbolInput,
                handler=tools.company_profile,
            ),
            StockTool(
                name="stock_candles",
                description="Get historical OHLCV (open/high/low/close/volume) candle data "
                "for a stock or ETF. Useful for trend analysis.",
                input_model=CandlesInput,
                handler=tools.candles,
            ),
            StockTool(
                name="stock_news",
                description="Get latest market news or company-specific news. "
                "Useful for understanding price movements and sentiment.",
                input_model=NewsInput,
                handler=tools.news,
            ),
            StockTool(
                name="stock_peers",
                description="Get peer companies (similar stocks in the same industry) "
                "with live quotes. Useful for comparison analysis.",
                input_model=SymbolInput,
                handler=tools.peers,
            ),
            StockTool(
                name="stock_metrics",
                description="Get key financial metrics: P/E ratio, EPS, 52-week high/low, "
                "beta, dividend yield, and more.",
                input_model=SymbolInput,
                handler=tools.metrics,
            ),
        ]
    )
