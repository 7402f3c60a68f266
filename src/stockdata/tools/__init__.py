"""Tool-invocation surface for stockdata.

Key pieces:

* :class:`StockTools` -- the eight handler coroutines.
* :class:`StockTool` -- a handler plus its definition and input model.
* :class:`ToolRegistry` -- name-based dispatch that always returns a
  :class:`~stockdata.models.ToolResult`.
* :func:`build_registry` -- wires the handlers into a registry.

Example::

    registry = build_registry(StockTools(cached_client, ctx))
    result = await registry.invoke("stock_quote", {"symbol": "aapl"})
    print(result.text)
"""

from stockdata.tools.handlers import StockTools
from stockdata.tools.registry import StockTool, ToolRegistry, build_registry

__all__ = ["StockTools", "StockTool", "ToolRegistry", "build_registry"]
