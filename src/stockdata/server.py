"""Standalone FastAPI host for the plugin's REST routes.

Used by ``stockdata serve``. The plugin is activated when the app is built
and deactivated from the lifespan handler on shutdown, so the cache lives
exactly as long as the server process.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from stockdata import __version__
from stockdata.context import PluginContext
from stockdata.plugin import StockDataPlugin


def create_app(plugin: StockDataPlugin, ctx: PluginContext, prefix: str) -> FastAPI:
    """Activate *plugin* and mount its router under *prefix*."""
    registrations = plugin.activate(ctx)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await plugin.deactivate()
        ctx.log.info("Deactivated %s plugin", plugin.name)

    app = FastAPI(title="stockdata", version=__version__, lifespan=lifespan)
    app.include_router(registrations.router, prefix=prefix.rstrip("/"))
    return app
