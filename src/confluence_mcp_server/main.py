"""
HTTP Application Entry Point

This module defines the FastAPI application factory, registers all routes,
and configures global exception handling.

Design Goals
------------
- Explicit dependency initialization order
- MCP transports supplied by the ``mcp`` library, not hand-rolled
- Global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from .config import Settings, get_settings
from .core.errors import unhandled_exception_handler
from .server import SERVER_NAME, SERVER_VERSION, build_dispatcher, create_mcp_server
from .tools.base import ToolDispatcher

from .api import (
    health_routes,
    mcp_routes,
)


logger = logging.getLogger("mcp.app")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[ToolDispatcher] = None,
    *,
    json_response: bool = False,
    stateless_http: bool = False,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Parameters
    ----------
    settings : Settings
        Optional configuration override. Loaded from the environment when
        neither ``settings`` nor ``dispatcher`` is given.

    dispatcher : ToolDispatcher
        Optional pre-built dispatcher, typically wired to a fake transport
        in tests.

    json_response : bool
        Streamable HTTP answers with plain JSON instead of SSE streams.

    stateless_http : bool
        Streamable HTTP keeps no sessions between requests.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    if dispatcher is None:
        dispatcher = build_dispatcher(settings or get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with app.state.mcp_session_manager.run():
            yield

    app = FastAPI(
        title=SERVER_NAME,
        version=SERVER_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Route Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.state.mcp_session_manager = mcp_routes.mount_mcp_transports(
        app,
        create_mcp_server(dispatcher),
        json_response=json_response,
        stateless=stateless_http,
    )

    logger.info(
        "Confluence MCP HTTP app ready (read-only: %s)",
        dispatcher.read_only,
    )
    return app
