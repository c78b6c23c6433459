"""
Process entry point: ``python -m confluence_mcp_server``.

Logs go to stderr; stdout is reserved for the stdio protocol stream.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn

from .config import get_settings
from .api.mcp_routes import SSE_PATH, STREAMABLE_HTTP_PATH
from .main import create_app
from .server import run_stdio

logger = logging.getLogger("mcp.app")


def main() -> None:
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Confluence MCP server with transport: %s", settings.mcp_transport)

    if settings.mcp_transport == "stdio":
        asyncio.run(run_stdio(settings))
    else:
        # one app serves both /mcp and /sse; the name only picks the advertised endpoint
        endpoint = SSE_PATH if settings.mcp_transport == "sse" else STREAMABLE_HTTP_PATH
        logger.info(
            "Listening on http://%s:%d%s",
            settings.mcp_host,
            settings.mcp_port,
            endpoint,
        )
        uvicorn.run(
            create_app(
                settings,
                json_response=settings.mcp_json_response,
                stateless_http=settings.mcp_stateless_http,
            ),
            host=settings.mcp_host,
            port=settings.mcp_port,
            log_level=settings.log_level.lower(),
        )


if __name__ == "__main__":
    main()
