"""
MCP HTTP Transports

This module mounts the low-level MCP ``Server`` onto the FastAPI app through
the ``mcp`` library's own HTTP transports:

- Streamable HTTP on ``/mcp`` (POST for JSON-RPC, GET for the server stream,
  DELETE to end a session)
- Legacy SSE on ``GET /sse``, with client messages posted to ``/messages/``

JSON-RPC framing, protocol-version negotiation and session tracking are left
to the library. The streamable session manager must be running (see
``main.create_app`` lifespan) before ``/mcp`` can serve requests.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.types import Receive, Scope, Send

logger = logging.getLogger("mcp.transport")

STREAMABLE_HTTP_PATH = "/mcp"
SSE_PATH = "/sse"
SSE_MESSAGE_PATH = "/messages/"


class StreamableHTTPEndpoint:
    """ASGI endpoint handing every ``/mcp`` request to the session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager) -> None:
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.session_manager.handle_request(scope, receive, send)


class SseEndpoint:
    """ASGI endpoint running one server session per SSE connection."""

    def __init__(self, server: Server, transport: SseServerTransport) -> None:
        self.server = server
        self.transport = transport

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.info("SSE client connected")
        async with self.transport.connect_sse(scope, receive, send) as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
        logger.info("SSE client disconnected")


def mount_mcp_transports(
    app: FastAPI,
    server: Server,
    *,
    json_response: bool = False,
    stateless: bool = False,
) -> StreamableHTTPSessionManager:
    """
    Register the streamable HTTP and SSE endpoints on ``app``.

    Parameters
    ----------
    app : FastAPI
        Application to mount onto.

    server : Server
        Low-level MCP server built by ``server.create_mcp_server``.

    json_response : bool
        Answer POSTs with a single JSON body instead of an SSE stream.

    stateless : bool
        Serve every request with a fresh session and no ``mcp-session-id``.

    Returns
    -------
    StreamableHTTPSessionManager
        Manager whose ``run()`` context must wrap the app's lifetime.
    """
    session_manager = StreamableHTTPSessionManager(
        app=server,
        json_response=json_response,
        stateless=stateless,
    )
    sse = SseServerTransport(SSE_MESSAGE_PATH)

    app.add_route(STREAMABLE_HTTP_PATH, StreamableHTTPEndpoint(session_manager))
    app.add_route(SSE_PATH, SseEndpoint(server, sse), methods=["GET"])
    app.mount(SSE_MESSAGE_PATH, sse.handle_post_message)

    return session_manager
