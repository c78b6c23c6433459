"""
stdio MCP Server

Wires the tool dispatcher into the ``mcp`` library's low-level ``Server`` and
runs it over stdin/stdout.

The call-tool handler is registered directly so that ``McpError`` raised by
the dispatcher reaches the client as a JSON-RPC error instead of being folded
into a tool result.
"""

from __future__ import annotations

import logging

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .confluence.api_client import ConfluenceClient
from .config import Settings
from .tools.base import ToolDispatcher

logger = logging.getLogger("mcp.server")

SERVER_NAME = "confluence-mcp"
SERVER_VERSION = "0.1.0"


def build_dispatcher(settings: Settings) -> ToolDispatcher:
    client = ConfluenceClient(
        str(settings.confluence_base_url),
        settings.confluence_api_token.get_secret_value(),
        request_delay_ms=settings.confluence_request_delay_ms,
    )
    return ToolDispatcher(client, read_only=settings.confluence_read_only_mode)


def create_mcp_server(dispatcher: ToolDispatcher) -> Server:
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)

    async def _list_tools(req: types.ListToolsRequest) -> types.ServerResult:
        tools = [types.Tool(**tool) for tool in dispatcher.list_tools()]
        return types.ServerResult(types.ListToolsResult(tools=tools))

    async def _call_tool(req: types.CallToolRequest) -> types.ServerResult:
        result = await dispatcher.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(result)

    server.request_handlers[types.ListToolsRequest] = _list_tools
    server.request_handlers[types.CallToolRequest] = _call_tool
    return server


async def run_stdio(settings: Settings) -> None:
    dispatcher = build_dispatcher(settings)
    server = create_mcp_server(dispatcher)

    logger.info(
        "Confluence MCP server running on stdio (read-only: %s)",
        dispatcher.read_only,
    )
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
