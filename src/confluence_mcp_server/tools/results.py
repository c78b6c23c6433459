"""
Tool Result Envelope

Every tool returns an MCP ``CallToolResult`` with a single text block. Normal
payloads are JSON documents; failures are plain text with ``isError`` set.
"""

from __future__ import annotations

import functools
import json
import logging
from typing import Any, Awaitable, Callable, Dict

from mcp.types import CallToolResult, TextContent

from ..confluence.api_client import ConfluenceClient

logger = logging.getLogger("mcp.tools")

ToolHandler = Callable[[ConfluenceClient, Dict[str, Any]], Awaitable[CallToolResult]]


def drop_none(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def json_result(payload: Any) -> CallToolResult:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    return CallToolResult(content=[TextContent(type="text", text=text)])


def error_result(text: str) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=text)],
        isError=True,
    )


def tool_operation(action: str) -> Callable[[ToolHandler], ToolHandler]:
    """
    Convert any failure inside a tool handler into an error-flagged result.

    ``action`` completes the prefix, e.g. ``"retrieving page"`` renders
    ``Error retrieving page: <reason>``.
    """

    def decorator(func: ToolHandler) -> ToolHandler:
        @functools.wraps(func)
        async def wrapper(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
            try:
                return await func(client, args)
            except Exception as exc:
                logger.warning("Tool %s failed: %s", func.__name__, exc)
                return error_result(f"Error {action}: {exc}")

        return wrapper

    return decorator
