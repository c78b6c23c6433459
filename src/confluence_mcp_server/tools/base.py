"""
Tool Dispatch Layer

This module defines the central dispatch mechanism for all host-invoked tool
calls. It enforces:

- Explicit tool allow-listing
- Read-only capability filtering
- Dependency injection of the Confluence gateway
- Uniform error behavior for the MCP tool protocol

Unknown tools and faults outside a tool handler surface as protocol-level
``McpError``; ordinary tool failures come back as error-flagged results.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Optional

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, METHOD_NOT_FOUND, CallToolResult, ErrorData

from .attachment_tools import tool_add_attachment, tool_get_attachments
from .comment_tools import tool_add_comment, tool_get_comments
from .definitions import (
    READ_ONLY_TOOLS,
    TOOL_ADD_ATTACHMENT,
    TOOL_ADD_COMMENT,
    TOOL_CREATE_PAGE,
    TOOL_DEFINITIONS,
    TOOL_GET_ATTACHMENTS,
    TOOL_GET_COMMENTS,
    TOOL_GET_PAGE,
    TOOL_GET_SPACES,
    TOOL_SEARCH_PAGES,
    TOOL_UPDATE_PAGE,
)
from .page_tools import (
    tool_create_page,
    tool_get_page,
    tool_get_spaces,
    tool_search_pages,
    tool_update_page,
)
from .results import ToolHandler, error_result
from ..confluence.api_client import ConfluenceClient

logger = logging.getLogger("mcp.tools")


# ---------------------------------------------------------------------
# Tool Registry (AUTHORITATIVE)
# ---------------------------------------------------------------------

TOOL_REGISTRY: Dict[str, ToolHandler] = {
    TOOL_GET_PAGE: tool_get_page,
    TOOL_SEARCH_PAGES: tool_search_pages,
    TOOL_GET_SPACES: tool_get_spaces,
    TOOL_CREATE_PAGE: tool_create_page,
    TOOL_UPDATE_PAGE: tool_update_page,
    TOOL_GET_COMMENTS: tool_get_comments,
    TOOL_ADD_COMMENT: tool_add_comment,
    TOOL_GET_ATTACHMENTS: tool_get_attachments,
    TOOL_ADD_ATTACHMENT: tool_add_attachment,
}


def read_only_message(tool_name: str) -> str:
    return (
        f"错误：当前处于只读模式，不允许执行 '{tool_name}' 操作。只允许读取操作和新增评论。\n"
        f"Error: Currently in read-only mode, '{tool_name}' operation is not allowed. "
        "Only read operations and adding comments are permitted."
    )


# ---------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------

class ToolDispatcher:
    """
    Lists and invokes the Confluence tools.

    Parameters
    ----------
    client : ConfluenceClient
        Gateway used by every tool handler.

    read_only : bool
        When set, only tools in ``allowed_tools`` are listed or callable.

    allowed_tools : FrozenSet[str]
        Capability set applied in read-only mode. Defaults to
        ``READ_ONLY_TOOLS``.
    """

    def __init__(
        self,
        client: ConfluenceClient,
        read_only: bool = False,
        allowed_tools: Optional[FrozenSet[str]] = None,
    ) -> None:
        self.client = client
        self.read_only = read_only
        self.allowed_tools = READ_ONLY_TOOLS if allowed_tools is None else allowed_tools

    def is_allowed(self, tool_name: str) -> bool:
        return not self.read_only or tool_name in self.allowed_tools

    def list_tools(self) -> List[Dict[str, Any]]:
        return [tool for tool in TOOL_DEFINITIONS if self.is_allowed(tool["name"])]

    async def call_tool(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> CallToolResult:
        """
        Dispatch a tool call requested by the host.

        Returns
        -------
        CallToolResult
            Tool payload, or an error-flagged result for tool failures and
            read-only rejections.

        Raises
        ------
        McpError
            ``METHOD_NOT_FOUND`` for unknown tools, ``INTERNAL_ERROR`` for
            faults outside a tool handler.
        """
        try:
            if not self.is_allowed(tool_name):
                logger.info("Rejected %s in read-only mode", tool_name)
                return error_result(read_only_message(tool_name))

            handler = TOOL_REGISTRY.get(tool_name)
            if handler is None:
                raise McpError(ErrorData(
                    code=METHOD_NOT_FOUND,
                    message=f"Unknown tool: {tool_name}",
                ))

            return await handler(self.client, arguments or {})
        except McpError:
            raise
        except Exception as exc:
            logger.exception("Internal error while dispatching %s", tool_name)
            raise McpError(ErrorData(
                code=INTERNAL_ERROR,
                message=str(exc) or "Unknown error occurred",
            )) from exc
