"""
Comment Tools

Handlers for ``get_comments`` and ``add_comment``. Comment bodies are passed
through the same formatting and AI optimization as search results.
"""

from __future__ import annotations

from typing import Any, Dict

from mcp.types import CallToolResult

from .models import AddCommentArgs, GetCommentsArgs
from .page_tools import format_content
from .results import json_result, tool_operation
from ..confluence.api_client import ConfluenceClient
from ..content.cleaner import optimize_for_ai


@tool_operation("retrieving comments")
async def tool_get_comments(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = GetCommentsArgs.model_validate(args)
    result = await client.get_comments(params.page_id)

    comments = []
    for comment in result.comments[: params.limit]:
        entry = comment.model_dump(by_alias=True, exclude_none=True)
        entry["content"] = optimize_for_ai(format_content(comment.content, params.format))
        comments.append(entry)

    return json_result({
        "total": result.total,
        "returned": len(comments),
        "comments": comments,
    })


@tool_operation("adding comment")
async def tool_add_comment(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = AddCommentArgs.model_validate(args)
    comment = await client.add_comment(params.page_id, params.content, params.parent_id)

    payload = comment.model_dump(by_alias=True, exclude_none=True)
    payload["content"] = optimize_for_ai(comment.content)
    payload["message"] = "Comment added successfully"
    return json_result(payload)
