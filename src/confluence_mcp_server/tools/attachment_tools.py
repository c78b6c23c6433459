"""
Attachment Tools

Handlers for ``get_attachments`` and ``add_attachment``. Uploads arrive
base64-encoded from the host and are decoded before reaching the gateway.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict

from mcp.types import CallToolResult

from .models import AddAttachmentArgs, GetAttachmentsArgs
from .results import json_result, tool_operation
from ..confluence.api_client import ConfluenceClient


@tool_operation("retrieving attachments")
async def tool_get_attachments(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = GetAttachmentsArgs.model_validate(args)
    result = await client.get_attachments(params.page_id)

    attachments = [
        attachment.model_dump(by_alias=True, exclude_none=True)
        for attachment in result.attachments[: params.limit]
    ]
    return json_result({
        "total": result.total,
        "returned": len(attachments),
        "attachments": attachments,
    })


@tool_operation("adding attachment")
async def tool_add_attachment(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = AddAttachmentArgs.model_validate(args)

    try:
        # whitespace from MIME line wrapping is dropped before the strict decode
        encoded = "".join(params.file_content_base64.split())
        file_content = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"fileContentBase64 is not valid base64: {exc}") from exc

    attachment = await client.add_attachment(
        params.page_id,
        file_content,
        params.filename,
        params.comment,
    )

    payload = attachment.model_dump(by_alias=True, exclude_none=True)
    payload["message"] = "Attachment added successfully"
    return json_result(payload)
