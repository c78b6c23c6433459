"""
Page and Space Tools

Handlers for ``get_page``, ``search_pages``, ``get_spaces``, ``create_page``
and ``update_page``. Each handler validates its arguments, calls the
gateway, and shapes the JSON payload returned to the host.
"""

from __future__ import annotations

from typing import Any, Dict

from mcp.types import CallToolResult

from .models import (
    CreatePageArgs,
    GetPageArgs,
    GetSpacesArgs,
    SearchPagesArgs,
    UpdatePageArgs,
)
from .results import drop_none, json_result, tool_operation
from ..confluence.api_client import ConfluenceClient
from ..confluence.models import Page
from ..content.cleaner import optimize_for_ai, storage_format_to_markdown


def format_content(content: str, fmt: str) -> str:
    if fmt == "markdown" and content:
        return storage_format_to_markdown(content)
    return content


def _with_markup(payload: Dict[str, Any], page: Page, include_markup: bool) -> Dict[str, Any]:
    if include_markup and page.content_markup:
        payload["contentMarkup"] = page.content_markup
    return payload


@tool_operation("retrieving page")
async def tool_get_page(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    """
    Fetch a single page. Content is returned in full, never optimized.
    """
    params = GetPageArgs.model_validate(args)
    page = await client.get_page(params.page_id)

    payload = {
        "id": page.id,
        "title": page.title,
        "spaceKey": page.space_key,
        "content": format_content(page.content, params.format),
        "url": page.links.webui,
        "version": page.version,
        "created": page.created,
        "updated": page.updated,
        "createdBy": page.created_by.display_name,
        "updatedBy": page.updated_by.display_name,
    }
    return json_result(drop_none(_with_markup(payload, page, params.include_markup)))


@tool_operation("searching pages")
async def tool_search_pages(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = SearchPagesArgs.model_validate(args)
    result = await client.search_pages(params.query)

    pages = []
    for page in result.pages[: params.limit]:
        content = optimize_for_ai(format_content(page.content, params.format))
        entry = {
            "id": page.id,
            "title": page.title,
            "spaceKey": page.space_key,
            "content": content,
            "url": page.links.webui,
            "version": page.version,
            "updated": page.updated,
            "updatedBy": page.updated_by.display_name,
        }
        pages.append(drop_none(_with_markup(entry, page, params.include_markup)))

    return json_result({"total": result.total, "returned": len(pages), "pages": pages})


@tool_operation("retrieving spaces")
async def tool_get_spaces(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = GetSpacesArgs.model_validate(args)
    result = await client.get_spaces()

    spaces = [
        space.model_dump(by_alias=True, exclude_none=True)
        for space in result.spaces[: params.limit]
    ]
    return json_result({"total": result.total, "returned": len(spaces), "spaces": spaces})


@tool_operation("creating page")
async def tool_create_page(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = CreatePageArgs.model_validate(args)
    page = await client.create_page(
        params.space_key,
        params.title,
        params.content,
        params.parent_id,
    )

    return json_result(drop_none({
        "id": page.id,
        "title": page.title,
        "spaceKey": page.space_key,
        "version": page.version,
        "url": page.links.webui,
        "parentId": page.parent_id,
        "updated": page.updated,
        "updatedBy": page.updated_by.display_name,
        "message": "Page created successfully",
    }))


@tool_operation("updating page")
async def tool_update_page(client: ConfluenceClient, args: Dict[str, Any]) -> CallToolResult:
    params = UpdatePageArgs.model_validate(args)
    page = await client.update_page(
        params.page_id,
        params.title,
        params.content,
        params.version,
    )

    return json_result(drop_none({
        "id": page.id,
        "title": page.title,
        "spaceKey": page.space_key,
        "version": page.version,
        "url": page.links.webui,
        "updated": page.updated,
        "updatedBy": page.updated_by.display_name,
        "message": "Page updated successfully",
    }))
