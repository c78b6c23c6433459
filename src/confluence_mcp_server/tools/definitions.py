"""
Tool Definitions

This module defines the authoritative tool schemas exposed to the MCP host.
These definitions must remain strictly synchronized with:

- tools/base.py (TOOL_REGISTRY)
- tools/models.py (argument models)

Descriptions are bilingual (Chinese / English).
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Final, List


# ---------------------------------------------------------------------
# Tool Name Constants (Single Source of Truth)
# ---------------------------------------------------------------------

TOOL_GET_PAGE: Final[str] = "get_page"
TOOL_SEARCH_PAGES: Final[str] = "search_pages"
TOOL_GET_SPACES: Final[str] = "get_spaces"
TOOL_CREATE_PAGE: Final[str] = "create_page"
TOOL_UPDATE_PAGE: Final[str] = "update_page"
TOOL_GET_COMMENTS: Final[str] = "get_comments"
TOOL_ADD_COMMENT: Final[str] = "add_comment"
TOOL_GET_ATTACHMENTS: Final[str] = "get_attachments"
TOOL_ADD_ATTACHMENT: Final[str] = "add_attachment"


# ---------------------------------------------------------------------
# Read-Only Capability Set
# ---------------------------------------------------------------------

# Adding comments stays available in read-only mode.
READ_ONLY_TOOLS: FrozenSet[str] = frozenset({
    TOOL_GET_PAGE,
    TOOL_SEARCH_PAGES,
    TOOL_GET_SPACES,
    TOOL_GET_COMMENTS,
    TOOL_GET_ATTACHMENTS,
    TOOL_ADD_COMMENT,
})


# ---------------------------------------------------------------------
# Shared Property Schemas
# ---------------------------------------------------------------------

_FORMAT_PROPERTY: Dict[str, Any] = {
    "type": "string",
    "enum": ["text", "markdown"],
    "description": "返回内容的格式（默认：text）/ Format to return the content in (default: text)",
}


def _limit_property(noun_zh: str, noun_en: str, default: int) -> Dict[str, Any]:
    return {
        "type": "number",
        "description": (
            f"返回{noun_zh}的最大数量（默认：{default}）/ "
            f"Maximum number of {noun_en} to return (default: {default})"
        ),
    }


# ---------------------------------------------------------------------
# Tool Definitions
# ---------------------------------------------------------------------

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "name": TOOL_GET_PAGE,
        "description": "通过ID获取Confluence页面 / Retrieve a Confluence page by ID",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "要获取的Confluence页面ID / ID of the Confluence page to retrieve",
                },
                "format": _FORMAT_PROPERTY,
                "includeMarkup": {
                    "type": "boolean",
                    "description": (
                        "是否在响应中包含原始的Confluence存储格式（XHTML）标记（默认：false）。"
                        "当您想稍后更新页面以保留格式时很有用。 / "
                        "Whether to include the original Confluence Storage Format (XHTML) markup "
                        "in the response (default: false). Useful when you want to update the "
                        "page later in order to preserve formatting."
                    ),
                },
            },
            "required": ["pageId"],
        },
    },
    {
        "name": TOOL_SEARCH_PAGES,
        "description": (
            "使用CQL（Confluence查询语言）搜索Confluence页面 / "
            "Search for Confluence pages using CQL (Confluence Query Language), "
            "e.g. 'type=page AND space=DEV AND text ~ \"release\"'"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "CQL搜索查询 / CQL search query",
                },
                "limit": _limit_property("结果", "results", 10),
                "format": _FORMAT_PROPERTY,
                "includeMarkup": {
                    "type": "boolean",
                    "description": (
                        "是否在响应中包含原始的Confluence存储格式（XHTML）标记（默认：false）/ "
                        "Whether to include the original Confluence Storage Format (XHTML) "
                        "markup in the response (default: false)"
                    ),
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": TOOL_GET_SPACES,
        "description": "列出所有可用的Confluence空间 / List all available Confluence spaces",
        "inputSchema": {
            "type": "object",
            "properties": {
                "limit": _limit_property("空间", "spaces", 50),
            },
        },
    },
    {
        "name": TOOL_CREATE_PAGE,
        "description": "创建新的Confluence页面 / Create a new Confluence page",
        "inputSchema": {
            "type": "object",
            "properties": {
                "spaceKey": {
                    "type": "string",
                    "description": "将创建页面的空间键 / Key of the space where the page will be created",
                },
                "title": {
                    "type": "string",
                    "description": "新页面的标题 / Title of the new page",
                },
                "content": {
                    "type": "string",
                    "description": (
                        "页面内容，使用Confluence存储格式（XHTML）/ "
                        "Content of the page in Confluence Storage Format (XHTML)"
                    ),
                },
                "parentId": {
                    "type": "string",
                    "description": "可选的父页面ID / Optional ID of the parent page",
                },
            },
            "required": ["spaceKey", "title", "content"],
        },
    },
    {
        "name": TOOL_UPDATE_PAGE,
        "description": "更新现有的Confluence页面 / Update an existing Confluence page",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "要更新的页面ID / ID of the page to update",
                },
                "title": {
                    "type": "string",
                    "description": "页面的新标题 / New title of the page",
                },
                "content": {
                    "type": "string",
                    "description": (
                        "使用Confluence存储格式（XHTML）的新内容。内容必须是有效的XHTML。 / "
                        "New content in Confluence Storage Format (XHTML). Content MUST be valid "
                        "XHTML; plain text or Markdown is displayed literally."
                    ),
                },
                "version": {
                    "type": "number",
                    "description": "页面的当前版本号 / Current version number of the page",
                },
            },
            "required": ["pageId", "title", "content", "version"],
        },
    },
    {
        "name": TOOL_GET_COMMENTS,
        "description": (
            "获取特定Confluence页面的评论 / Retrieve comments for a specific Confluence page"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "要获取评论的页面ID / ID of the page to retrieve comments for",
                },
                "format": _FORMAT_PROPERTY,
                "limit": _limit_property("评论", "comments", 25),
            },
            "required": ["pageId"],
        },
    },
    {
        "name": TOOL_ADD_COMMENT,
        "description": "向Confluence页面添加评论 / Add a comment to a Confluence page",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "要添加评论的页面ID / ID of the page to add the comment to",
                },
                "content": {
                    "type": "string",
                    "description": (
                        "使用Confluence存储格式（XHTML）的评论内容 / "
                        "Comment content in Confluence Storage Format (XHTML)"
                    ),
                },
                "parentId": {
                    "type": "string",
                    "description": (
                        "用于线程化的可选父评论ID / Optional ID of the parent comment for threading"
                    ),
                },
            },
            "required": ["pageId", "content"],
        },
    },
    {
        "name": TOOL_GET_ATTACHMENTS,
        "description": (
            "获取特定Confluence页面的附件 / Retrieve attachments for a specific Confluence page"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "要获取附件的页面ID / ID of the page to retrieve attachments for",
                },
                "limit": _limit_property("附件", "attachments", 25),
            },
            "required": ["pageId"],
        },
    },
    {
        "name": TOOL_ADD_ATTACHMENT,
        "description": "向Confluence页面添加附件 / Add an attachment to a Confluence page",
        "inputSchema": {
            "type": "object",
            "properties": {
                "pageId": {
                    "type": "string",
                    "description": "要附加文件的页面ID / ID of the page to attach the file to",
                },
                "filename": {
                    "type": "string",
                    "description": "附件的期望文件名 / Desired filename for the attachment",
                },
                "fileContentBase64": {
                    "type": "string",
                    "description": "文件的Base64编码内容 / Base64 encoded content of the file",
                },
                "comment": {
                    "type": "string",
                    "description": "附件版本的可选注释 / Optional comment for the attachment version",
                },
            },
            "required": ["pageId", "filename", "fileContentBase64"],
        },
    },
]
