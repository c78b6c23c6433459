"""
Tool Argument Models

Pydantic models mirroring the ``inputSchema`` of each entry in
``tools/definitions.py``. Field names are snake_case and accept the camelCase
keys sent by the MCP host.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ContentFormat = Literal["text", "markdown"]


class _ToolArgs(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        # hosts often send numeric ids for pageId/parentId
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class GetPageArgs(_ToolArgs):
    page_id: str = Field(..., min_length=1)
    format: ContentFormat = "text"
    include_markup: bool = False


class SearchPagesArgs(_ToolArgs):
    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=0)
    format: ContentFormat = "text"
    include_markup: bool = False


class GetSpacesArgs(_ToolArgs):
    limit: int = Field(default=50, ge=0)


class CreatePageArgs(_ToolArgs):
    space_key: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: str
    parent_id: Optional[str] = None


class UpdatePageArgs(_ToolArgs):
    page_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: str
    version: int = Field(..., ge=0)


class GetCommentsArgs(_ToolArgs):
    page_id: str = Field(..., min_length=1)
    format: ContentFormat = "text"
    limit: int = Field(default=25, ge=0)


class AddCommentArgs(_ToolArgs):
    page_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    parent_id: Optional[str] = None


class GetAttachmentsArgs(_ToolArgs):
    page_id: str = Field(..., min_length=1)
    limit: int = Field(default=25, ge=0)


class AddAttachmentArgs(_ToolArgs):
    page_id: str = Field(..., min_length=1)
    filename: str = Field(..., min_length=1)
    file_content_base64: str
    comment: Optional[str] = None
