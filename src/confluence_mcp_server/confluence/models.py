"""
Confluence Record Models

Normalized, immutable snapshots of wiki entities. Every record is produced by
the gateway from a raw REST response; nothing here is persisted.

Field names are snake_case in Python and serialize to camelCase
(``spaceKey``, ``contentMarkup``...) when dumped with ``by_alias=True``.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------------------------------------------------------------------
# Shared Value Objects
# ---------------------------------------------------------------------

class UserRef(_Record):
    """Identity of a creator or updater."""
    id: str = ""
    display_name: str = ""
    email: Optional[str] = None


class Label(_Record):
    name: str
    id: str


class PageLinks(_Record):
    webui: str = ""
    edit: str = ""
    tinyui: str = ""


class CommentLinks(_Record):
    webui: str = ""


class AttachmentLinks(_Record):
    webui: str = ""
    download: str = ""


# ---------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------

class Page(_Record):
    """
    A wiki page as of the last successful read.

    ``content`` holds tag-stripped text; ``content_markup`` keeps the raw
    storage-format body.
    """
    id: str
    title: str
    space_key: str = ""
    version: int = 1
    content: str = ""
    content_markup: Optional[str] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    created_by: UserRef = Field(default_factory=UserRef)
    updated_by: UserRef = Field(default_factory=UserRef)
    links: PageLinks = Field(default_factory=PageLinks)
    parent_id: Optional[str] = None
    children_ids: Optional[List[str]] = None
    labels: Optional[List[Label]] = None


class Space(_Record):
    id: str
    key: str
    name: str
    description: Optional[str] = None
    # global, personal or team; kept open for newer wiki space types
    type: str


class Comment(_Record):
    id: str
    page_id: str
    content: str = ""
    created: str = ""
    created_by: UserRef = Field(default_factory=UserRef)
    updated: Optional[str] = None
    updated_by: Optional[UserRef] = None
    parent_id: Optional[str] = None
    links: CommentLinks = Field(default_factory=CommentLinks)


class Attachment(_Record):
    id: str
    page_id: str
    title: str
    media_type: str = "application/octet-stream"
    file_size: int = 0
    created: str = ""
    created_by: UserRef = Field(default_factory=UserRef)
    version: int = 1
    links: AttachmentLinks = Field(default_factory=AttachmentLinks)
    comment: str = ""


# ---------------------------------------------------------------------
# Collection Results
# ---------------------------------------------------------------------

class SearchPagesResult(_Record):
    total: int = 0
    pages: List[Page] = Field(default_factory=list)


class SpacesResult(_Record):
    total: int = 0
    spaces: List[Space] = Field(default_factory=list)


class CommentsResult(_Record):
    total: int = 0
    comments: List[Comment] = Field(default_factory=list)


class AttachmentsResult(_Record):
    total: int = 0
    attachments: List[Attachment] = Field(default_factory=list)
