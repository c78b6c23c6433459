"""
Confluence REST API Client

This module is the content gateway: one coroutine per logical wiki operation,
each issuing one or more authenticated HTTP calls and returning a normalized
record from ``confluence.models``.

Design Goals
------------
- Fixed header set built once per client
- Injectable HTTP transport and sleep for testing
- Classified failures (not-found, API error, contract violation)
- Transport failures propagate unchanged
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from urllib.parse import quote
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .models import (
    Attachment,
    AttachmentLinks,
    AttachmentsResult,
    Comment,
    CommentLinks,
    CommentsResult,
    Label,
    Page,
    PageLinks,
    SearchPagesResult,
    Space,
    SpacesResult,
    UserRef,
)
from ..content.cleaner import extract_text_content
from ..core.errors import ConfluenceApiError, ContentNotFoundError, ContractViolationError

logger = logging.getLogger("mcp.confluence")

API_PREFIX = "/rest/api"

PAGE_EXPAND = "body.storage,version,ancestors,history,metadata.labels,space,children.page"
SEARCH_EXPAND = "body.storage,version,ancestors,history,metadata.labels,space"
COMMENT_EXPAND = "body.storage,version,history,ancestors"
ATTACHMENT_EXPAND = "version,history,metadata"

# content/{id} or content/{id}/child/...; only numeric ids count as missing content
_CONTENT_PATH_RE = re.compile(r"^content/([^/?]+)")

Sleep = Callable[[float], Awaitable[Any]]


# ---------------------------------------------------------------------
# Normalization Helpers
# ---------------------------------------------------------------------

def _user_ref(raw: Optional[Dict[str, Any]]) -> UserRef:
    raw = raw or {}
    return UserRef(
        id=raw.get("accountId") or "",
        display_name=raw.get("displayName") or "",
        email=raw.get("email"),
    )


def _storage_value(raw: Dict[str, Any]) -> str:
    return ((raw.get("body") or {}).get("storage") or {}).get("value") or ""


def _last_ancestor_id(raw: Dict[str, Any]) -> Optional[str]:
    ancestors = raw.get("ancestors") or []
    if not ancestors:
        return None
    return str(ancestors[-1]["id"])


def _space_key(raw: Dict[str, Any]) -> str:
    expandable = (raw.get("_expandable") or {}).get("space")
    if expandable:
        return expandable.rstrip("/").split("/")[-1]
    return (raw.get("space") or {}).get("key") or ""


def _content_path(content_id: Any, suffix: str = "") -> str:
    # ids are a single path segment; "/" or "?" must not reach another endpoint
    return f"content/{quote(str(content_id), safe='')}{suffix}"


# ---------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------

class ConfluenceClient:
    """
    Async gateway to the Confluence REST API.

    Parameters
    ----------
    base_url : str
        Wiki base URL, e.g. ``https://example.atlassian.net/wiki``.

    api_token : str
        Bearer credential.

    request_delay_ms : int
        Fixed pause before every request. Zero or negative disables it.

    transport : httpx.AsyncBaseTransport
        Optional testing override for the HTTP transport.

    sleep : Callable
        Optional testing override for the pacing sleep.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        request_delay_ms: int = 200,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.request_delay_ms = request_delay_ms
        self._transport = transport
        self._sleep = sleep
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        if self.request_delay_ms > 0:
            await self._sleep(self.request_delay_ms / 1000)

    async def _send(
        self,
        method: str,
        path: str,
        headers: Dict[str, str],
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Issue a single request against ``{base_url}/rest/api/{path}``.

        Raises a classified error for any non-success status.
        """
        await self._throttle()

        url = f"{self.base_url}{API_PREFIX}/{path}"
        logger.debug("Confluence request: %s %s", method, url)

        async with httpx.AsyncClient(transport=self._transport) as client:
            resp = await client.request(method, url, headers=headers, **kwargs)

        if not resp.is_success:
            self._raise_for_status(resp, path)
        return resp

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        resp = await self._send(
            method,
            path,
            self._headers,
            params=params,
            json=payload,
        )
        return resp.json()

    def _raise_for_status(self, resp: httpx.Response, path: str) -> None:
        try:
            error_data = resp.json()
        except ValueError:
            error_data = {}
        if not isinstance(error_data, dict):
            error_data = {}

        match = _CONTENT_PATH_RE.match(path)
        if resp.status_code == 404 and match and match.group(1).isdigit():
            raise ContentNotFoundError(match.group(1))

        message = (
            error_data.get("message")
            or error_data.get("errorMessage")
            or resp.reason_phrase
        )
        logger.error(
            "Confluence API error details: %s",
            json.dumps(error_data, indent=2),
        )
        raise ConfluenceApiError(message, resp.status_code, details=error_data)

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def _clean_page(self, raw: Dict[str, Any]) -> Page:
        body = _storage_value(raw)
        history = raw.get("history") or {}
        last_updated = history.get("lastUpdated") or {}
        links = raw.get("_links") or {}

        labels: Optional[List[Label]] = None
        label_results = ((raw.get("metadata") or {}).get("labels") or {}).get("results")
        if label_results is not None:
            labels = [
                Label(name=label.get("name") or "", id=str(label.get("id") or ""))
                for label in label_results
            ]

        children_ids: Optional[List[str]] = None
        child_pages = ((raw.get("children") or {}).get("page") or {}).get("results")
        if child_pages is not None:
            children_ids = [str(child["id"]) for child in child_pages]

        return Page(
            id=str(raw["id"]),
            title=raw.get("title") or "",
            space_key=_space_key(raw),
            version=(raw.get("version") or {}).get("number") or 1,
            content=extract_text_content(body),
            content_markup=body,
            created=raw.get("created") or history.get("createdDate"),
            updated=raw.get("updated") or last_updated.get("when"),
            created_by=_user_ref(history.get("createdBy")),
            updated_by=_user_ref(last_updated.get("by")),
            links=PageLinks(
                webui=links.get("webui") or "",
                edit=links.get("editui") or "",
                tinyui=links.get("tinyui") or "",
            ),
            parent_id=_last_ancestor_id(raw),
            children_ids=children_ids,
            labels=labels,
        )

    def _clean_comment(self, raw: Dict[str, Any], page_id: str) -> Comment:
        history = raw.get("history") or {}
        version = raw.get("version") or {}

        return Comment(
            id=str(raw["id"]),
            page_id=page_id,
            content=extract_text_content(_storage_value(raw)),
            created=history.get("createdDate") or "",
            created_by=_user_ref(history.get("createdBy")),
            updated=version.get("when"),
            updated_by=_user_ref(version["by"]) if version.get("by") else None,
            parent_id=_last_ancestor_id(raw),
            links=CommentLinks(webui=(raw.get("_links") or {}).get("webui") or ""),
        )

    def _clean_attachment(self, raw: Dict[str, Any], page_id: str) -> Attachment:
        version = raw.get("version") or {}
        version_by = version.get("by") or {}
        history = raw.get("history") or {}
        history_by = history.get("createdBy") or {}
        metadata = raw.get("metadata") or {}
        links = raw.get("_links") or {}

        return Attachment(
            id=str(raw["id"]),
            page_id=page_id,
            title=raw.get("title") or "",
            media_type=metadata.get("mediaType") or "application/octet-stream",
            file_size=(raw.get("extensions") or {}).get("fileSize") or 0,
            created=version.get("when") or history.get("createdDate") or "",
            created_by=UserRef(
                id=version_by.get("accountId") or history_by.get("accountId") or "",
                display_name=(
                    version_by.get("displayName") or history_by.get("displayName") or ""
                ),
                email=version_by.get("email") or history_by.get("email"),
            ),
            version=version.get("number") or 1,
            links=AttachmentLinks(
                webui=links.get("webui") or "",
                download=self.base_url + (links.get("download") or ""),
            ),
            comment=version.get("message") or metadata.get("comment") or "",
        )

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def get_page(self, page_id: str) -> Page:
        """
        Fetch a page by id.

        Raises
        ------
        ValueError
            If ``page_id`` is empty.

        ContentNotFoundError
            If a numeric id does not exist.
        """
        if not page_id:
            raise ValueError("get_page requires a non-empty page id.")

        raw = await self._request(
            "GET",
            _content_path(page_id),
            params={"expand": PAGE_EXPAND},
        )
        return self._clean_page(raw)

    async def search_pages(self, query: str) -> SearchPagesResult:
        """Search pages with a CQL query."""
        data = await self._request(
            "GET",
            "content/search",
            params={"cql": query, "limit": "50", "expand": SEARCH_EXPAND},
        )
        return SearchPagesResult(
            total=data.get("totalSize") or data.get("size") or 0,
            pages=[self._clean_page(page) for page in data.get("results") or []],
        )

    async def get_spaces(self) -> SpacesResult:
        data = await self._request(
            "GET",
            "space",
            params={"limit": "100", "expand": "description.plain"},
        )
        spaces = [
            Space(
                id=str(space.get("id") or ""),
                key=space.get("key") or "",
                name=space.get("name") or "",
                description=(
                    ((space.get("description") or {}).get("plain") or {}).get("value")
                ),
                type=(space.get("type") or "").lower(),
            )
            for space in data.get("results") or []
        ]
        return SpacesResult(total=data.get("size") or 0, spaces=spaces)

    async def create_page(
        self,
        space_key: str,
        title: str,
        content: str,
        parent_id: Optional[str] = None,
    ) -> Page:
        """
        Create a page, then re-fetch it for a fully normalized record.
        """
        payload: Dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": {"storage": {"value": content, "representation": "storage"}},
        }
        if parent_id:
            payload["ancestors"] = [{"id": parent_id}]

        created = await self._request("POST", "content", payload=payload)
        logger.info("Created page %s in space %s", created.get("id"), space_key)
        return await self.get_page(str(created["id"]))

    async def update_page(
        self,
        page_id: str,
        title: str,
        content: str,
        version: int,
    ) -> Page:
        """
        Update a page.

        The submitted version is always ``version + 1``. The upfront GET only
        supplies the space key; it never overrides the caller's version.
        """
        current = await self.get_page(page_id)

        payload = {
            "type": "page",
            "title": title,
            "space": {"key": current.space_key},
            "body": {"storage": {"value": content, "representation": "storage"}},
            "version": {"number": version + 1},
        }

        await self._request("PUT", _content_path(page_id), payload=payload)
        logger.info("Updated page %s to version %d", page_id, version + 1)
        return await self.get_page(page_id)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def get_comments(self, page_id: str) -> CommentsResult:
        data = await self._request(
            "GET",
            _content_path(page_id, "/child/comment"),
            params={"expand": COMMENT_EXPAND, "limit": "100"},
        )
        return CommentsResult(
            total=data.get("size") or 0,
            comments=[
                self._clean_comment(comment, page_id)
                for comment in data.get("results") or []
            ],
        )

    async def add_comment(
        self,
        page_id: str,
        content: str,
        parent_id: Optional[str] = None,
    ) -> Comment:
        """
        Add a comment (or a threaded reply when ``parent_id`` is given).
        """
        payload: Dict[str, Any] = {
            "type": "comment",
            "container": {"id": page_id, "type": "page"},
            "body": {"storage": {"value": content, "representation": "storage"}},
        }
        if parent_id:
            payload["ancestors"] = [{"id": parent_id}]

        created = await self._request("POST", "content", payload=payload)
        full = await self._request(
            "GET",
            _content_path(created["id"]),
            params={"expand": COMMENT_EXPAND},
        )
        return self._clean_comment(full, page_id)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    async def get_attachments(self, page_id: str) -> AttachmentsResult:
        data = await self._request(
            "GET",
            _content_path(page_id, "/child/attachment"),
            params={"expand": ATTACHMENT_EXPAND, "limit": "100"},
        )
        return AttachmentsResult(
            total=data.get("size") or 0,
            attachments=[
                self._clean_attachment(attachment, page_id)
                for attachment in data.get("results") or []
            ],
        )

    async def add_attachment(
        self,
        page_id: str,
        file_content: bytes,
        filename: str,
        comment: Optional[str] = None,
    ) -> Attachment:
        """
        Upload a file to a page as a single multipart POST.

        Raises
        ------
        ContractViolationError
            If the wiki answers successfully without a ``results`` entry.
        """
        upload_headers = {
            key: value
            for key, value in self._headers.items()
            if key != "Content-Type"
        }
        upload_headers["X-Atlassian-Token"] = "no-check"

        resp = await self._send(
            "POST",
            _content_path(page_id, "/child/attachment"),
            upload_headers,
            files={"file": (filename, file_content)},
            data={"comment": comment} if comment else None,
        )

        results = (resp.json() or {}).get("results") or []
        if not results:
            raise ContractViolationError(
                "Failed to retrieve attachment details after upload"
            )
        return self._clean_attachment(results[0], page_id)
