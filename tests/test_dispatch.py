import base64
import json

import httpx
import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, METHOD_NOT_FOUND

from confluence_mcp_server.tools import base
from confluence_mcp_server.tools.base import ToolDispatcher
from confluence_mcp_server.tools.definitions import READ_ONLY_TOOLS, TOOL_DEFINITIONS
from confluence_mcp_server.content.cleaner import TRUNCATION_MARKER

from conftest import make_attachment, make_comment, make_page


def _payload(result):
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    return json.loads(result.content[0].text)


@pytest.fixture
def dispatcher(client):
    return ToolDispatcher(client)


@pytest.fixture
def read_only_dispatcher(client):
    return ToolDispatcher(client, read_only=True)


# ---------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------

def test_catalog_lists_every_tool(dispatcher):
    names = [tool["name"] for tool in dispatcher.list_tools()]
    assert names == [
        "get_page",
        "search_pages",
        "get_spaces",
        "create_page",
        "update_page",
        "get_comments",
        "add_comment",
        "get_attachments",
        "add_attachment",
    ]


def test_catalog_definitions_are_registered_and_bilingual():
    for tool in TOOL_DEFINITIONS:
        assert tool["name"] in base.TOOL_REGISTRY
        assert " / " in tool["description"]
        assert tool["inputSchema"]["type"] == "object"


def test_read_only_catalog_is_filtered(read_only_dispatcher):
    names = {tool["name"] for tool in read_only_dispatcher.list_tools()}
    assert names == set(READ_ONLY_TOOLS)
    assert "add_comment" in names
    assert "create_page" not in names


def test_custom_capability_set(client):
    dispatcher = ToolDispatcher(client, read_only=True, allowed_tools=frozenset({"get_page"}))
    assert [tool["name"] for tool in dispatcher.list_tools()] == ["get_page"]


# ---------------------------------------------------------------------
# Read-Only Enforcement
# ---------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("tool_name, arguments", [
    ("create_page", {"spaceKey": "TEST", "title": "t", "content": "<p>c</p>"}),
    ("update_page", {"pageId": "123", "title": "t", "content": "<p>c</p>", "version": 1}),
    ("add_attachment", {"pageId": "123", "filename": "a.txt", "fileContentBase64": "YQ=="}),
])
async def test_read_only_rejects_mutations_without_http(
    read_only_dispatcher, fake_confluence, tool_name, arguments
):
    result = await read_only_dispatcher.call_tool(tool_name, arguments)

    assert result.isError is True
    text = result.content[0].text
    assert "read-only mode" in text
    assert "只读模式" in text
    assert tool_name in text
    assert fake_confluence.requests == []


@pytest.mark.asyncio
async def test_read_only_allows_add_comment(read_only_dispatcher, fake_confluence):
    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"id": "c9"})
        return httpx.Response(200, json=make_comment(id="c9"))

    fake_confluence.handler = handler

    result = await read_only_dispatcher.call_tool(
        "add_comment", {"pageId": "123", "content": "<p>Hi</p>"}
    )

    assert not result.isError
    payload = _payload(result)
    assert payload["id"] == "c9"
    assert payload["message"] == "Comment added successfully"


# ---------------------------------------------------------------------
# Protocol-Level Errors
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_unknown_tool_is_method_not_found(dispatcher):
    with pytest.raises(McpError) as excinfo:
        await dispatcher.call_tool("delete_everything", {})

    assert excinfo.value.error.code == METHOD_NOT_FOUND
    assert "Unknown tool: delete_everything" in excinfo.value.error.message


@pytest.mark.asyncio
async def test_fault_outside_handler_is_internal_error(dispatcher, monkeypatch):
    async def broken(client, args):
        raise RuntimeError("boom")

    monkeypatch.setitem(base.TOOL_REGISTRY, "get_page", broken)

    with pytest.raises(McpError) as excinfo:
        await dispatcher.call_tool("get_page", {"pageId": "123"})

    assert excinfo.value.error.code == INTERNAL_ERROR
    assert excinfo.value.error.message == "boom"


# ---------------------------------------------------------------------
# Tool Results
# ---------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_page_returns_full_text(dispatcher, fake_confluence):
    long_body = "<p>" + " ".join(["word"] * 1000) + "</p>"
    fake_confluence.handler = lambda request: httpx.Response(
        200, json=make_page(body={"storage": {"value": long_body}})
    )

    result = await dispatcher.call_tool("get_page", {"pageId": "123"})

    assert not result.isError
    payload = _payload(result)
    assert payload["id"] == "123"
    assert payload["spaceKey"] == "TEST"
    assert payload["url"] == "/pages/123"
    assert payload["version"] == 5
    assert payload["createdBy"] == "Test User"
    assert payload["updatedBy"] == "Another User"
    assert "contentMarkup" not in payload
    assert not payload["content"].endswith(TRUNCATION_MARKER)
    assert len(payload["content"]) == len(" ".join(["word"] * 1000))


@pytest.mark.asyncio
async def test_get_page_includes_markup_and_markdown_on_request(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(
        200, json=make_page(body={"storage": {"value": "<p>Intro • one • two</p>"}})
    )

    result = await dispatcher.call_tool(
        "get_page", {"pageId": "123", "format": "markdown", "includeMarkup": True}
    )

    payload = _payload(result)
    assert payload["content"] == "Intro\n- one\n- two"
    assert payload["contentMarkup"] == "<p>Intro • one • two</p>"


@pytest.mark.asyncio
async def test_get_page_not_found_is_error_flagged(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(404, json={})

    result = await dispatcher.call_tool("get_page", {"pageId": "999"})

    assert result.isError is True
    assert result.content[0].text == "Error retrieving page: Content not found: 999"


@pytest.mark.asyncio
async def test_missing_required_argument_is_error_flagged(dispatcher, fake_confluence):
    result = await dispatcher.call_tool("get_page", {})

    assert result.isError is True
    assert result.content[0].text.startswith("Error retrieving page:")
    assert fake_confluence.requests == []


@pytest.mark.asyncio
async def test_search_pages_applies_limit_and_optimization(dispatcher, fake_confluence):
    long_body = "<p>" + " ".join(["word"] * 1000) + "</p>"
    fake_confluence.handler = lambda request: httpx.Response(200, json={
        "results": [
            make_page(id=str(i), body={"storage": {"value": long_body}})
            for i in range(15)
        ],
        "totalSize": 15,
    })

    result = await dispatcher.call_tool("search_pages", {"query": "space=TEST"})

    payload = _payload(result)
    assert payload["total"] == 15
    assert payload["returned"] == 10
    assert len(payload["pages"]) == 10
    first = payload["pages"][0]
    assert first["content"].endswith(TRUNCATION_MARKER)
    assert first["updatedBy"] == "Another User"
    assert "contentMarkup" not in first


@pytest.mark.asyncio
async def test_search_pages_error_prefix(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(400, json={"message": "Bad CQL"})

    result = await dispatcher.call_tool("search_pages", {"query": "nonsense ~~"})

    assert result.isError is True
    assert result.content[0].text == (
        "Error searching pages: Confluence API Error: Bad CQL (Status: 400)"
    )


@pytest.mark.asyncio
async def test_get_spaces_limit(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(200, json={
        "results": [
            {"id": i, "key": f"S{i}", "name": f"Space {i}", "type": "GLOBAL"}
            for i in range(5)
        ],
        "size": 5,
    })

    result = await dispatcher.call_tool("get_spaces", {"limit": 2})

    payload = _payload(result)
    assert payload["total"] == 5
    assert payload["returned"] == 2
    assert payload["spaces"][0] == {"id": "0", "key": "S0", "name": "Space 0", "type": "global"}


@pytest.mark.asyncio
async def test_create_page_payload(dispatcher, fake_confluence):
    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"id": "456"})
        return httpx.Response(200, json=make_page(id="456", ancestors=[{"id": "42"}]))

    fake_confluence.handler = handler

    result = await dispatcher.call_tool("create_page", {
        "spaceKey": "TEST",
        "title": "New",
        "content": "<p>c</p>",
        "parentId": "42",
    })

    payload = _payload(result)
    assert payload["id"] == "456"
    assert payload["parentId"] == "42"
    assert payload["message"] == "Page created successfully"


@pytest.mark.asyncio
async def test_update_page_payload(dispatcher, fake_confluence):
    def handler(request):
        if request.method == "PUT":
            return httpx.Response(200, json={"id": "123"})
        return httpx.Response(200, json=make_page(version={"number": 6}))

    fake_confluence.handler = handler

    result = await dispatcher.call_tool("update_page", {
        "pageId": "123",
        "title": "Test Page",
        "content": "<p>c</p>",
        "version": 5,
    })

    payload = _payload(result)
    assert payload["version"] == 6
    assert payload["message"] == "Page updated successfully"
    assert "parentId" not in payload
    assert fake_confluence.json_body(1)["version"] == {"number": 6}


@pytest.mark.asyncio
async def test_get_comments_defaults_and_shape(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(200, json={
        "results": [make_comment(id=f"c{i}") for i in range(30)],
        "size": 30,
    })

    result = await dispatcher.call_tool("get_comments", {"pageId": "123"})

    payload = _payload(result)
    assert payload["total"] == 30
    assert payload["returned"] == 25
    comment = payload["comments"][0]
    assert comment["pageId"] == "123"
    assert comment["content"] == "Nice work"
    assert comment["createdBy"]["displayName"] == "Commenter"
    assert "parentId" not in comment


@pytest.mark.asyncio
async def test_get_attachments_shape(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(
        200, json={"results": [make_attachment()], "size": 1}
    )

    result = await dispatcher.call_tool("get_attachments", {"pageId": "123", "limit": 5})

    payload = _payload(result)
    assert payload["returned"] == 1
    attachment = payload["attachments"][0]
    assert attachment["mediaType"] == "text/plain"
    assert attachment["fileSize"] == 1024
    assert attachment["links"]["download"].endswith("/download/attachments/123/test-file.txt")


@pytest.mark.asyncio
async def test_add_attachment_decodes_base64(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(200, json={
        "results": [make_attachment(title="report.pdf", version={"number": 1, "message": "v1"})]
    })

    result = await dispatcher.call_tool("add_attachment", {
        "pageId": "456",
        "filename": "report.pdf",
        "fileContentBase64": base64.b64encode(b"binary-bytes").decode(),
        "comment": "v1",
    })

    payload = _payload(result)
    assert payload["title"] == "report.pdf"
    assert payload["comment"] == "v1"
    assert payload["message"] == "Attachment added successfully"
    assert len(fake_confluence.requests) == 1
    assert b"binary-bytes" in fake_confluence.requests[0].content


@pytest.mark.asyncio
async def test_add_attachment_invalid_base64(dispatcher, fake_confluence):
    result = await dispatcher.call_tool("add_attachment", {
        "pageId": "456",
        "filename": "x.bin",
        "fileContentBase64": "not base64!!",
    })

    assert result.isError is True
    assert result.content[0].text.startswith("Error adding attachment:")
    assert fake_confluence.requests == []


@pytest.mark.asyncio
async def test_add_attachment_accepts_line_wrapped_base64(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(
        200, json={"results": [make_attachment()]}
    )
    data = bytes(range(256)) * 2
    wrapped = base64.encodebytes(data).decode()
    assert "\n" in wrapped.strip()

    result = await dispatcher.call_tool("add_attachment", {
        "pageId": "123",
        "filename": "blob.bin",
        "fileContentBase64": wrapped,
    })

    assert not result.isError
    assert len(fake_confluence.requests) == 1
    assert data in fake_confluence.requests[0].content


@pytest.mark.asyncio
async def test_numeric_ids_are_accepted(dispatcher, fake_confluence):
    fake_confluence.handler = lambda request: httpx.Response(200, json=make_page())

    result = await dispatcher.call_tool("get_page", {"pageId": 123})

    assert not result.isError
    assert fake_confluence.requests[0].url.path == "/wiki/rest/api/content/123"


@pytest.mark.asyncio
async def test_unknown_tool_in_read_only_mode_gets_read_only_result(
    read_only_dispatcher, fake_confluence
):
    result = await read_only_dispatcher.call_tool("delete_everything", {})

    assert result.isError is True
    assert "'delete_everything'" in result.content[0].text
    assert fake_confluence.requests == []
