import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from confluence_mcp_server.confluence.api_client import ConfluenceClient

BASE_URL = "https://example.atlassian.net/wiki"
API_TOKEN = "api-token-123"


class FakeConfluence:
    """
    Records every request and answers through a user-supplied handler.

    The handler receives the ``httpx.Request`` and returns an
    ``httpx.Response``. ``json_body(i)`` decodes the i-th request body.
    """

    def __init__(self, handler: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self.handler = handler or (lambda request: httpx.Response(200, json={}))
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def json_body(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


class SleepSpy:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_page(**overrides: Any) -> Dict[str, Any]:
    page = {
        "id": "123",
        "title": "Test Page",
        "_expandable": {"space": "/rest/api/space/TEST"},
        "version": {"number": 5},
        "body": {"storage": {"value": "<p>Hello</p>"}},
        "created": "2023-01-01T12:00:00.000Z",
        "updated": "2023-01-02T12:00:00.000Z",
        "history": {
            "createdBy": {
                "accountId": "user-123",
                "displayName": "Test User",
                "email": "user@example.com",
            },
            "lastUpdated": {
                "by": {
                    "accountId": "user-456",
                    "displayName": "Another User",
                    "email": "another@example.com",
                },
            },
        },
        "_links": {
            "webui": "/pages/123",
            "editui": "/pages/123/edit",
            "tinyui": "/x/abc",
        },
        "ancestors": [{"id": "100"}, {"id": "parent-123"}],
        "metadata": {"labels": {"results": [{"name": "test-label", "id": "label-123"}]}},
    }
    page.update(overrides)
    return page


def make_comment(**overrides: Any) -> Dict[str, Any]:
    comment = {
        "id": "c1",
        "body": {"storage": {"value": "<p>Nice <b>work</b></p>"}},
        "history": {
            "createdDate": "2023-01-03T09:00:00.000Z",
            "createdBy": {"accountId": "user-1", "displayName": "Commenter"},
        },
        "version": {
            "number": 1,
            "when": "2023-01-03T10:00:00.000Z",
            "by": {"accountId": "user-2", "displayName": "Editor"},
        },
        "ancestors": [],
        "_links": {"webui": "/pages/123?focusedCommentId=c1"},
    }
    comment.update(overrides)
    return comment


def make_attachment(**overrides: Any) -> Dict[str, Any]:
    attachment = {
        "id": "att123",
        "title": "test-file.txt",
        "metadata": {"mediaType": "text/plain"},
        "extensions": {"fileSize": 1024},
        "version": {
            "number": 1,
            "message": "Initial upload",
            "when": "2023-01-04T10:00:00.000Z",
            "by": {
                "accountId": "user-123",
                "displayName": "Test User",
                "email": "user@example.com",
            },
        },
        "_links": {
            "webui": "/display/SPACE/PageName?preview=/download/attachments/123/test-file.txt",
            "download": "/download/attachments/123/test-file.txt",
        },
    }
    attachment.update(overrides)
    return attachment


@pytest.fixture
def sleep_spy() -> SleepSpy:
    return SleepSpy()


@pytest.fixture
def fake_confluence() -> FakeConfluence:
    return FakeConfluence()


@pytest.fixture
def client(fake_confluence, sleep_spy) -> ConfluenceClient:
    return ConfluenceClient(
        BASE_URL,
        API_TOKEN,
        transport=fake_confluence.transport,
        sleep=sleep_spy,
    )
