import base64
from typing import Callable, Dict, List, Union
from unittest.mock import AsyncMock

import httpx
import pytest

from inliner.client import InlinerClient
from inliner.core.config import InlinerSettings
from inliner.services import asset_workflow

API_URL = "https://api.test"
IMAGE_URL = "https://img.test"

PNG_BYTES = b"\x89PNG\r\n\x1a\n-fake-image-body"
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeApi:
    """
    Routes requests by "METHOD url-without-query".
    A route holding several replies hands them out in order and repeats the last one.
    """

    def __init__(self):
        self.routes: Dict[str, List[Reply]] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, url: str, *replies: Reply):
        self.routes[f"{method} {url}"] = list(replies)

    def calls(self, method: str, url: str) -> List[httpx.Request]:
        return [r for r in self.requests if self._key(r) == f"{method} {url}"]

    @staticmethod
    def _key(request: httpx.Request) -> str:
        return f"{request.method} {request.url.scheme}://{request.url.host}{request.url.path}"

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        replies = self.routes.get(self._key(request))
        if not replies:
            return httpx.Response(404, json={"message": f"no route for {self._key(request)}"})
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if callable(reply):
            return reply(request)
        # A fresh copy per call; the client binds each response to its request
        return httpx.Response(reply.status_code, headers=reply.headers, content=reply.content)


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def settings():
    return InlinerSettings(API_KEY="test-key", API_URL=API_URL + "/", IMAGE_URL=IMAGE_URL + "/")


@pytest.fixture
def client(fake_api, settings):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_api))
    return InlinerClient(settings=settings, http_client=http_client)


@pytest.fixture
def no_sleep(monkeypatch):
    """Skips the real delay between poll attempts and records it instead."""
    sleep = AsyncMock()
    monkeypatch.setattr(asset_workflow.asyncio, "sleep", sleep)
    return sleep
