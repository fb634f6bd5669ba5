"""Shared fixtures: a fake Branch API behind httpx.MockTransport."""

import asyncio
import json
from typing import Any

import httpx
import pytest

from branchweb.client import Branch
from branchweb.core.config import Config
from branchweb.model.page import PageContext
from branchweb.stores.storage import MemoryStorage

APP_ID = "5680621892404085"

OPEN_RESPONSE = {
    "session_id": "97141055400444225",
    "identity_id": "98807509250212101",
    "device_fingerprint_id": "79336952217731267",
    "link": "https://bnc.lt/i/4LYQTXE0_K",
    "data": "{}",
    "referring_identity": None,
}


class FakeBranchApi:
    """Records requests and answers them from a route table keyed by (method, path)."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        # When set, every request blocks until the event fires
        self.gate: asyncio.Event | None = None

    def route(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        text: str | None = None,
        status: int = 200,
    ) -> None:
        if text is not None:
            response = httpx.Response(status, text=text)
        else:
            response = httpx.Response(status, json=json_body if json_body is not None else {})
        self.routes[(method, path)] = response

    def fail(self, method: str, path: str, status: int = 500) -> None:
        self.route(method, path, json_body={"error": {"message": "boom"}}, status=status)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"error": {"message": "not found"}})
        return httpx.Response(response.status_code, content=response.content, headers=response.headers)

    @property
    def calls(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    def body(self, index: int = -1) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def query(self, index: int = -1) -> dict[str, str]:
        return dict(self.requests[index].url.params)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_api() -> FakeBranchApi:
    """Fake API with the session handshake routes in place."""
    api = FakeBranchApi()
    api.route("GET", "/_r", text="79336952217731267")
    api.route("POST", "/v1/open", json_body=OPEN_RESPONSE)
    return api


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def make_branch(fake_api, storage):
    """Factory building a Branch wired to the fake API."""

    def _make(page: PageContext | None = None, storage_override=None, config: Config | None = None) -> Branch:
        return Branch(
            config or Config(app_id=APP_ID),
            storage=storage_override or storage,
            page=page or PageContext.from_url("https://shop.example.com/", "pytest-agent", "en-US"),
            http_client=fake_api.client(),
        )

    return _make


@pytest.fixture
async def branch(make_branch, fake_api):
    """An initialized Branch with the handshake requests cleared."""
    client = make_branch()
    await client.initialize(APP_ID)
    fake_api.requests.clear()
    yield client
    await client.aclose()
