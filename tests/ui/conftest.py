from __future__ import annotations

import json
from typing import Any

import httpx
import pytest


class FakeBackend:
    """Routes requests to canned JSON responses and records what was sent."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, method: str, path: str, body: Any, status_code: int = 200) -> None:
        self.routes[(method, path)] = (status_code, body)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.method == method and r.url.path == path
        ]

    def last_json(self, method: str, path: str) -> Any:
        return json.loads(self.calls(method, path)[-1].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        status_code, body = route
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def api_client(backend: FakeBackend):
    """LawMastersAPIClient wired to the in-process fake backend."""

    from lawmasters.ui.api_client import LawMastersAPIClient

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(backend.handler), base_url="http://test"
    ) as c:
        yield LawMastersAPIClient(base_url="http://test", client=c)
