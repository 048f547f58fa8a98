import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from leadgen_gateway.config import Settings
from leadgen_gateway.main import create_app
from leadgen_gateway.services.gateway_service import GatewayService
from leadgen_gateway.services.store import MemoryStore

UPSTREAM = "https://upstream.test"


class FakeUpstream:
    """Routes ``(method, path)`` to canned responses and records every request."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}

    def add(
        self,
        method: str,
        path: str,
        *,
        status: int = 200,
        payload: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        body = {"status_code": status} if payload is None else payload
        self._routes[(method, path)] = lambda _request: httpx.Response(
            status, json=body, headers=headers
        )

    def add_handler(
        self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]
    ) -> None:
        self._routes[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "no such route"})
        return handler(request)

    def calls_to(self, path: str) -> list[httpx.Request]:
        return [call for call in self.calls if call.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key", base_url=UPSTREAM, quality_batch_pause=0)


@pytest.fixture
def make_client(upstream: FakeUpstream) -> Callable[..., TestClient]:
    def factory(settings: Settings) -> TestClient:
        gateway = GatewayService.from_settings(
            settings, transport=upstream.transport, store=MemoryStore()
        )
        return TestClient(create_app(settings, gateway))

    return factory


@pytest.fixture
def client(make_client, settings: Settings):
    with make_client(settings) as test_client:
        yield test_client
