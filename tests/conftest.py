"""
Test Configuration Module
"""

from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from proxy_service.config import Settings
from proxy_service.main import create_app

TARGET_URL = "http://backend.test/base/"


class UpstreamRecorder:
    """Stands in for the target service, recording every request it receives"""

    def __init__(self, status_code: int = 200, body: bytes = b'{"id": 101}'):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            content=self.body,
            headers={
                "Content-Type": "application/json; charset=utf-8",
                "X-Upstream": "backend",
            },
        )

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "TARGET_URL": TARGET_URL,
        "REQUEST_DELAY": 0,
        "BODY_METHODS_ONLY": False,
        "REJECT_WITH": "",
        "REJECT_MATCH": "exact",
        "REJECT_INSENSITIVE": False,
        "LOG_REQUESTS": True,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def upstream() -> UpstreamRecorder:
    return UpstreamRecorder()


@pytest_asyncio.fixture
async def make_proxy(upstream):
    """Factory creating a client for a proxy app wired to a mock upstream"""
    clients: list[AsyncClient] = []

    def _make(
        settings: Optional[Settings] = None,
        handler: Any = None,
        **overrides: Any,
    ) -> AsyncClient:
        settings = settings or make_settings(**overrides)
        transport = httpx.MockTransport(handler or upstream)
        app = create_app(settings, transport=transport)
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://proxy.test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
