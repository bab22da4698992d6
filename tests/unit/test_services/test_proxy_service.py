"""
Proxy Service Unit Tests

Drive the pipeline with raw ASGI requests so client disconnects can be simulated.
"""

import asyncio
import json
import logging
import time

import anyio
import httpx
import pytest
from starlette.requests import Request

from conftest import UpstreamRecorder, make_settings
from proxy_service.common.errors import InvalidRequestBodyError
from proxy_service.common.http_client import HttpClient
from proxy_service.services.forwarder import BackendForwarder
from proxy_service.services.proxy_service import ProxyService

BODY = b'{"body": "good_message"}'


def _request(*messages: dict) -> Request:
    """Build a request whose client sends `messages`, then stays connected"""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "server": ("proxy.test", 80),
        "root_path": "",
        "path": "/posts",
        "raw_path": b"/posts",
        "query_string": b"",
        "headers": [
            (b"host", b"proxy.test"),
            (b"content-type", b"application/json"),
        ],
    }
    pending = list(messages)

    async def receive() -> dict:
        if pending:
            return pending.pop(0)
        await anyio.sleep_forever()

    return Request(scope, receive)


def _service(handler) -> ProxyService:
    client = HttpClient(timeout=5, transport=httpx.MockTransport(handler))
    return ProxyService(settings=make_settings(), forwarder=BackendForwarder(client))


class TestReadBody:
    """Tests for body capture failures"""

    @pytest.mark.asyncio
    async def test_disconnect_while_reading_raises_invalid_body(self):
        service = _service(UpstreamRecorder())
        request = _request({"type": "http.disconnect"})

        with pytest.raises(InvalidRequestBodyError) as exc_info:
            await service.read_body(request)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "invalid request body"

    @pytest.mark.asyncio
    async def test_unreadable_body_answers_bad_request(self):
        upstream = UpstreamRecorder()
        service = _service(upstream)

        response = await service.handle(_request({"type": "http.disconnect"}))

        assert response.status_code == 400
        assert json.loads(response.body) == {"code": "400", "msg": "invalid request body"}
        assert upstream.requests == []


class TestForwardWhileConnected:
    """Tests for abandoning the upstream call when the client goes away"""

    @pytest.mark.asyncio
    async def test_disconnect_abandons_slow_upstream(self, caplog):
        async def slow_upstream(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, content=b"{}")

        service = _service(slow_upstream)
        request = _request(
            {"type": "http.request", "body": BODY, "more_body": False},
            {"type": "http.disconnect"},
        )

        start = time.monotonic()
        with caplog.at_level(logging.WARNING, logger="proxy_service.services.proxy_service"):
            response = await service.handle(request)

        assert time.monotonic() - start < 1
        assert response.status_code == 502
        assert json.loads(response.body) == {"code": "502", "msg": "bad gateway"}
        assert "Client disconnected before upstream responded" in caplog.text

    @pytest.mark.asyncio
    async def test_connected_client_gets_upstream_response(self):
        upstream = UpstreamRecorder(status_code=201)
        service = _service(upstream)
        request = _request({"type": "http.request", "body": BODY, "more_body": False})

        response = await service.handle(request)

        chunks = [chunk async for chunk in response.body_iterator]
        assert response.status_code == 201
        assert response.headers["x-proxy-request-id"]
        assert b"".join(chunks) == b'{"id": 101}'
        assert upstream.last.content == BODY
