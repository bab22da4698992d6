"""Proxy Core Service Module

Implements the per-request pipeline of the proxy."""

import asyncio
import logging
from typing import Optional

import anyio
from fastapi import Request
from fastapi.responses import Response
from starlette.datastructures import Headers
from starlette.requests import ClientDisconnect

from proxy_service.common.errors import (
    ALLOWED_BODY_METHODS,
    InvalidRequestBodyError,
    MethodNotAllowedError,
    ProxyError,
    UnsupportedMediaTypeError,
    UpstreamError,
)
from proxy_service.common.responses import JSON_MEDIA_TYPE, proxy_error_response
from proxy_service.config import Settings
from proxy_service.services.content_filter import ContentFilter
from proxy_service.services.duplicate_detector import (
    DuplicateRequestDetector,
    RequestSnapshot,
    project_headers,
)
from proxy_service.services.forwarder import (
    BackendForwarder,
    ForwardResult,
    generate_request_id,
)
from proxy_service.services.rewriter import RewrittenRequest, rewrite_request

logger = logging.getLogger(__name__)


def request_raw_path(request: Request) -> str:
    """Percent-encoded path as received, without the query string."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.url.path


def request_query_string(request: Request) -> str:
    return request.scope.get("query_string", b"").decode("latin-1")


def request_uri(request: Request) -> str:
    """Request target as sent by the client, e.g. "/posts?userId=1"."""
    query = request_query_string(request)
    path = request_raw_path(request)
    return f"{path}?{query}" if query else path


class ProxyService:
    """
    Proxy Core Service

    Handles the complete flow of a proxied request:
    1. Admission control (method, then Content-Type)
    2. Body capture and content filtering
    3. Consecutive duplicate detection, delaying repeats
    4. Rewrite for the target and forward
    5. Relay the upstream response, or answer with an error

    The first failing step ends the request. A duplicate is not a failure,
    it only postpones forwarding.
    """

    def __init__(
        self,
        settings: Settings,
        forwarder: BackendForwarder,
        detector: Optional[DuplicateRequestDetector] = None,
        content_filter: Optional[ContentFilter] = None,
    ):
        self.settings = settings
        self.forwarder = forwarder
        self.detector = detector or DuplicateRequestDetector()
        self.content_filter = content_filter or ContentFilter(
            phrase=settings.REJECT_WITH,
            exact=settings.reject_exact,
            insensitive=settings.REJECT_INSENSITIVE,
        )

    async def handle(self, request: Request) -> Response:
        """
        Process a request, rendering any pipeline failure as an error response
        """
        try:
            return await self.process_request(request)
        except ProxyError as e:
            return proxy_error_response(e)

    async def process_request(self, request: Request) -> Response:
        """
        Run the pipeline

        Raises:
            ProxyError: When a step rejects the request or forwarding fails
        """
        self.check_method(request.method)
        self.check_content_type(request.headers)

        body = await self.read_body(request)
        self.content_filter.validate(body.decode("utf-8", errors="replace"))

        await self.delay_if_consecutive(self.snapshot(request, body))

        rewritten = rewrite_request(
            target_url=self.settings.TARGET_URL,
            method=request.method,
            raw_path=request_raw_path(request),
            query_string=request_query_string(request),
            headers=request.headers.items(),
        )

        request_id = generate_request_id()
        logger.info("processing: X-Proxy-Request-ID=%s url=%s", request_id, rewritten.url)

        result = await self.forward_while_connected(request, rewritten, body, request_id)
        if not result.is_success:
            raise result.error
        return self.forwarder.to_response(result)

    def check_method(self, method: str) -> None:
        if self.settings.BODY_METHODS_ONLY and method not in ALLOWED_BODY_METHODS:
            raise MethodNotAllowedError(method)

    def check_content_type(self, headers: Headers) -> None:
        if headers.get("content-type") != JSON_MEDIA_TYPE:
            raise UnsupportedMediaTypeError()

    async def read_body(self, request: Request) -> bytes:
        try:
            return await request.body()
        except ClientDisconnect as e:
            logger.warning("Failed to read request body: %s", e)
            raise InvalidRequestBodyError() from e

    def snapshot(self, request: Request, body: bytes) -> RequestSnapshot:
        return RequestSnapshot(
            method=request.method,
            target_url=self.settings.TARGET_URL,
            target_uri=request_uri(request),
            headers=project_headers(request.headers.items()),
            body=body,
        )

    async def delay_if_consecutive(self, snapshot: RequestSnapshot) -> bool:
        """
        Delay the request when it repeats the one handled just before it

        Only this request is suspended; other requests keep flowing.

        Returns:
            bool: Whether the request was delayed
        """
        if not await self.detector.observe(snapshot):
            return False

        delay = self.settings.REQUEST_DELAY
        logger.info("consecutive requests detected, delaying response: seconds=%s", delay)
        if delay > 0:
            await asyncio.sleep(delay)
        return True

    async def forward_while_connected(
        self,
        request: Request,
        rewritten: RewrittenRequest,
        body: bytes,
        request_id: str,
    ) -> ForwardResult:
        """
        Forward the request, abandoning the upstream call if the client disconnects first

        Returns:
            ForwardResult: Forwarding outcome, a bad gateway error when abandoned
        """
        outcome: list[ForwardResult] = []

        async with anyio.create_task_group() as task_group:

            async def forward() -> None:
                outcome.append(await self.forwarder.forward(rewritten, body, request_id))
                task_group.cancel_scope.cancel()

            async def listen_for_disconnect() -> None:
                # The body is already read, the next message is the disconnect
                while True:
                    message = await request.receive()
                    if message["type"] == "http.disconnect":
                        break
                logger.warning(
                    "Client disconnected before upstream responded: X-Proxy-Request-ID=%s",
                    request_id,
                )
                task_group.cancel_scope.cancel()

            task_group.start_soon(forward)
            task_group.start_soon(listen_for_disconnect)

        if outcome:
            return outcome[0]
        return ForwardResult(request_id=request_id, error=UpstreamError())
