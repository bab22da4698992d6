"""
Backend Forwarding Module

Sends rewritten requests to the target service and relays its response.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Optional

import anyio
import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from proxy_service.common.errors import UpstreamError
from proxy_service.common.http_client import HttpClient
from proxy_service.common.responses import JSON_MEDIA_TYPE
from proxy_service.services.rewriter import RewrittenRequest

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Proxy-Request-ID"


def generate_request_id() -> str:
    """
    Generate a proxy request ID

    Returns:
        str: UUID4 string
    """
    return str(uuid.uuid4())


@dataclass
class ForwardResult:
    """
    Outcome of a single forwarding attempt

    Exactly one of `response` (forwarded, upstream answered) or `error`
    (upstream could not be reached) is set.
    """

    request_id: str
    response: Optional[httpx.Response] = None
    error: Optional[UpstreamError] = None

    @property
    def is_success(self) -> bool:
        return self.response is not None and self.error is None


class BackendForwarder:
    """
    Backend Forwarder

    Performs exactly one attempt per request, no retries.
    """

    def __init__(self, client: HttpClient):
        self.client = client

    async def forward(
        self,
        request: RewrittenRequest,
        body: bytes,
        request_id: str,
    ) -> ForwardResult:
        """
        Forward a request to the target service

        The returned response is open; it is closed once relayed by `to_response`.

        Args:
            request: Rewritten request
            body: Raw request body
            request_id: Proxy request ID

        Returns:
            ForwardResult: Forwarding outcome
        """
        try:
            response = await self.client.send_stream(
                method=request.method,
                url=request.url,
                headers=request.headers,
                content=body,
            )
        except httpx.RequestError as e:
            logger.warning(
                "Upstream request failed: request_id=%s method=%s url=%s error=%s: %s",
                request_id,
                request.method,
                request.url,
                type(e).__name__,
                e,
            )
            return ForwardResult(request_id=request_id, error=UpstreamError())

        logger.debug(
            "Upstream responded: request_id=%s status=%s",
            request_id,
            response.status_code,
        )
        return ForwardResult(request_id=request_id, response=response)

    def to_response(self, result: ForwardResult) -> StreamingResponse:
        """
        Build the client response for a successful forward

        Only the status code and body are taken from the upstream response.
        """
        if result.response is None:
            raise ValueError("cannot relay a failed forward")

        return StreamingResponse(
            self._relay_body(result.response, result.request_id),
            status_code=result.response.status_code,
            headers={REQUEST_ID_HEADER: result.request_id},
            media_type=JSON_MEDIA_TYPE,
            background=BackgroundTask(result.response.aclose),
        )

    async def _relay_body(
        self,
        upstream: httpx.Response,
        request_id: str,
    ) -> AsyncGenerator[bytes, None]:
        copied = 0
        try:
            async for chunk in upstream.aiter_bytes():
                copied += len(chunk)
                yield chunk
        except httpx.HTTPError as e:
            # Status line is already sent, the client only sees a truncated body
            logger.error(
                "Failed to copy upstream response: request_id=%s copied=%d error=%s",
                request_id,
                copied,
                e,
            )
        except (GeneratorExit, anyio.get_cancelled_exc_class()):
            logger.warning(
                "Client went away before the response was copied: request_id=%s copied=%d",
                request_id,
                copied,
            )
            raise
        finally:
            try:
                # Client disconnect cancels the stream, still release the upstream connection
                with anyio.CancelScope(shield=True):
                    await upstream.aclose()
            except httpx.HTTPError as e:
                logger.error("Failed to close upstream response: request_id=%s error=%s", request_id, e)
            logger.debug("Copied bytes to client: request_id=%s bytes=%d", request_id, copied)
