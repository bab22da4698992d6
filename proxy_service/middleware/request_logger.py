"""
Request Logger Middleware Module

Logs a dump of every inbound request (request line, headers and body) before
it reaches the proxy pipeline. Credentials are masked.
"""

import logging
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import ClientDisconnect
from starlette.types import ASGIApp

from proxy_service.common.responses import error_response
from proxy_service.common.sanitizer import sanitize_headers

logger = logging.getLogger(__name__)

MAX_LOG_BODY_LENGTH = 10000


def _truncate_log_text(text: str) -> str:
    if len(text) <= MAX_LOG_BODY_LENGTH:
        return text
    return f"{text[:MAX_LOG_BODY_LENGTH]}...[truncated]"


def dump_request(request: Request, body: bytes) -> str:
    """
    Render a request the way it appeared on the wire

    Returns:
        str: Request line, headers and body
    """
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    version = request.scope.get("http_version", "1.1")

    lines = [f"{request.method} {target} HTTP/{version}"]
    lines.extend(f"{key}: {value}" for key, value in sanitize_headers(request.headers.items()))
    lines.append("")
    lines.append(_truncate_log_text(body.decode("utf-8", errors="replace")))
    return "\n".join(lines)


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Request Logger Middleware

    The body read here is cached by Starlette and replayed to the route.
    """

    def __init__(self, app: ASGIApp, enabled: bool = True) -> None:
        super().__init__(app)
        self.enabled = enabled
        logger.info("Request logger middleware initialized: enabled=%s", self.enabled)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log the request, then pass it on."""
        if not self.enabled:
            return await call_next(request)

        try:
            body = await request.body()
        except ClientDisconnect:
            return error_response(400, "bad request")

        logger.info("request: payload=\n%s", dump_request(request, body))
        return await call_next(request)
