"""
Proxy API

Hands every request, whatever its method or path, to the pipeline.
"""

from fastapi import Request
from fastapi.responses import Response

from proxy_service.api.deps import get_proxy_service

PROXY_PATH = "/{path:path}"


async def proxy(request: Request) -> Response:
    """
    Forward the request to the target service

    Registered as a plain Starlette route without a method list, so methods
    such as TRACE or PROPFIND reach the pipeline too.
    """
    service = get_proxy_service(request)
    return await service.handle(request)
