"""
API Dependency Module

The service objects live on `app.state` for the lifetime of the process.
"""

from fastapi import Request

from proxy_service.services import ProxyService


def get_proxy_service(request: Request) -> ProxyService:
    """Get the process-wide proxy service"""
    return request.app.state.proxy_service
