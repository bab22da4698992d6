"""
Middleware Package

Contains application middleware components.
"""

from proxy_service.middleware.request_logger import RequestLoggerMiddleware

__all__ = ["RequestLoggerMiddleware"]
