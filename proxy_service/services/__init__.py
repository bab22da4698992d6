"""
Service Layer Module Initialization
"""

from proxy_service.services.content_filter import ContentFilter
from proxy_service.services.duplicate_detector import (
    DuplicateRequestDetector,
    HeaderSubset,
    RequestSnapshot,
    project_headers,
)
from proxy_service.services.forwarder import BackendForwarder, ForwardResult
from proxy_service.services.proxy_service import ProxyService
from proxy_service.services.rewriter import RewrittenRequest, rewrite_request

__all__ = [
    "ContentFilter",
    "DuplicateRequestDetector",
    "HeaderSubset",
    "RequestSnapshot",
    "project_headers",
    "BackendForwarder",
    "ForwardResult",
    "ProxyService",
    "RewrittenRequest",
    "rewrite_request",
]
