"""
API Module Initialization
"""

from proxy_service.api.proxy import PROXY_PATH, proxy

__all__ = ["PROXY_PATH", "proxy"]
