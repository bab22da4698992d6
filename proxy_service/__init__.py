"""
Proxy Service

Forwarding HTTP proxy with admission control, content filtering and
consecutive request throttling.
"""

__version__ = "0.1.0"
