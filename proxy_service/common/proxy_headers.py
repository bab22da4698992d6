"""
Proxy request header utilities.

Requests are re-sent to the target by a fresh client connection, so headers that
only describe the client-to-proxy link (or that would change how the upstream
encodes its response) must not be forwarded as-is.
"""

from __future__ import annotations

from collections.abc import Iterable

# RFC 7230 hop-by-hop headers, plus proxy control and response encoding negotiation.
HOP_BY_HOP_HEADERS = frozenset(
    {
        "te",
        "trailer",
        "upgrade",
        "keep-alive",
        "connection",
        "accept-encoding",
        "transfer-encoding",
        "proxy-connection",
        "proxy-authenticate",
        "proxy-authorization",
    }
)


def strip_hop_by_hop_headers(headers: Iterable[tuple[str, str]] | None) -> list[tuple[str, str]]:
    """
    Remove hop-by-hop and proxy control headers from request headers.

    Header order and repeated headers are preserved.
    """
    if not headers:
        return []

    return [(key, value) for key, value in headers if key.lower() not in HOP_BY_HOP_HEADERS]
