"""
Request Rewriting Module

Routes an inbound request to the scheme, host and base path of the target URL.
If the target's path is "/base" and the inbound request was for "/dir", the
upstream request is for "/base/dir".
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import quote, unquote

from proxy_service.common.errors import ConfigurationError
from proxy_service.common.proxy_headers import strip_hop_by_hop_headers
from proxy_service.common.url_validator import parse_target_url

logger = logging.getLogger(__name__)

# Characters kept unescaped in a path segment besides the unreserved ones
_PATH_SAFE = "/$&+,:;=@"


def escape_path(path: str) -> str:
    """Percent-encode a decoded path using the default path encoding."""
    return quote(path, safe=_PATH_SAFE)


@dataclass(frozen=True)
class URLPath:
    """
    A URL path in decoded and raw form

    `raw_path` is only set when the percent-encoded form of the path differs
    from the default encoding of `path` (e.g. an encoded slash "%2F").
    """

    path: str
    raw_path: str = ""

    @classmethod
    def from_escaped(cls, escaped: str) -> "URLPath":
        path = unquote(escaped)
        if escaped == escape_path(path):
            return cls(path=path)
        return cls(path=path, raw_path=escaped)

    @property
    def escaped(self) -> str:
        return self.raw_path or escape_path(self.path)


def single_joining_slash(a: str, b: str) -> str:
    """
    Join two paths with exactly one slash between them

    Examples:
        >>> single_joining_slash("/base/", "/dir")
        '/base/dir'
        >>> single_joining_slash("/base", "dir")
        '/base/dir'
    """
    a_slash = a.endswith("/")
    b_slash = b.startswith("/")
    if a_slash and b_slash:
        return a + b[1:]
    if not a_slash and not b_slash:
        return a + "/" + b
    return a + b


def join_url_path(base: URLPath, inbound: URLPath) -> URLPath:
    """
    Join the target base path with the inbound path

    When neither side carries a raw form only the decoded paths are joined.
    Otherwise the slash decision is taken on the escaped forms and applied to
    both the decoded and the escaped paths.
    """
    if not base.raw_path and not inbound.raw_path:
        return URLPath(path=single_joining_slash(base.path, inbound.path))

    a_path = base.escaped
    b_path = inbound.escaped
    a_slash = a_path.endswith("/")
    b_slash = b_path.startswith("/")

    if a_slash and b_slash:
        return URLPath(path=base.path + inbound.path[1:], raw_path=a_path + b_path[1:])
    if not a_slash and not b_slash:
        return URLPath(path=base.path + "/" + inbound.path, raw_path=a_path + "/" + b_path)
    return URLPath(path=base.path + inbound.path, raw_path=a_path + b_path)


def merge_query(target_query: str, inbound_query: str) -> str:
    """
    Merge raw query strings, target parameters first

    Examples:
        >>> merge_query("key=1", "page=2")
        'key=1&page=2'
        >>> merge_query("", "page=2")
        'page=2'
    """
    if not target_query or not inbound_query:
        return target_query + inbound_query
    return f"{target_query}&{inbound_query}"


@dataclass(frozen=True)
class RewrittenRequest:
    """Request ready to be sent to the target."""

    method: str
    url: str
    headers: list[tuple[str, str]]
    path: URLPath
    query: str = ""


def rewrite_request(
    target_url: str,
    method: str,
    raw_path: str,
    query_string: str,
    headers: Optional[Iterable[tuple[str, str]]] = None,
) -> RewrittenRequest:
    """
    Rewrite an inbound request for the target service

    The Host header is dropped so the target host takes effect, and
    hop-by-hop / proxy control headers are stripped.

    Args:
        target_url: Absolute target base URL
        method: Inbound HTTP method
        raw_path: Inbound path, percent-encoded as received
        query_string: Inbound raw query string (without "?")
        headers: Inbound (name, value) header pairs

    Returns:
        RewrittenRequest: The upstream request

    Raises:
        ConfigurationError: If the target URL cannot be parsed
    """
    try:
        target = parse_target_url(target_url)
    except ConfigurationError as e:
        logger.error("Unable to parse target url %r: %s", target_url, e.message)
        raise ConfigurationError("unable to parse target url") from e

    joined = join_url_path(URLPath.from_escaped(target.path), URLPath.from_escaped(raw_path))
    query = merge_query(target.query, query_string)

    url = f"{target.scheme}://{target.netloc}{joined.escaped}"
    if query:
        url = f"{url}?{query}"

    forwarded_headers = [
        (key, value)
        for key, value in strip_hop_by_hop_headers(headers)
        if key.lower() != "host"
    ]

    return RewrittenRequest(
        method=method,
        url=url,
        headers=forwarded_headers,
        path=joined,
        query=query,
    )
