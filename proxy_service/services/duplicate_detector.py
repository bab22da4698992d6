"""
Consecutive Request Detection Module

Remembers the last request handled by the proxy so an identical request that
immediately follows it can be delayed.
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# Header name -> HeaderSubset field
_PROJECTED_HEADERS = {
    "host": "host",
    "accept": "accept",
    "user-agent": "user_agent",
    "connection": "connection",
    "content-type": "content_type",
    "content-length": "content_length",
    "accept-encoding": "accept_encoding",
}


@dataclass(frozen=True)
class HeaderSubset:
    """
    Comparable snapshot of a fixed set of non-auth request headers

    Each field keeps every value received for the header, in order.
    Headers outside this set never take part in the comparison.
    """

    host: tuple[str, ...] = ()
    accept: tuple[str, ...] = ()
    user_agent: tuple[str, ...] = ()
    connection: tuple[str, ...] = ()
    content_type: tuple[str, ...] = ()
    content_length: tuple[str, ...] = ()
    accept_encoding: tuple[str, ...] = ()


def project_headers(headers: Iterable[tuple[str, str]]) -> HeaderSubset:
    """
    Build a HeaderSubset from (name, value) pairs

    Header names are matched case-insensitively.
    """
    collected: dict[str, list[str]] = {}
    for name, value in headers:
        attr = _PROJECTED_HEADERS.get(name.lower())
        if attr is not None:
            collected.setdefault(attr, []).append(value)
    return HeaderSubset(**{attr: tuple(values) for attr, values in collected.items()})


@dataclass(frozen=True)
class RequestSnapshot:
    """Request representation used to compare a request with the previous one."""

    method: str
    target_url: str
    target_uri: str
    headers: HeaderSubset = field(default_factory=HeaderSubset)
    body: bytes = b""


class DuplicateRequestDetector:
    """
    Consecutive Duplicate Request Detector

    Holds a single "last request" slot shared by every request the server
    handles. Comparing with it and replacing it happen under one lock, so two
    concurrent requests cannot both read the same previous snapshot.
    """

    def __init__(self, initial: Optional[RequestSnapshot] = None) -> None:
        self._last = initial
        self._lock = asyncio.Lock()

    @property
    def last(self) -> Optional[RequestSnapshot]:
        return self._last

    async def observe(self, snapshot: RequestSnapshot) -> bool:
        """
        Record a request and report whether it repeats the previous one

        The stored snapshot is always replaced, so only immediately
        consecutive repeats are reported.

        Args:
            snapshot: Snapshot of the current request

        Returns:
            bool: True if the snapshot equals the previously stored one
        """
        async with self._lock:
            is_duplicate = self._last is not None and self._last == snapshot
            self._last = snapshot
        return is_duplicate
