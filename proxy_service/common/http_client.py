"""
HTTP Client Wrapper Module

Provides the asynchronous HTTP client used to reach the target service.
"""

from typing import Optional

import httpx


class HttpClient:
    """
    Asynchronous HTTP Client Wrapper

    Wraps a single httpx.AsyncClient whose connection pool is shared by all
    in-flight requests. Responses are always opened in streaming mode.
    """

    def __init__(
        self,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP Client

        Args:
            timeout: Request timeout (seconds)
            transport: Custom transport (tests use httpx.MockTransport)
        """
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create HTTP client instance

        Returns:
            httpx.AsyncClient: HTTP client instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=False,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP Client"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send_stream(
        self,
        method: str,
        url: str,
        headers: Optional[list[tuple[str, str]]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Send a request and return as soon as the response headers arrive

        The caller owns the returned response and must close it with `aclose()`.

        Args:
            method: HTTP method
            url: Absolute request URL
            headers: Request headers
            content: Raw request body

        Returns:
            httpx.Response: Open streaming response

        Raises:
            httpx.RequestError: On connection, DNS, timeout or protocol failures
        """
        client = self._get_client()
        request = client.build_request(
            method=method,
            url=url,
            headers=headers,
            content=content or None,
        )
        return await client.send(request, stream=True)


def create_client(
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> HttpClient:
    """
    Create configured HTTP client

    Args:
        timeout: Timeout duration (seconds)
        transport: Optional custom transport

    Returns:
        HttpClient: Configured client instance
    """
    return HttpClient(timeout=timeout, transport=transport)
