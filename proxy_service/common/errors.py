"""
Error Definitions

Defines the exceptions raised by the proxy pipeline. Each one maps to the
single wire error format: {"code": "<status>", "msg": "<message>"}.
"""

from typing import Any, Optional

ALLOWED_BODY_METHODS = ("POST", "PUT", "PATCH")


class ProxyError(Exception):
    """
    Proxy Base Exception

    Base class for all pipeline failures, carrying the message and the HTTP status code.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        headers: Optional[dict[str, str]] = None,
    ):
        """
        Initialize exception

        Args:
            message: Error message returned to the client
            status_code: HTTP status code
            headers: Extra response headers
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.headers = headers or {}

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Returns:
            dict: Error information dictionary
        """
        return {
            "code": str(self.status_code),
            "msg": self.message,
        }


class MethodNotAllowedError(ProxyError):
    """
    Method Not Allowed Error

    Raised when body-methods-only admission is enabled and the method is not POST, PUT or PATCH.
    """

    def __init__(self, method: str):
        allowed = ", ".join(ALLOWED_BODY_METHODS)
        super().__init__(
            message=f"`{method}` method not allowed, this proxy server only supports `{allowed}` requests",
            status_code=405,
            headers={"Allow": allowed},
        )
        self.method = method


class UnsupportedMediaTypeError(ProxyError):
    """Raised when the request does not declare `Content-Type: application/json`."""

    def __init__(self, message: str = "Content-Type header must be `application/json`"):
        super().__init__(message=message, status_code=415)


class InvalidRequestBodyError(ProxyError):
    """Raised when the request body cannot be read."""

    def __init__(self, message: str = "invalid request body"):
        super().__init__(message=message, status_code=400)


class ContentRejectedError(ProxyError):
    """
    Content Rejected Error

    Raised when the body contains the configured forbidden word or phrase.
    """

    def __init__(self, phrase: str):
        super().__init__(
            message=f"rejected because `{phrase}` found within request body",
            status_code=401,
        )
        self.phrase = phrase


class ConfigurationError(ProxyError):
    """
    Configuration Error

    Raised when the configured target URL cannot be used. The client cannot
    fix this, hence the 500.
    """

    def __init__(self, message: str = "unable to parse target url"):
        super().__init__(message=message, status_code=500)


class UpstreamError(ProxyError):
    """
    Upstream Service Error

    Raised when the target service cannot be reached. Transport details are
    logged, never returned to the client.
    """

    def __init__(self, message: str = "bad gateway", status_code: int = 502):
        super().__init__(message=message, status_code=status_code)
