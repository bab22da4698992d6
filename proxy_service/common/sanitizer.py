"""
Data Sanitization Module

Masks credentials in request headers so request dumps in the logs never
contain them in plain text.
"""

from collections.abc import Iterable

SENSITIVE_HEADERS = frozenset(
    {"authorization", "proxy-authorization", "x-api-key", "api-key", "cookie"}
)


def sanitize_authorization(value: str) -> str:
    """
    Sanitize authorization field value

    Keeps the scheme prefix and a few characters for identification.

    Examples:
        >>> sanitize_authorization("Bearer sk-1234567890abcdef")
        'Bearer sk-1***...***ef'
        >>> sanitize_authorization("short")
        '***'
    """
    if not value:
        return value

    prefix = ""
    token = value
    if value.lower().startswith("bearer "):
        prefix = "Bearer "
        token = value[7:]
    elif value.lower().startswith("basic "):
        prefix = "Basic "
        token = value[6:]

    if len(token) <= 8:
        return f"{prefix}***"

    return f"{prefix}{token[:4]}***...***{token[-2:]}"


def sanitize_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """
    Sanitize request headers

    Args:
        headers: (name, value) pairs

    Returns:
        list: New list with sensitive values masked
    """
    sanitized = []
    for key, value in headers:
        if key.lower() in SENSITIVE_HEADERS:
            sanitized.append((key, sanitize_authorization(value)))
        else:
            sanitized.append((key, value))
    return sanitized
