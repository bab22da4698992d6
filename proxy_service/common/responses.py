"""
Error Response Helpers

Renders every proxy failure in the single wire error format.
"""

import json
import logging
from typing import Optional

from fastapi.responses import Response

from proxy_service.common.errors import ProxyError

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/json"

_FALLBACK_MESSAGE = "There was a response that could not be serialized into JSON"


def encode_error_body(status_code: int, message: str) -> bytes:
    """
    Serialize an error body

    Falls back to a hand-built document carrying only the code when the
    message cannot be encoded, so the client always gets parseable JSON.

    Returns:
        bytes: `{"code": "<status>", "msg": "<message>"}`
    """
    code = str(status_code)
    try:
        return json.dumps({"code": code, "msg": message}, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError):
        logger.exception("Failed to serialize error response: code=%s", code)
        return ('{"code": "' + code + '", "msg": "' + _FALLBACK_MESSAGE + '"}').encode("utf-8")


def error_response(
    status_code: int,
    message: str,
    headers: Optional[dict[str, str]] = None,
) -> Response:
    """
    Build a JSON error response with an explicit Content-Length

    Args:
        status_code: HTTP status code
        message: Message placed in the `msg` field
        headers: Extra response headers

    Returns:
        Response: The error response
    """
    body = encode_error_body(status_code, message)
    logger.info("response: error=%s", {"code": str(status_code), "msg": message})

    response_headers = dict(headers or {})
    response_headers["Content-Length"] = str(len(body))
    return Response(
        content=body,
        status_code=status_code,
        headers=response_headers,
        media_type=JSON_MEDIA_TYPE,
    )


def proxy_error_response(exc: ProxyError) -> Response:
    """Render a ProxyError."""
    return error_response(exc.status_code, exc.message, headers=exc.headers)
