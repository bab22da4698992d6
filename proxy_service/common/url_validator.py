"""
Target URL Validator

Parses the configured upstream base URL and rejects anything that is not an
absolute http(s) URL with a host.
"""

import logging
from urllib.parse import SplitResult, urlsplit

from proxy_service.common.errors import ConfigurationError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


def parse_target_url(url: str) -> SplitResult:
    """
    Parse and validate the target base URL

    Args:
        url: The URL to validate

    Returns:
        SplitResult: The parsed URL

    Raises:
        ConfigurationError: If the URL is empty, relative or otherwise unusable
    """
    if not url:
        raise ConfigurationError("target url cannot be empty")

    try:
        parsed = urlsplit(url)
        # Accessing the port validates it
        parsed.port
    except ValueError as e:
        logger.warning("Target URL validation failed: %s", e)
        raise ConfigurationError("unable to parse target url") from e

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ConfigurationError("target url must use http or https scheme")

    if not parsed.hostname:
        raise ConfigurationError("target url must contain a valid hostname")

    return parsed
