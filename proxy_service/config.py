"""
Configuration Management Module

Configures the proxy via environment variables or a .env file.
The resulting Settings object is immutable and shared by every request.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from proxy_service.common.errors import ConfigurationError
from proxy_service.common.url_validator import parse_target_url


class Settings(BaseSettings):
    """
    Proxy Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "Proxy Service"
    DEBUG: bool = False

    # Server Config
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Upstream Config
    # Absolute URL of the backend service, e.g. "http://jsonplaceholder.typicode.com/"
    TARGET_URL: str
    # Upstream request timeout (seconds)
    HTTP_TIMEOUT: float = Field(default=30, gt=0)

    # Consecutive Request Config
    # Seconds to delay a request identical to the one handled just before it
    REQUEST_DELAY: int = Field(default=2, ge=0)

    # Admission Config
    # Only accept POST, PUT and PATCH requests when enabled
    BODY_METHODS_ONLY: bool = False

    # Content Filter Config
    # Word or phrase that causes a request to be rejected; empty disables the filter
    REJECT_WITH: str = ""
    # "exact" matches the phrase as a space or quote delimited token, "contains" as any substring
    REJECT_MATCH: Literal["exact", "contains"] = "exact"
    REJECT_INSENSITIVE: bool = False

    # Request Logging Config
    LOG_REQUESTS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        frozen=True,
    )

    @field_validator("TARGET_URL")
    @classmethod
    def _validate_target_url(cls, value: str) -> str:
        try:
            parse_target_url(value)
        except ConfigurationError as exc:
            raise ValueError(f"invalid target url: {exc.message}") from exc
        return value

    @property
    def reject_exact(self) -> bool:
        return self.REJECT_MATCH == "exact"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Uses lru_cache to ensure configuration is loaded only once.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
