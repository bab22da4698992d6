"""
Proxy Service Application Entry Point

FastAPI application factory, including route registration and application configuration.
"""

import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request

from proxy_service import __version__
from proxy_service.api import PROXY_PATH, proxy
from proxy_service.common.errors import ProxyError
from proxy_service.common.http_client import create_client
from proxy_service.common.responses import error_response, proxy_error_response
from proxy_service.config import Settings, get_settings
from proxy_service.logging_config import setup_logging
from proxy_service.middleware import RequestLoggerMiddleware
from proxy_service.services import BackendForwarder, ProxyService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        settings: Configuration, loaded from the environment when omitted
        transport: Custom upstream transport (tests use httpx.MockTransport)

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()
    client = create_client(timeout=settings.HTTP_TIMEOUT, transport=transport)

    # Application Lifecycle Management
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Close the upstream connection pool on shutdown.
        """
        logger.info(
            "Proxy started: target_url=%s body_methods_only=%s request_delay=%ss",
            settings.TARGET_URL,
            settings.BODY_METHODS_ONLY,
            settings.REQUEST_DELAY,
        )
        yield
        await client.close()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Forwarding HTTP proxy",
        version=__version__,
        lifespan=lifespan,
        # Every path belongs to the target service
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.proxy_service = ProxyService(
        settings=settings,
        forwarder=BackendForwarder(client),
    )

    app.add_middleware(RequestLoggerMiddleware, enabled=settings.LOG_REQUESTS)

    # Global Exception Handlers
    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        """
        Handle proxy errors raised outside the pipeline
        """
        return proxy_error_response(exc)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """
        Handle uncaught exceptions

        Details are logged but never returned to clients.
        """
        logger.error(
            "Uncaught exception: %s\nPath: %s\nTraceback:\n%s",
            str(exc),
            request.url.path,
            traceback.format_exc(),
        )
        return error_response(500, "internal server error")

    app.add_route(PROXY_PATH, proxy, include_in_schema=False)

    return app


def run() -> None:
    """Console entry point: load configuration and serve."""
    settings = get_settings()
    setup_logging(settings)
    logger.debug("server configuration: %s", settings.model_dump())

    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
