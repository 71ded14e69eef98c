"""Middleware configuration."""

import time

from fastapi import FastAPI, Request

from jinja_view_driver.config import Settings
from jinja_view_driver.logging_config import get_logger, log_with_context
from jinja_view_driver.middleware.logging_middleware import redact_sensitive_data

logger = get_logger(__name__)


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure all middleware for the application.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """
    log_with_context(
        logger,
        "debug",
        "Configuring request logging middleware",
        log_level=settings.log_level,
        event_type="middleware_config",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Count requests and log each one with its duration."""
        app.state.request_count = getattr(app.state, "request_count", 0) + 1
        start = time.perf_counter()
        response = await call_next(request)
        log_with_context(
            logger,
            "info",
            "HTTP Request",
            method=request.method,
            url=redact_sensitive_data(str(request.url)),
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
            event_type="http_request",
        )
        return response
