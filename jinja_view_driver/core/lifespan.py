"""Application lifespan management."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jinja_view_driver import __version__
from jinja_view_driver.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Exceptions after yield are re-raised so shutdown errors are not lost.
    """
    app.state.startup_time = time.time()
    app.state.request_count = 0

    dispatcher = getattr(app.state, "view_dispatcher", None)
    log_with_context(
        logger,
        "info",
        "Starting Jinja view driver application",
        version=__version__,
        view_drivers=len(dispatcher.drivers) if dispatcher is not None else 0,
        event_type="app_startup",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Error during application lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_lifespan_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down Jinja view driver application",
            uptime_seconds=round(time.time() - app.state.startup_time, 1),
            requests=app.state.request_count,
            event_type="app_shutdown",
        )
