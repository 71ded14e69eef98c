"""Health endpoint."""

from fastapi import APIRouter, Request

from jinja_view_driver import __version__
from jinja_view_driver.models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Basic health check endpoint.

    Reports the number of configured view drivers next to the status.
    """
    dispatcher = getattr(request.app.state, "view_dispatcher", None)
    drivers = len(dispatcher.drivers) if dispatcher is not None else 0
    return HealthResponse(status="ok" if drivers else "degraded", version=__version__, view_drivers=drivers)
