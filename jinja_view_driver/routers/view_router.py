"""View routes rendering templates through the view driver chain."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from jinja_view_driver import __version__
from jinja_view_driver.dependencies import get_view_dispatcher
from jinja_view_driver.models import ErrorResponse
from jinja_view_driver.views.dispatcher import ViewDispatcher

router = APIRouter(responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})


@router.get("/")
def index(request: Request, dispatcher: ViewDispatcher = Depends(get_view_dispatcher)) -> Response:
    """Render the index page."""
    return dispatcher.dispatch(request, {"version": __version__}, "index.html")


@router.get("/views/{view_name:path}")
def render_view(
    view_name: str,
    request: Request,
    dispatcher: ViewDispatcher = Depends(get_view_dispatcher),
) -> Response:
    """Render any accepted view, with the query parameters as model."""
    return dispatcher.dispatch(request, dict(request.query_params), view_name)
