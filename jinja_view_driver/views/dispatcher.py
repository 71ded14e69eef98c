"""Chain of view drivers."""

from collections.abc import Sequence
from typing import Any

from fastapi import Request
from fastapi.responses import Response

from jinja_view_driver.exceptions import ErrorCode, TemplateResolutionException
from jinja_view_driver.logging_config import get_logger, log_with_context
from jinja_view_driver.protocols import ViewDriver
from jinja_view_driver.views.response import ResponseSink

logger = get_logger(__name__)


class ViewDispatcher:
    """Offers a view to each driver in order until one handles it."""

    def __init__(self, drivers: Sequence[ViewDriver], charset: str = "utf-8"):
        self.drivers = tuple(drivers)
        self.charset = charset

    def dispatch(self, request: Request | None, model: Any, view_name: str) -> Response:
        """Render ``view_name`` with the first driver that accepts it.

        Errors raised by that driver propagate unchanged; there is no
        fallback to later drivers once one has accepted the view.

        Raises:
            TemplateResolutionException: If no driver accepts the view name
        """
        for driver in self.drivers:
            sink = ResponseSink(charset=self.charset)
            if driver.handle_view(request, sink, model, view_name):
                log_with_context(
                    logger,
                    "debug",
                    "View handled",
                    view_name=view_name,
                    driver=repr(driver),
                    event_type="view_dispatched",
                )
                return sink.to_response()

        log_with_context(
            logger,
            "info",
            "No view driver accepted view",
            view_name=view_name,
            drivers=len(self.drivers),
            event_type="view_not_handled",
        )
        raise TemplateResolutionException(
            f"No view driver handles view: {view_name}",
            code=ErrorCode.VIEW_NOT_HANDLED,
            details={"view_name": view_name},
        )
