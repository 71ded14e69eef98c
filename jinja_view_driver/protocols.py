"""Protocol definitions for view dispatch."""

from typing import Any, Protocol, runtime_checkable

from fastapi import Request


class StringDataSink(Protocol):
    """Anything a view driver can write rendered text into."""

    def send_string_data(self, mime_type: str, data: str) -> None:
        """Write ``data`` as the response body with content type ``mime_type``."""
        ...


@runtime_checkable
class ViewDriver(Protocol):
    """Protocol for view drivers.

    A driver either handles a view, writing it into the response sink, or
    declines so the next driver in the chain can try.
    """

    def handle_view(self, request: Request | None, response: StringDataSink, model: Any, view_name: str) -> bool:
        """Handle a view.

        Args:
            request: Request being served
            response: Sink receiving the rendered output
            model: Model object for the view
            view_name: Name of the view

        Returns:
            True if the view was handled, False to let another driver try
        """
        ...
