"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from jinja_view_driver.views.dispatcher import ViewDispatcher


def get_view_dispatcher(request: Request) -> ViewDispatcher:
    """
    Get the view dispatcher from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared ViewDispatcher instance.

    Raises:
        RuntimeError: If the view dispatcher is not initialized.
    """
    dispatcher: ViewDispatcher | None = getattr(request.app.state, "view_dispatcher", None)

    if dispatcher is None:
        raise RuntimeError("View dispatcher not initialized.")

    return dispatcher
