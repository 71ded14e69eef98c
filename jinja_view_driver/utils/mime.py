"""MIME type lookup against the serving application's registry."""

import mimetypes
from pathlib import PurePosixPath

from fastapi import Request

from jinja_view_driver.config import DEFAULT_MIME_TYPE


def get_mime_type(request: Request | None, name: str, default: str = DEFAULT_MIME_TYPE) -> str:
    """Get the MIME type for a resource name.

    Looks in the application's ``app.state.mime_types`` mapping (extension to
    type) first, then in the ``mimetypes`` registry.

    Args:
        request: Request being served (None when rendering outside a request)
        name: Resource or view name, e.g. ``"pages/index.html"``
        default: Returned when nothing knows the extension

    Returns:
        MIME type string
    """
    suffix = PurePosixPath(name).suffix.lower()

    if request is not None and suffix:
        registry: dict[str, str] | None = getattr(request.app.state, "mime_types", None)
        if registry and suffix in registry:
            return registry[suffix]

    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed or default
