"""Response sink that view drivers write rendered output into."""

from fastapi.responses import Response

from jinja_view_driver.exceptions import IOTransportException


class ResponseSink:
    """Collects the single string payload of a view response.

    A driver sends once; the web layer then turns the sink into a
    Starlette response with ``to_response``.
    """

    def __init__(self, charset: str = "utf-8", status_code: int = 200):
        self.charset = charset
        self.status_code = status_code
        self.media_type: str | None = None
        self.body: bytes | None = None

    @property
    def committed(self) -> bool:
        """Whether any data was written."""
        return self.body is not None

    def send_string_data(self, mime_type: str, data: str) -> None:
        """Write ``data`` as the response body with content type ``mime_type``.

        Raises:
            IOTransportException: If the sink was already written or ``data``
                cannot be encoded with the sink's charset
        """
        if self.committed:
            raise IOTransportException("Response already committed", details={"media_type": self.media_type})
        try:
            body = data.encode(self.charset)
        except UnicodeEncodeError as e:
            raise IOTransportException(
                f"Cannot encode response as {self.charset}",
                details={"charset": self.charset},
                cause=e,
            ) from e
        self.media_type = mime_type
        self.body = body

    def to_response(self) -> Response:
        if self.body is None:
            raise RuntimeError("Nothing was sent to this response sink")
        media_type = self.media_type
        if media_type and media_type.startswith("text/") and "charset" not in media_type:
            media_type = f"{media_type}; charset={self.charset}"
        return Response(content=self.body, status_code=self.status_code, media_type=media_type)
