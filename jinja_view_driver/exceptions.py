"""Custom exceptions for the Jinja view driver with proper HTTP status codes."""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error responses."""

    # Generic errors
    VIEW_ERROR = "VIEW_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Configuration errors
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_INVALID = "CONFIG_INVALID"

    # View processing errors
    VIEW_PROCESSING_ERROR = "VIEW_PROCESSING_ERROR"
    VIEW_NOT_HANDLED = "VIEW_NOT_HANDLED"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_EVALUATION_ERROR = "TEMPLATE_EVALUATION_ERROR"
    IO_TRANSPORT_ERROR = "IO_TRANSPORT_ERROR"


class ViewException(Exception):
    """Base exception for view driver errors with HTTP status code support.

    All custom exceptions should inherit from this class to ensure
    consistent error handling across the application.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VIEW_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        """Initialize view exception.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            status_code: HTTP status code (default 500)
            details: Additional error context/details
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ConfigurationException(ViewException):
    """Invalid driver or template source setup. Raised at configuration time only."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, status_code, details)


class ViewProcessingException(ViewException):
    """Failure while handling a view.

    The sub-kind is carried in ``code``; the engine or I/O error that caused
    it is kept in ``cause`` (and chained as ``__cause__`` when raised with
    ``from``).
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VIEW_PROCESSING_ERROR,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, code, status_code, details)
        self.cause = cause


class TemplateResolutionException(ViewProcessingException):
    """No template source produced content for the view name."""

    def __init__(
        self,
        message: str = "Template not found",
        code: ErrorCode = ErrorCode.TEMPLATE_NOT_FOUND,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, code=code, status_code=404, details=details, cause=cause)


class TemplateEvaluationException(ViewProcessingException):
    """The template exists but failed to parse or evaluate against the model."""

    def __init__(
        self,
        message: str = "Template error occurred",
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(
            message,
            code=ErrorCode.TEMPLATE_EVALUATION_ERROR,
            status_code=500,
            details=details,
            cause=cause,
        )


class IOTransportException(ViewProcessingException):
    """Reading template content or writing the response failed."""

    def __init__(
        self,
        message: str = "I/O error occurred",
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(
            message,
            code=ErrorCode.IO_TRANSPORT_ERROR,
            status_code=502,
            details=details,
            cause=cause,
        )
