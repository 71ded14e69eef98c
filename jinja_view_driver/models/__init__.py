"""Jinja view driver models"""

from jinja_view_driver.models.base_models import ErrorDetail, ErrorResponse, HealthResponse

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
]
