"""Pydantic models for response validation."""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    version: str
    view_drivers: int = Field(..., description="Number of configured view drivers")


class ErrorDetail(BaseModel):
    """Structured error body."""

    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Error response."""

    error: ErrorDetail
