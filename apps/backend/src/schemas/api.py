"""API response schemas.

This module defines the response bodies shared by every relay endpoint.
Bodies are serialized with ``exclude_none`` so optional diagnostic fields
only appear when they carry a value.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class TaskOutput(BaseModel):
    """Successful (or softly degraded) task response.

    Attributes:
        output: The parsed model output, or ``[]`` when parsing failed.
        raw: The unparsed completion text, present only on a parse failure.
        warning: Human-readable warning, present only on a parse failure.
    """

    output: Any = Field(default_factory=list)
    raw: str | None = None
    warning: str | None = None


class ErrorResponse(BaseModel):
    """Error response body.

    ``error`` is always a user-safe message. The remaining fields are
    diagnostics for logging and debugging.
    """

    error: str = "An error occurred"
    message: str | None = None
    status: int | None = None
    type: str | None = None
    correlation_id: str | None = None
    details: dict[str, Any] | None = None
    traceback: str | None = None
    exception_type: str | None = None
    validation_errors: Any | None = None


class MessageResponse(BaseModel):
    """Plain informational response used by liveness endpoints."""

    message: str
