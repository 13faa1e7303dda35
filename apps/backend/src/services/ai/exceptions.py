"""Domain exceptions for the tutoring relay.

Input errors are raised before any outbound call is made and map to 400.
Upstream errors wrap every failure of the inference provider call and map
to 500. Each exception carries a stable ``error_code`` for log tagging.

A completion that is not valid JSON is *not* an exception: the validator
returns a ``CompletionParseFailure`` result instead.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class TutorRelayError(Exception):
    """Base class for relay domain errors."""

    message: str
    error_code: str

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class TutorInputError(TutorRelayError):
    """Caller supplied insufficient or malformed input."""


class MissingInputError(TutorInputError):
    def __init__(self, message: str = "Required input is missing") -> None:
        super().__init__(message=message, error_code="missing_input")


class InvalidInputError(TutorInputError):
    def __init__(self, message: str = "Request input is invalid") -> None:
        super().__init__(message=message, error_code="invalid_input")


class UpstreamServiceError(TutorRelayError):
    """The inference provider call failed (transport, auth, quota, non-2xx)."""

    def __init__(
        self,
        message: str = "Inference provider call failed",
        status_code: int | None = None,
        error_type: str | None = None,
    ) -> None:
        super().__init__(message=message, error_code="upstream_error")
        self.status_code = status_code
        self.error_type = error_type
