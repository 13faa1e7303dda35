"""Turn validator outcomes and relay errors into HTTP responses.

Status/body contract:

* ``200 {output}``                        - parsed successfully
* ``200 {output: [], raw, warning}``      - completion was not usable JSON
* ``400 {error}``                         - malformed caller input
* ``500 {error, message, status, type}``  - inference provider failure
"""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse

from core.context import get_correlation_id
from schemas.api import ErrorResponse, TaskOutput
from services.ai.exceptions import (
    TutorInputError,
    TutorRelayError,
    UpstreamServiceError,
)
from services.ai.models import CompletionParsed, CompletionParseFailure, ParsedResult
from services.ai.task_profiles import TaskProfile


DEFAULT_UPSTREAM_FAILURE_MESSAGE = "Failed to generate a response"


def map_result(result: ParsedResult) -> JSONResponse:
    if isinstance(result, CompletionParseFailure):
        body = TaskOutput(output=[], raw=result.raw, warning=result.warning)
    elif isinstance(result, CompletionParsed):
        body = TaskOutput(output=result.value)
    else:
        raise TypeError(f"Unsupported result type: {type(result).__name__}")
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=body.model_dump(exclude_none=True),
    )


def map_error(
    exc: TutorRelayError, profile: TaskProfile | None = None
) -> JSONResponse:
    """Map a relay error to its response.

    The ``error`` field of an upstream failure is the profile's fixed,
    user-safe message regardless of what the provider said; the provider's
    message, status and type travel as diagnostics.
    """
    correlation_id = get_correlation_id()

    if isinstance(exc, TutorInputError):
        body = ErrorResponse(
            error=exc.message, type=exc.error_code, correlation_id=correlation_id
        )
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, UpstreamServiceError):
        body = ErrorResponse(
            error=(
                profile.failure_message
                if profile is not None
                else DEFAULT_UPSTREAM_FAILURE_MESSAGE
            ),
            message=exc.message,
            status=exc.status_code,
            type=exc.error_type,
            correlation_id=correlation_id,
        )
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        body = ErrorResponse(
            error=DEFAULT_UPSTREAM_FAILURE_MESSAGE,
            type=exc.error_code,
            correlation_id=correlation_id,
        )
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )
