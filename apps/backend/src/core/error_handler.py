"""Application-wide error handling for the relay API.

Route handlers map relay errors themselves. What reaches this module is
either a relay error raised outside a handler, a framework error (unknown
route, wrong method, request validation) or a bug. Every one of them becomes
a JSON body with a user-safe ``error`` and the request's correlation ID;
tracebacks and validation details are only exposed outside production.
"""

import traceback
from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from core.config import get_settings
from core.context import get_correlation_id
from core.log import StructuredLogger
from core.security_config import get_allowed_error_fields
from schemas.api import ErrorResponse


structured_logger = StructuredLogger(__name__)


class ExceptionNormalizationMiddleware(BaseHTTPMiddleware):
    """Turn anything that escapes the routing layer into a JSON 500.

    Keeps the process serving and never lets a bare traceback reach a client.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:  # noqa: BLE001
            return await global_exception_handler(request, exc)


def build_error_response(
    *,
    status_code: int,
    error_type: str,
    message: str,
    environment: str,
    **diagnostics: Any,
) -> JSONResponse:
    """Render an error body, dropping fields ``environment`` may not expose.

    ``diagnostics`` may carry any optional ErrorResponse field (details,
    traceback, exception_type, validation_errors); empty values are skipped.
    """
    allowed = get_allowed_error_fields(environment)
    exposed = {
        field: value
        for field, value in diagnostics.items()
        if field in allowed and value not in (None, "", {}, [])
    }
    if "correlation_id" in allowed:
        exposed.setdefault("correlation_id", get_correlation_id())

    body = ErrorResponse(error=message, type=error_type, **exposed)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


def _http_error(exc: StarletteHTTPException, environment: str) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "An HTTP error occurred"
    return build_error_response(
        status_code=exc.status_code,
        error_type="http_error",
        message=message,
        environment=environment,
        exception_type=type(exc).__name__,
    )


def _validation_error(
    exc: ValidationError | RequestValidationError, environment: str
) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    structured_logger.warning("Request validation failed", error_count=len(errors))
    return build_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        error_type="validation_error",
        message="Invalid request data provided",
        environment=environment,
        validation_errors=errors,
    )


def _unexpected_error(exc: Exception, environment: str) -> JSONResponse:
    structured_logger.exception(
        "Unhandled exception", exc_info=exc, exception_type=type(exc).__name__
    )
    return build_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type="internal_server_error",
        message="An internal error occurred",
        environment=environment,
        exception_type=type(exc).__name__,
        traceback="".join(traceback.format_exception(exc)).strip(),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Registered for relay, HTTP and validation errors, and used as the
    middleware's fallback for everything else."""
    # Imported lazily: the relay services import this package for logging
    from services.ai.exceptions import TutorRelayError
    from services.ai.response_mapper import map_error

    if isinstance(exc, TutorRelayError):
        return map_error(exc)

    environment = get_settings().ENVIRONMENT
    if isinstance(exc, StarletteHTTPException):
        return _http_error(exc, environment)
    if isinstance(exc, ValidationError | RequestValidationError):
        return _validation_error(exc, environment)
    return _unexpected_error(exc, environment)
