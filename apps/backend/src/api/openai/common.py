"""Request reading and the shared handler flow for relay endpoints."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, Headers, UploadFile
from starlette.formparsers import FormParser, MultiPartException, MultiPartParser

from core.config import Settings
from core.log import StructuredLogger
from schemas.api import ErrorResponse, TaskOutput
from services.ai.dispatcher import TaskDispatcher
from services.ai.exceptions import (
    InvalidInputError,
    TutorInputError,
    TutorRelayError,
)
from services.ai.models import TaskRequest, TaskVariant
from services.ai.response_mapper import map_error, map_result
from services.ai.task_profiles import get_task_profile
from services.images.uploads import ImageSizeLimitError, build_image_upload


structured_logger = StructuredLogger(__name__)

# Allowance for multipart boundaries and the notes field on top of the image
FORM_OVERHEAD_BYTES = 64 * 1024

TASK_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"model": TaskOutput},
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

IMAGE_FORM_OPENAPI: dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "required": ["image"],
                    "properties": {
                        "image": {"type": "string", "format": "binary"},
                        "notes": {"type": "string"},
                    },
                }
            }
        },
    }
}

CHAT_OPENAPI: dict[str, Any] = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["messages"],
                    "properties": {
                        "messages": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "required": ["role", "content"],
                                "properties": {
                                    "role": {"type": "string"},
                                    "content": {},
                                },
                            },
                        },
                        "model": {"type": "string"},
                    },
                }
            }
        },
    }
}


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


async def read_capped_body(request: Request, limit: int) -> bytes:
    """Buffer the request body in memory, failing as soon as it passes ``limit``.

    Chunked requests carry no Content-Length, so the cap is enforced while
    streaming rather than trusted from headers.
    """
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise ImageSizeLimitError(
                f"Request body exceeds the upload limit of {limit} bytes"
            )
    return bytes(body)


async def _replay(body: bytes) -> AsyncGenerator[bytes, None]:
    yield body


async def parse_form(headers: Headers, body: bytes) -> FormData:
    """Parse an already-buffered form body without spooling parts to disk."""
    content_type = headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type == "multipart/form-data":
        parser = MultiPartParser(headers, _replay(body))
        # Every part fits in the body already held in memory
        parser.spool_max_size = len(body) + 1
        try:
            return await parser.parse()
        except MultiPartException as exc:
            raise InvalidInputError(f"Malformed multipart body: {exc.message}") from exc
    if content_type == "application/x-www-form-urlencoded":
        return await FormParser(headers, _replay(body)).parse()
    return FormData()


async def read_image_task(
    request: Request, variant: TaskVariant, settings: Settings
) -> TaskRequest:
    """Read the multipart ``image`` + ``notes`` form into a TaskRequest.

    A missing image is not rejected here; the payload builder owns that
    rule so every entry point reports it the same way.
    """
    limit = settings.MAX_UPLOAD_BYTES + FORM_OVERHEAD_BYTES
    declared = _declared_length(request)
    if declared is not None and declared > limit:
        raise ImageSizeLimitError(
            f"Request body of {declared} bytes exceeds the upload limit of "
            f"{settings.MAX_UPLOAD_BYTES} bytes"
        )

    form = await parse_form(request.headers, await read_capped_body(request, limit))
    try:
        notes_field = form.get("notes")
        notes = notes_field if isinstance(notes_field, str) else ""

        upload = form.get("image")
        image = None
        if isinstance(upload, UploadFile):
            content = await upload.read()
            image = build_image_upload(
                content,
                upload.content_type,
                upload.filename,
                settings.MAX_UPLOAD_BYTES,
            )
    finally:
        await form.close()

    return TaskRequest(variant=variant, notes=notes, image=image)


async def read_chat_task(request: Request, settings: Settings) -> TaskRequest:
    """Read ``{messages, model?}`` from a JSON body into a TaskRequest."""
    body = await request.body()
    if len(body) > settings.MAX_JSON_BODY_BYTES:
        raise InvalidInputError(
            f"Request body exceeds limit of {settings.MAX_JSON_BODY_BYTES} bytes"
        )
    try:
        payload = json.loads(body) if body else None
    except ValueError as exc:
        raise InvalidInputError("Request body must be valid JSON") from exc
    if not isinstance(payload, dict):
        raise InvalidInputError(
            "Invalid messages format, expected an array of messages"
        )

    model = payload.get("model")
    if model is not None and not isinstance(model, str):
        raise InvalidInputError("model must be a string")

    return TaskRequest(
        variant=TaskVariant.RAW_CHAT,
        chat_messages=payload.get("messages"),
        model=model or None,
    )


async def run_task(
    variant: TaskVariant,
    read_request: Callable[[], Awaitable[TaskRequest]],
    dispatcher: TaskDispatcher,
) -> JSONResponse:
    """Read, dispatch and map one task; relay errors never escape."""
    profile = get_task_profile(variant)
    try:
        task_request = await read_request()
        result = await dispatcher.run(task_request)
    except TutorInputError as exc:
        structured_logger.warning(
            "Rejected task input",
            variant=variant.value,
            error_code=exc.error_code,
            reason=exc.message,
        )
        return map_error(exc, profile)
    except TutorRelayError as exc:
        structured_logger.error(
            "Task failed upstream", variant=variant.value, error_code=exc.error_code
        )
        return map_error(exc, profile)
    return map_result(result)
