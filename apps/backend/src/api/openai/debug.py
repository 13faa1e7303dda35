"""Debug-report endpoints for block program screenshots."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.openai.common import (
    IMAGE_FORM_OPENAPI,
    TASK_RESPONSES,
    read_image_task,
    run_task,
)
from core.config import Settings, get_settings
from schemas.api import MessageResponse
from services.ai.dispatcher import TaskDispatcher, get_task_dispatcher
from services.ai.models import TaskVariant


router = APIRouter(tags=["debug"])


@router.get("/debug", response_model=MessageResponse)
def debug_liveness() -> MessageResponse:
    """Liveness check for the debug endpoint; no side effects."""
    return MessageResponse(
        message="Debug endpoint is working. POST an image + notes to test."
    )


@router.post("/debug", responses=TASK_RESPONSES, openapi_extra=IMAGE_FORM_OPENAPI)
async def create_debug_report(
    request: Request,
    dispatcher: Annotated[TaskDispatcher, Depends(get_task_dispatcher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Critique a screenshot of block code.

    Multipart fields: ``image`` (required, up to ``MAX_UPLOAD_BYTES``) and
    ``notes`` (optional). Returns summary, issues, issue location, hints and
    a corrected solution as parsed JSON.
    """
    return await run_task(
        TaskVariant.DEBUG_REPORT,
        lambda: read_image_task(request, TaskVariant.DEBUG_REPORT, settings),
        dispatcher,
    )
