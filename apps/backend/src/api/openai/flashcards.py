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
from services.ai.dispatcher import TaskDispatcher, get_task_dispatcher
from services.ai.models import TaskVariant


router = APIRouter(tags=["flashcards"])


@router.post(
    "/flashcards", responses=TASK_RESPONSES, openapi_extra=IMAGE_FORM_OPENAPI
)
async def create_flashcards(
    request: Request,
    dispatcher: Annotated[TaskDispatcher, Depends(get_task_dispatcher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Generate question/answer flashcards from an image and notes."""
    return await run_task(
        TaskVariant.FLASHCARD_SET,
        lambda: read_image_task(request, TaskVariant.FLASHCARD_SET, settings),
        dispatcher,
    )
