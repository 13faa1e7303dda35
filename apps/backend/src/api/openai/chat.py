from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.openai.common import CHAT_OPENAPI, TASK_RESPONSES, read_chat_task, run_task
from core.config import Settings, get_settings
from services.ai.dispatcher import TaskDispatcher, get_task_dispatcher
from services.ai.models import TaskVariant


router = APIRouter(tags=["chat"])


@router.post("/chat", responses=TASK_RESPONSES, openapi_extra=CHAT_OPENAPI)
async def relay_chat(
    request: Request,
    dispatcher: Annotated[TaskDispatcher, Depends(get_task_dispatcher)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> JSONResponse:
    """Relay a chat message array and return the provider's reply message."""
    return await run_task(
        TaskVariant.RAW_CHAT,
        lambda: read_chat_task(request, settings),
        dispatcher,
    )
