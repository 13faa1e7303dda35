from fastapi import APIRouter

from .chat import router as chat_router
from .debug import router as debug_router
from .flashcards import router as flashcards_router


api_router = APIRouter()

api_router.include_router(debug_router)
api_router.include_router(flashcards_router)
api_router.include_router(chat_router)
