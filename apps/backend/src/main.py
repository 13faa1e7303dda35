from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.openai.api import api_router
from core.config import get_settings
from core.error_handler import (
    ExceptionNormalizationMiddleware,
    global_exception_handler,
)
from core.log import StructuredLogger, setup_logging
from core.middleware import CorrelationIdMiddleware
from services.ai.exceptions import TutorRelayError
from services.ai.gateway import InferenceGateway


structured_logger = StructuredLogger(__name__)
settings = get_settings()
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the inference gateway at startup and close it on shutdown.

    Route dependencies read it from ``app.state``; tests replace it through
    dependency overrides.
    """
    structured_logger.info(
        "Inference provider credential",
        provider=settings.LLM_PROVIDER,
        credential_loaded=settings.inference_credential_loaded,
    )
    gateway = InferenceGateway.from_settings(settings)
    app.state.inference_gateway = gateway
    try:
        yield
    finally:
        await gateway.aclose()


app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="Relays block-code screenshots and chat to a multimodal model",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware order: the last added runs first, so correlation IDs are set
# before the exception safety net and CORS wraps everything.
app.add_middleware(ExceptionNormalizationMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Correlation-ID"],
)

app.add_exception_handler(TutorRelayError, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)

app.include_router(api_router, prefix="/api/openai")


@app.get("/")
def read_root() -> dict[str, str]:
    return {"message": f"{settings.APP_NAME} is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=True)
