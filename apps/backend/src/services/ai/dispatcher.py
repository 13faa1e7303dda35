"""Parameterized request flow shared by every task variant.

build payload -> dispatch to provider -> sanitize -> validate

Per-variant differences (instructions, model, passthrough) come from the
``TASK_PROFILES`` table; there is one flow, not one per endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Annotated, Protocol

from fastapi import Depends, Request

from core.config import Settings, get_settings
from services.ai.exceptions import InvalidInputError
from services.ai.models import (
    CompletionParsed,
    InferencePayload,
    ParsedResult,
    RawCompletion,
    TaskRequest,
)
from services.ai.payload_builder import build_payload
from services.ai.sanitizer import sanitize_completion
from services.ai.task_profiles import TaskProfile, get_task_profile
from services.ai.validator import validate_completion


logger = logging.getLogger(__name__)


class InferenceGatewayProtocol(Protocol):
    async def dispatch(
        self, payload: InferencePayload, model_id: str
    ) -> RawCompletion: ...


class TaskDispatcher:
    def __init__(
        self,
        gateway: InferenceGatewayProtocol,
        *,
        models: dict[str, str],
        allowed_chat_models: Sequence[str] = (),
        strict_shapes: bool = False,
    ) -> None:
        self._gateway = gateway
        self._models = models
        self._allowed_chat_models = tuple(allowed_chat_models)
        self._strict_shapes = strict_shapes

    @classmethod
    def from_settings(
        cls, gateway: InferenceGatewayProtocol, settings: Settings
    ) -> TaskDispatcher:
        return cls(
            gateway,
            models={
                "VISION_MODEL": settings.VISION_MODEL,
                "CHAT_MODEL": settings.CHAT_MODEL,
            },
            allowed_chat_models=settings.CHAT_ALLOWED_MODELS,
            strict_shapes=settings.STRICT_OUTPUT_SHAPES,
        )

    def select_model(self, profile: TaskProfile, request: TaskRequest) -> str:
        """Pick the model for a request.

        Only passthrough (chat) requests may name a model, and only one from
        the configured allowlist.
        """
        if request.model and profile.passthrough:
            if request.model not in self._allowed_chat_models:
                raise InvalidInputError(
                    f"Model '{request.model}' is not available for chat"
                )
            return request.model
        return self._models[profile.model_setting]

    async def run(self, request: TaskRequest) -> ParsedResult:
        """Run one request through the relay.

        Raises:
            TutorInputError: before any outbound call when input is unusable.
            UpstreamServiceError: when the provider call fails.
        """
        profile = get_task_profile(request.variant)
        payload = build_payload(request)
        model_id = self.select_model(profile, request)

        completion = await self._gateway.dispatch(payload, model_id)

        if profile.passthrough:
            return CompletionParsed(value=completion.message)

        cleaned = sanitize_completion(completion.text)
        result = validate_completion(
            cleaned,
            request.variant,
            raw_text=completion.text,
            strict=self._strict_shapes,
        )
        logger.debug(
            "Task %s finished with %s", request.variant.value, type(result).__name__
        )
        return result


def get_inference_gateway(request: Request) -> InferenceGatewayProtocol:
    """Return the gateway created by the application lifespan."""
    gateway: InferenceGatewayProtocol | None = getattr(
        request.app.state, "inference_gateway", None
    )
    if gateway is None:
        raise RuntimeError("Inference gateway is not initialised")
    return gateway


def get_task_dispatcher(
    gateway: Annotated[InferenceGatewayProtocol, Depends(get_inference_gateway)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TaskDispatcher:
    return TaskDispatcher.from_settings(gateway, settings)
