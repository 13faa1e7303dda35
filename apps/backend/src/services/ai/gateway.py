"""Single outbound call to the multimodal completion service."""

from __future__ import annotations

import time
from typing import Any

import httpx
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    OpenAIError,
)

from core.config import Settings
from core.log import StructuredLogger
from services.ai.client_factory import create_openai_client
from services.ai.exceptions import UpstreamServiceError
from services.ai.models import InferencePayload, RawCompletion


structured_logger = StructuredLogger(__name__)


class InferenceGateway:
    """Performs exactly one completion call per dispatch, without retries.

    The gateway does not interpret the completion text; it only turns
    transport and provider failures into ``UpstreamServiceError``.
    """

    def __init__(
        self,
        client: AsyncOpenAI | None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> InferenceGateway:
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.OPENAI_TIMEOUT_SECONDS)
        )
        return cls(create_openai_client(settings, http_client), http_client)

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def dispatch(self, payload: InferencePayload, model_id: str) -> RawCompletion:
        """Send ``payload`` to ``model_id`` and return the first choice.

        Raises:
            UpstreamServiceError: on a missing credential, transport error,
                timeout, non-2xx response, or a response without choices.
        """
        if self._client is None:
            raise UpstreamServiceError(
                "Inference provider credential is not configured",
                error_type="configuration_error",
            )

        started = time.perf_counter()
        try:
            response = await self._client.chat.completions.create(
                model=model_id,
                messages=payload.as_messages(),  # type: ignore[arg-type]
            )
        except APITimeoutError as exc:
            self._log_failure(payload, model_id, started, "timeout", None)
            raise UpstreamServiceError(
                str(exc) or "Inference provider request timed out",
                error_type="timeout",
            ) from exc
        except APIStatusError as exc:
            error_type = getattr(exc, "type", None) or "api_error"
            self._log_failure(payload, model_id, started, error_type, exc.status_code)
            raise UpstreamServiceError(
                exc.message, status_code=exc.status_code, error_type=error_type
            ) from exc
        except APIConnectionError as exc:
            self._log_failure(payload, model_id, started, "connection_error", None)
            raise UpstreamServiceError(
                str(exc) or "Could not reach inference provider",
                error_type="connection_error",
            ) from exc
        except OpenAIError as exc:
            self._log_failure(payload, model_id, started, "provider_error", None)
            raise UpstreamServiceError(str(exc), error_type="provider_error") from exc

        completion = self._to_raw_completion(response, model_id)
        structured_logger.info(
            "Inference call completed",
            variant=payload.variant.value,
            model=completion.model,
            latency_ms=_elapsed_ms(started),
            finish_reason=completion.metadata.get("finish_reason"),
        )
        return completion

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
        if self._http_client is not None:
            await self._http_client.aclose()

    @staticmethod
    def _to_raw_completion(response: Any, model_id: str) -> RawCompletion:
        choices = getattr(response, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        if message is None:
            raise UpstreamServiceError(
                "Inference provider returned an empty response",
                error_type="empty_response",
            )

        usage = getattr(response, "usage", None)
        metadata: dict[str, Any] = {
            "id": getattr(response, "id", None),
            "finish_reason": getattr(choices[0], "finish_reason", None),
            "usage": usage.model_dump() if usage is not None else None,
        }
        return RawCompletion(
            text=message.content or "",
            message=message.model_dump(exclude_none=True),
            model=getattr(response, "model", None) or model_id,
            metadata=metadata,
        )

    @staticmethod
    def _log_failure(
        payload: InferencePayload,
        model_id: str,
        started: float,
        error_type: str,
        status_code: int | None,
    ) -> None:
        structured_logger.error(
            "Inference call failed",
            variant=payload.variant.value,
            model=model_id,
            latency_ms=_elapsed_ms(started),
            error_type=error_type,
            status_code=status_code,
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
