"""Build the provider SDK client used by the inference gateway.

Supports the public OpenAI API and Azure OpenAI, selected by
``LLM_PROVIDER``. SDK-level retries are always disabled: the relay surfaces
the first failure instead of retrying.

Usage:
    from services.ai.client_factory import create_openai_client

    client = create_openai_client(get_settings(), http_client)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from openai import AsyncAzureOpenAI, AsyncOpenAI

from core.config import Settings


if TYPE_CHECKING:
    from httpx import AsyncClient

logger = logging.getLogger(__name__)


def _normalize_azure_endpoint(endpoint: str) -> str:
    """Normalize Azure OpenAI endpoint.

    Azure endpoints are typically provided as `https://{resource}.openai.azure.com/`.
    Trailing slashes can lead to `//openai/...` URLs, which Azure may treat as a
    different path and return 404.
    """
    return endpoint.rstrip("/")


def _validate_azure_credentials(settings: Settings) -> bool:
    """Validate that Azure OpenAI credentials are properly configured."""
    if (
        not settings.AZURE_OPENAI_ENDPOINT
        or not settings.AZURE_OPENAI_API_KEY
        or not settings.AZURE_OPENAI_API_VERSION
    ):
        logger.warning("LLM_PROVIDER=azure_openai but credentials missing")
        return False
    return True


def _validate_openai_credentials(settings: Settings) -> bool:
    """Validate that an OpenAI API key is configured."""
    if not settings.OPENAI_API_KEY:
        logger.warning("OpenAI API key not configured")
        return False
    return True


def create_openai_client(
    settings: Settings,
    http_client: AsyncClient | None = None,
) -> AsyncOpenAI | None:
    """Create the async SDK client for the configured provider.

    Returns:
        A configured client, or None when the provider credential is missing.
        The gateway turns a missing client into an upstream configuration
        error at call time so the server can still start and answer
        liveness checks.
    """
    if settings.LLM_PROVIDER == "azure_openai":
        if not _validate_azure_credentials(settings):
            return None
        logger.info("Using Azure OpenAI endpoint for inference")
        return AsyncAzureOpenAI(
            azure_endpoint=_normalize_azure_endpoint(
                settings.AZURE_OPENAI_ENDPOINT or ""
            ),
            api_key=settings.AZURE_OPENAI_API_KEY,
            api_version=settings.AZURE_OPENAI_API_VERSION,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            max_retries=0,
            http_client=http_client,
        )

    if not _validate_openai_credentials(settings):
        return None
    logger.info("Using OpenAI API for inference")
    return AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
        max_retries=0,
        http_client=http_client,
    )
