"""Application settings: server, inference provider, limits and CORS."""

import json
import os
from functools import lru_cache
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


# Env file read in each environment; tests run on defaults and overrides only
ENV_FILES: dict[str, str | None] = {
    "development": ".env",
    "production": ".env.prod",
    "test": None,
}

PROVIDERS = frozenset({"openai", "azure_openai"})

# List settings accept a JSON array or a comma-separated string from env
StrList = Annotated[list[str], NoDecode]


def parse_str_list(value: object) -> list[str]:
    """Normalize a list, JSON array string or CSV string to ``list[str]``."""
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError("expected a JSON array or comma-separated list") from e
            if not isinstance(value, list):
                raise ValueError("expected a JSON array")
        else:
            return [item.strip() for item in text.split(",") if item.strip()]
    if isinstance(value, list | tuple):
        return [str(item).strip() for item in value]
    raise ValueError("expected a list or a string")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Server
    APP_NAME: str = "Block Tutor Relay"
    ENVIRONMENT: str = "development"  # development | production | test
    HOST: str = "0.0.0.0"
    PORT: int = 5000

    # Inference provider
    LLM_PROVIDER: str = "openai"  # openai | azure_openai
    OPENAI_API_KEY: str | None = None
    OPENAI_BASE_URL: str | None = None
    AZURE_OPENAI_ENDPOINT: str | None = None
    AZURE_OPENAI_API_KEY: str | None = None
    AZURE_OPENAI_API_VERSION: str | None = None
    OPENAI_TIMEOUT_SECONDS: float = 60.0

    # Models per task family
    VISION_MODEL: str = "gpt-4o-mini"
    CHAT_MODEL: str = "gpt-4o"
    CHAT_ALLOWED_MODELS: StrList = ["gpt-4o", "gpt-4o-mini"]

    # Request limits
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    MAX_JSON_BODY_BYTES: int = 10 * 1024 * 1024

    # Check parsed completions against the documented output shapes
    STRICT_OUTPUT_SHAPES: bool = False

    # CORS; the default matches the Vite dev server
    CORS_ORIGINS: StrList = ["http://localhost:5173", "http://127.0.0.1:5173"]
    ALLOW_CREDENTIALS: bool = True

    @field_validator("CORS_ORIGINS", "CHAT_ALLOWED_MODELS", mode="before")
    @classmethod
    def _split_lists(cls, v: object) -> list[str]:
        return parse_str_list(v)

    @field_validator("LLM_PROVIDER")
    @classmethod
    def _known_provider(cls, v: str) -> str:
        provider = v.strip().lower()
        if provider not in PROVIDERS:
            raise ValueError("LLM_PROVIDER must be 'openai' or 'azure_openai'")
        return provider

    @model_validator(mode="after")
    def _no_wildcard_with_credentials(self) -> "Settings":
        # Browsers refuse credentialed responses for "*", so fail at startup
        if self.ALLOW_CREDENTIALS and "*" in self.CORS_ORIGINS:
            raise ValueError(
                "CORS_ORIGINS cannot contain '*' when ALLOW_CREDENTIALS is true; "
                "list the allowed origins explicitly"
            )
        return self

    @property
    def inference_credential_loaded(self) -> bool:
        if self.LLM_PROVIDER == "azure_openai":
            return bool(self.AZURE_OPENAI_API_KEY and self.AZURE_OPENAI_ENDPOINT)
        return bool(self.OPENAI_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process from the environment's env file."""
    environment = os.getenv("ENVIRONMENT", "development").lower()
    if environment not in ENV_FILES:
        raise ValueError(
            f"ENVIRONMENT must be one of {', '.join(ENV_FILES)}; got '{environment}'"
        )

    # `_env_file` is a runtime-only pydantic-settings argument
    settings = Settings(_env_file=ENV_FILES[environment])  # type: ignore[call-arg]

    if environment == "production" and not settings.inference_credential_loaded:
        raise RuntimeError(
            "An inference provider credential must be set in production "
            "(OPENAI_API_KEY, or AZURE_OPENAI_ENDPOINT + AZURE_OPENAI_API_KEY)"
        )
    return settings
