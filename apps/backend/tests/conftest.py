"""Shared test fixtures for pytest.

The environment is forced to ``test`` before the application is imported so
settings are built from defaults without reading any .env file. A dummy
provider key lets the lifespan build a real (never called) SDK client.
"""

import io
import os
from collections.abc import AsyncGenerator, Callable, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from PIL import Image


os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from core.config import Settings, get_settings
from main import app
from services.ai.dispatcher import get_inference_gateway
from services.ai.models import InferencePayload, RawCompletion


class FakeGateway:
    """Stands in for InferenceGateway and records every dispatch."""

    def __init__(
        self,
        text: str = "",
        *,
        message: dict | None = None,
        error: Exception | None = None,
    ) -> None:
        self.text = text
        self.message = message
        self.error = error
        self.calls: list[tuple[InferencePayload, str]] = []

    async def dispatch(self, payload: InferencePayload, model_id: str) -> RawCompletion:
        self.calls.append((payload, model_id))
        if self.error is not None:
            raise self.error
        message = self.message or {"role": "assistant", "content": self.text}
        return RawCompletion(text=self.text, message=message, model=model_id)


def create_test_image(width: int = 64, height: int = 48, format: str = "PNG") -> bytes:
    """Create a test image in memory."""
    img = Image.new("RGB", (width, height), color="white")
    output = io.BytesIO()
    img.save(output, format=format)
    return output.getvalue()


@pytest.fixture
def png_image() -> bytes:
    return create_test_image()


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(fake_gateway: FakeGateway) -> Generator[TestClient, None, None]:
    """Synchronous client with the gateway replaced by a fake.

    The lifespan is not entered, so no SDK client is created.
    """
    app.dependency_overrides[get_inference_gateway] = lambda: fake_gateway
    yield TestClient(app)
    app.dependency_overrides.pop(get_inference_gateway, None)


@pytest_asyncio.fixture
async def async_client(fake_gateway: FakeGateway) -> AsyncGenerator[AsyncClient, None]:
    """Async client with the gateway replaced by a fake."""
    app.dependency_overrides[get_inference_gateway] = lambda: fake_gateway
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.pop(get_inference_gateway, None)


@pytest.fixture
def gateway_factory() -> type[FakeGateway]:
    """Build extra fakes in tests that need a specific completion."""
    return FakeGateway


@pytest.fixture
def override_settings() -> Generator[Callable[..., Settings], None, None]:
    """Replace request-time settings with explicit values for one test."""

    def _override(**values: object) -> Settings:
        settings = Settings(_env_file=None, **values)  # type: ignore[call-arg]
        app.dependency_overrides[get_settings] = lambda: settings
        return settings

    yield _override
    app.dependency_overrides.pop(get_settings, None)
