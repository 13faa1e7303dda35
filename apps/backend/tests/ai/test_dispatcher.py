"""Tests for the shared build -> dispatch -> sanitize -> validate flow."""

import pytest

from core.config import Settings
from services.ai.dispatcher import TaskDispatcher
from services.ai.exceptions import (
    InvalidInputError,
    MissingInputError,
    UpstreamServiceError,
)
from services.ai.models import (
    CompletionParsed,
    CompletionParseFailure,
    ImageUpload,
    TaskRequest,
    TaskVariant,
)


IMAGE = ImageUpload(content=b"png-bytes", mime_type="image/png")
MODELS = {"VISION_MODEL": "vision-model", "CHAT_MODEL": "chat-model"}


def make_dispatcher(gateway, **kwargs):
    kwargs.setdefault("allowed_chat_models", ["chat-model", "other-chat-model"])
    return TaskDispatcher(gateway, models=MODELS, **kwargs)


@pytest.mark.asyncio
async def test_fenced_report_is_parsed(gateway_factory):
    gateway = gateway_factory('```json\n{"summary": "ok"}\n```')
    result = await make_dispatcher(gateway).run(
        TaskRequest(variant=TaskVariant.DEBUG_REPORT, image=IMAGE)
    )

    assert isinstance(result, CompletionParsed)
    assert result.value == {"summary": "ok"}
    assert gateway.calls[0][1] == "vision-model"


@pytest.mark.asyncio
async def test_invalid_json_reports_unsanitized_raw_text(gateway_factory):
    raw = "```json\nnot json\n```"
    gateway = gateway_factory(raw)
    result = await make_dispatcher(gateway).run(
        TaskRequest(variant=TaskVariant.FLASHCARD_SET, image=IMAGE)
    )

    assert isinstance(result, CompletionParseFailure)
    assert result.raw == raw


@pytest.mark.asyncio
async def test_missing_image_never_reaches_gateway(gateway_factory):
    gateway = gateway_factory("{}")

    with pytest.raises(MissingInputError):
        await make_dispatcher(gateway).run(TaskRequest(variant=TaskVariant.DEBUG_REPORT))

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_invalid_chat_messages_never_reach_gateway(gateway_factory):
    gateway = gateway_factory("hi")

    with pytest.raises(InvalidInputError):
        await make_dispatcher(gateway).run(
            TaskRequest(variant=TaskVariant.RAW_CHAT, chat_messages="hello")
        )

    assert gateway.calls == []


@pytest.mark.asyncio
async def test_upstream_errors_propagate(gateway_factory):
    gateway = gateway_factory(error=UpstreamServiceError("quota", status_code=429))

    with pytest.raises(UpstreamServiceError):
        await make_dispatcher(gateway).run(
            TaskRequest(variant=TaskVariant.DEBUG_REPORT, image=IMAGE)
        )


class TestChat:
    MESSAGES = [{"role": "user", "content": "hi"}]

    @pytest.mark.asyncio
    async def test_reply_message_is_passed_through(self, gateway_factory):
        message = {"role": "assistant", "content": "not json {"}
        gateway = gateway_factory("not json {", message=message)

        result = await make_dispatcher(gateway).run(
            TaskRequest(variant=TaskVariant.RAW_CHAT, chat_messages=self.MESSAGES)
        )

        assert isinstance(result, CompletionParsed)
        assert result.value == message
        assert gateway.calls[0][1] == "chat-model"

    @pytest.mark.asyncio
    async def test_allowed_model_override(self, gateway_factory):
        gateway = gateway_factory("hi")

        await make_dispatcher(gateway).run(
            TaskRequest(
                variant=TaskVariant.RAW_CHAT,
                chat_messages=self.MESSAGES,
                model="other-chat-model",
            )
        )

        assert gateway.calls[0][1] == "other-chat-model"

    @pytest.mark.asyncio
    async def test_unlisted_model_is_rejected(self, gateway_factory):
        gateway = gateway_factory("hi")

        with pytest.raises(InvalidInputError, match="not available"):
            await make_dispatcher(gateway).run(
                TaskRequest(
                    variant=TaskVariant.RAW_CHAT,
                    chat_messages=self.MESSAGES,
                    model="gpt-unknown",
                )
            )
        assert gateway.calls == []


@pytest.mark.asyncio
async def test_model_override_is_ignored_for_image_variants(gateway_factory):
    gateway = gateway_factory("[]")

    await make_dispatcher(gateway).run(
        TaskRequest(variant=TaskVariant.FLASHCARD_SET, image=IMAGE, model="chat-model")
    )

    assert gateway.calls[0][1] == "vision-model"


@pytest.mark.asyncio
async def test_strict_shapes_from_settings(gateway_factory):
    settings = Settings(_env_file=None, STRICT_OUTPUT_SHAPES=True)
    gateway = gateway_factory('[{"question": "Q"}]')

    result = await TaskDispatcher.from_settings(gateway, settings).run(
        TaskRequest(variant=TaskVariant.FLASHCARD_SET, image=IMAGE)
    )

    assert isinstance(result, CompletionParseFailure)
    assert result.reason == "shape_mismatch"


def test_from_settings_reads_models(gateway_factory):
    settings = Settings(
        _env_file=None,
        VISION_MODEL="v",
        CHAT_MODEL="c",
        CHAT_ALLOWED_MODELS="c,d",
    )
    dispatcher = TaskDispatcher.from_settings(gateway_factory(), settings)

    assert dispatcher._models == {"VISION_MODEL": "v", "CHAT_MODEL": "c"}
    assert dispatcher._allowed_chat_models == ("c", "d")
