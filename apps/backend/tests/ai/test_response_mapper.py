"""Tests for mapping results and relay errors to HTTP responses."""

import json

import pytest

from core.context import set_correlation_id
from services.ai.exceptions import (
    InvalidInputError,
    MissingInputError,
    TutorRelayError,
    UpstreamServiceError,
)
from services.ai.models import CompletionParsed, CompletionParseFailure, TaskVariant
from services.ai.response_mapper import (
    DEFAULT_UPSTREAM_FAILURE_MESSAGE,
    map_error,
    map_result,
)
from services.ai.task_profiles import get_task_profile


def body_of(response):
    return json.loads(response.body)


class TestMapResult:
    def test_parsed_value_is_wrapped_in_output(self):
        response = map_result(CompletionParsed(value={"summary": "s"}))

        assert response.status_code == 200
        assert body_of(response) == {"output": {"summary": "s"}}

    def test_parse_failure_is_a_soft_200(self):
        response = map_result(
            CompletionParseFailure(raw="oops", warning="model did not return valid JSON")
        )

        assert response.status_code == 200
        assert body_of(response) == {
            "output": [],
            "raw": "oops",
            "warning": "model did not return valid JSON",
        }

    def test_empty_raw_text_is_still_reported(self):
        response = map_result(CompletionParseFailure(raw="", warning="w"))

        assert body_of(response)["raw"] == ""

    def test_unknown_result_type_is_rejected(self):
        with pytest.raises(TypeError, match="Unsupported result type"):
            map_result({"summary": "s"})


class TestMapError:
    def setup_method(self):
        set_correlation_id("test-correlation-id")

    def teardown_method(self):
        set_correlation_id(None)

    def test_missing_input_is_400(self):
        response = map_error(MissingInputError("No image uploaded. Expected field name: image"))

        assert response.status_code == 400
        assert body_of(response) == {
            "error": "No image uploaded. Expected field name: image",
            "type": "missing_input",
            "correlation_id": "test-correlation-id",
        }

    def test_invalid_input_is_400(self):
        response = map_error(InvalidInputError("bad"))

        assert response.status_code == 400
        assert body_of(response)["type"] == "invalid_input"

    def test_upstream_error_uses_variant_failure_message(self):
        exc = UpstreamServiceError(
            "Rate limit reached", status_code=429, error_type="rate_limit_exceeded"
        )
        response = map_error(exc, get_task_profile(TaskVariant.DEBUG_REPORT))

        assert response.status_code == 500
        assert body_of(response) == {
            "error": "Failed to generate debug report",
            "message": "Rate limit reached",
            "status": 429,
            "type": "rate_limit_exceeded",
            "correlation_id": "test-correlation-id",
        }

    def test_upstream_error_without_profile(self):
        response = map_error(UpstreamServiceError("down", error_type="timeout"))

        assert response.status_code == 500
        body = body_of(response)
        assert body["error"] == DEFAULT_UPSTREAM_FAILURE_MESSAGE
        assert body["type"] == "timeout"
        assert "status" not in body

    def test_flashcard_and_chat_failure_messages(self):
        exc = UpstreamServiceError("x")

        flashcards = map_error(exc, get_task_profile(TaskVariant.FLASHCARD_SET))
        chat = map_error(exc, get_task_profile(TaskVariant.RAW_CHAT))

        assert body_of(flashcards)["error"] == "Failed to generate study material"
        assert body_of(chat)["error"] == "Failed to generate chat response"

    def test_other_relay_error_is_500(self):
        response = map_error(TutorRelayError(message="odd", error_code="odd_error"))

        assert response.status_code == 500
        assert body_of(response)["type"] == "odd_error"
