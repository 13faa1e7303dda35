"""Assemble the message sequence sent to the inference provider.

Pure construction: no network, no file access. Input problems are raised
here, before any outbound call can happen.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from services.ai.exceptions import InvalidInputError, MissingInputError
from services.ai.models import InferencePayload, TaskRequest
from services.ai.task_profiles import TaskProfile, get_task_profile


def build_payload(request: TaskRequest) -> InferencePayload:
    """Build the provider payload for a task request.

    Raises:
        MissingInputError: an image variant was called without an image.
        InvalidInputError: chat messages are missing or malformed.
    """
    profile = get_task_profile(request.variant)
    if profile.passthrough:
        messages = _chat_messages(request.chat_messages)
    else:
        messages = _image_messages(profile, request)
    return InferencePayload(variant=request.variant, messages=tuple(messages))


def _image_messages(profile: TaskProfile, request: TaskRequest) -> list[dict[str, Any]]:
    if request.image is None:
        raise MissingInputError("No image uploaded. Expected field name: image")

    notes = request.notes or ""
    user_text = (profile.user_prompt or "{notes}").format(notes=notes)
    messages: list[dict[str, Any]] = []
    if profile.system_prompt:
        messages.append({"role": "system", "content": profile.system_prompt})
    messages.append(
        {
            "role": "user",
            "content": [
                {"type": "text", "text": user_text},
                {"type": "image_url", "image_url": {"url": request.image.data_url}},
            ],
        }
    )
    return messages


def _chat_messages(raw: Any) -> list[dict[str, Any]]:
    if raw is None or not isinstance(raw, list):
        raise InvalidInputError(
            "Invalid messages format, expected an array of messages"
        )
    if not raw:
        raise InvalidInputError("messages must contain at least one message")

    messages: list[dict[str, Any]] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise InvalidInputError(f"messages[{index}] must be an object")
        role = item.get("role")
        if not isinstance(role, str) or not role:
            raise InvalidInputError(f"messages[{index}].role must be a string")
        if "content" not in item:
            raise InvalidInputError(f"messages[{index}].content is required")
        messages.append(dict(item))
    return messages
