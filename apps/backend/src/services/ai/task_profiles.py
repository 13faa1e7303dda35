"""Per-variant lookup table driving the single dispatch flow."""

from __future__ import annotations

from dataclasses import dataclass

from services.ai import prompts
from services.ai.models import TaskVariant


@dataclass(frozen=True, slots=True)
class TaskProfile:
    """Everything that differs between task variants.

    Attributes:
        variant: The variant this profile describes.
        system_prompt: Fixed system instruction, or None when the caller
            supplies the whole conversation.
        user_prompt: Template for the user turn text; formatted with ``notes``.
        model_setting: Name of the Settings attribute holding the default model.
        requires_image: Whether an uploaded image is mandatory.
        passthrough: Return the provider message as-is instead of parsing JSON.
        failure_message: Fixed, user-safe message for upstream failures.
    """

    variant: TaskVariant
    system_prompt: str | None
    user_prompt: str | None
    model_setting: str
    requires_image: bool
    passthrough: bool
    failure_message: str


TASK_PROFILES: dict[TaskVariant, TaskProfile] = {
    TaskVariant.DEBUG_REPORT: TaskProfile(
        variant=TaskVariant.DEBUG_REPORT,
        system_prompt=prompts.DEBUG_REPORT_SYSTEM_PROMPT,
        user_prompt=prompts.DEBUG_REPORT_USER_PROMPT,
        model_setting="VISION_MODEL",
        requires_image=True,
        passthrough=False,
        failure_message="Failed to generate debug report",
    ),
    TaskVariant.FLASHCARD_SET: TaskProfile(
        variant=TaskVariant.FLASHCARD_SET,
        system_prompt=prompts.FLASHCARD_SYSTEM_PROMPT,
        user_prompt=prompts.FLASHCARD_USER_PROMPT,
        model_setting="VISION_MODEL",
        requires_image=True,
        passthrough=False,
        failure_message="Failed to generate study material",
    ),
    TaskVariant.RAW_CHAT: TaskProfile(
        variant=TaskVariant.RAW_CHAT,
        system_prompt=None,
        user_prompt=None,
        model_setting="CHAT_MODEL",
        requires_image=False,
        passthrough=True,
        failure_message="Failed to generate chat response",
    ),
}


def get_task_profile(variant: TaskVariant) -> TaskProfile:
    return TASK_PROFILES[variant]
