"""Request-scoped value objects for the tutoring relay.

Nothing here outlives a single request. Every type is a frozen dataclass so
a stage can hand its output to the next one without defensive copies:

* TaskRequest       - what the caller asked for (variant + inputs)
* InferencePayload  - the exact message sequence sent to the provider
* RawCompletion     - what the provider returned for one call
* CompletionParsed / CompletionParseFailure - the validator's tagged result
"""

from __future__ import annotations

import base64
import copy
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TaskVariant(StrEnum):
    """Tutoring/generation mode of a request."""

    DEBUG_REPORT = "debug_report"
    FLASHCARD_SET = "flashcard_set"
    RAW_CHAT = "raw_chat"


@dataclass(frozen=True, slots=True)
class ImageUpload:
    """An uploaded image held in memory for the duration of a request."""

    content: bytes
    mime_type: str
    filename: str | None = None

    @property
    def data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True, slots=True)
class TaskRequest:
    variant: TaskVariant
    notes: str = ""
    image: ImageUpload | None = None
    chat_messages: Any = None
    model: str | None = None


@dataclass(frozen=True, slots=True)
class InferencePayload:
    """Messages sent to the provider; built once, never mutated."""

    variant: TaskVariant
    messages: tuple[dict[str, Any], ...]

    def as_messages(self) -> list[dict[str, Any]]:
        """Return a deep copy suitable for handing to the provider SDK."""
        return copy.deepcopy(list(self.messages))


@dataclass(frozen=True, slots=True)
class RawCompletion:
    text: str
    message: dict[str, Any]
    model: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CompletionParsed:
    """Validator success: the structured value for the variant."""

    value: Any


@dataclass(frozen=True, slots=True)
class CompletionParseFailure:
    """Validator soft failure carrying the raw completion for diagnostics."""

    raw: str
    warning: str
    reason: str = "invalid_json"
    errors: Sequence[Any] = ()


ParsedResult = CompletionParsed | CompletionParseFailure
