"""Trust boundary between provider text and structured results.

``validate_completion`` never raises: a completion that is not valid JSON,
or (with strict shapes enabled) does not match the documented shape, is a
``CompletionParseFailure`` the caller reports as a soft failure.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from schemas.tutor import DebugReport, Flashcard
from services.ai.models import (
    CompletionParsed,
    CompletionParseFailure,
    ParsedResult,
    TaskVariant,
)


logger = logging.getLogger(__name__)

INVALID_JSON_WARNING = "model did not return valid JSON"
SHAPE_MISMATCH_WARNING = "model output did not match the expected shape"

# Wrapper keys models sometimes use around a flashcard list
_FLASHCARD_LIST_KEYS = ("flashcards", "cards")

_flashcard_list = TypeAdapter(list[Flashcard])


def validate_completion(
    text: str,
    variant: TaskVariant,
    *,
    raw_text: str | None = None,
    strict: bool = False,
) -> ParsedResult:
    """Parse sanitized completion text into the result for ``variant``.

    Args:
        text: Completion text with code fences already removed.
        variant: Task variant that determines the expected shape.
        raw_text: Original completion text reported on failure; defaults
            to ``text``.
        strict: Also check the value against the documented shape models.

    Returns:
        ``CompletionParsed`` with the structured value, or
        ``CompletionParseFailure`` carrying the raw text unchanged.
    """
    raw = text if raw_text is None else raw_text

    # Chat replies are free text relayed verbatim, never JSON-decoded
    if variant is TaskVariant.RAW_CHAT:
        return CompletionParsed(value=text)

    try:
        value: Any = json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        logger.warning(
            "Completion for %s is not valid JSON: %s (length=%d)",
            variant.value,
            getattr(exc, "msg", type(exc).__name__),
            len(raw),
        )
        return CompletionParseFailure(raw=raw, warning=INVALID_JSON_WARNING)

    if variant is TaskVariant.FLASHCARD_SET:
        value = _normalize_flashcards(value)

    if strict:
        try:
            _check_shape(value, variant)
        except ValidationError as exc:
            logger.warning(
                "Completion for %s failed shape check with %d error(s)",
                variant.value,
                exc.error_count(),
            )
            return CompletionParseFailure(
                raw=raw,
                warning=SHAPE_MISMATCH_WARNING,
                reason="shape_mismatch",
                errors=tuple(exc.errors(include_url=False, include_context=False)),
            )

    return CompletionParsed(value=value)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON and cannot be rendered back out
    raise ValueError(f"non-standard JSON constant {name}")


def _normalize_flashcards(value: Any) -> Any:
    """Coerce common near-miss flashcard outputs into a list of cards."""
    if isinstance(value, dict):
        for key in _FLASHCARD_LIST_KEYS:
            if isinstance(value.get(key), list):
                return value[key]
        if "question" in value and "answer" in value:
            return [value]
    return value


def _check_shape(value: Any, variant: TaskVariant) -> None:
    if variant is TaskVariant.DEBUG_REPORT:
        DebugReport.model_validate(value)
    elif variant is TaskVariant.FLASHCARD_SET:
        _flashcard_list.validate_python(value)
