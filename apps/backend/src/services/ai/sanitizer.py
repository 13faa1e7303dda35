"""Strip markdown code-fence wrapping from model completions."""

from __future__ import annotations

import re


# Opening fence with an optional language tag ("```", "```json", "```python\n").
# A tag is only consumed when it is "json" or followed by whitespace, so a
# one-line "```true```" keeps its payload.
_LEADING_FENCE = re.compile(r"\A```(?:json\b|[\w+.-]+(?=\s))?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"```\Z")


def _strip_fences_once(text: str) -> str:
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def sanitize_completion(text: str | None) -> str:
    """Remove surrounding fence markers and whitespace from a completion.

    Interior content is never touched: only a leading fence, a trailing
    fence and the whitespace around the whole text are removed. Repeated
    until stable, so ``sanitize_completion`` is idempotent. Never raises.
    """
    cleaned = (text or "").strip()
    while True:
        stripped = _strip_fences_once(cleaned)
        if stripped == cleaned:
            return cleaned
        cleaned = stripped
