"""Request-scoped context shared by logging and error responses."""

import uuid
from contextvars import ContextVar


_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str:
    """Return the current request's correlation ID, creating one when unset.

    Code running outside a request (startup, background tasks) still gets a
    stable ID for the rest of its context.
    """
    current = _correlation_id.get()
    if not current:
        current = str(uuid.uuid4())
        _correlation_id.set(current)
    return current


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)
