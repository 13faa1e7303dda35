"""Redaction and error-exposure rules for the relay API.

Two concerns live here:
- which structured-log fields are masked before they reach a log sink
- which optional error-body fields each environment may expose
"""

from typing import Any


REDACTED = "[REDACTED]"

# Substrings that mark a field as a credential
CREDENTIAL_MARKERS = frozenset(
    {
        "secret",
        "token",
        "authorization",
        "authentication",
        "auth",
        "api_key",
        "apikey",
        "key",
        "bearer",
        "password",
        "cookie",
        "organization",
    }
)

# Substrings that mark a field as student-uploaded material
UPLOAD_MARKERS = frozenset({"image", "data_url", "base64", "content"})

SENSITIVE_MARKERS = CREDENTIAL_MARKERS | UPLOAD_MARKERS

# Optional error-body fields per environment. The contract fields (error,
# message, status, type) are always present when set.
PRODUCTION_ERROR_FIELDS = frozenset({"correlation_id"})
DEVELOPMENT_ERROR_FIELDS = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> frozenset[str]:
    """Optional error-body fields that may be exposed in ``environment``."""
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS
    return DEVELOPMENT_ERROR_FIELDS


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_MARKERS)


def redact(value: Any) -> Any:
    """Return a copy of ``value`` that is safe to log.

    Mapping entries under a sensitive key are masked, containers are walked
    recursively and raw bytes are replaced by their length.
    """
    if isinstance(value, dict):
        return {
            key: REDACTED if is_sensitive_key(str(key)) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list | tuple):
        return [redact(item) for item in value]
    if isinstance(value, bytes | bytearray):
        return f"<{len(value)} bytes>"
    return value
