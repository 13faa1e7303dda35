import logging

from core.context import set_correlation_id
from core.log import StructuredLogger
from core.security_config import REDACTED, redact


def test_redact_masks_credentials():
    # use non-sensitive placeholder values to avoid secret-detection false positives
    data = {
        "api_key": "placeholder_key",  # pragma: allowlist secret
        "Authorization": "Bearer placeholder_token",
        "model": "gpt-4o-mini",
    }
    sanitized = redact(data)

    assert sanitized["api_key"] == REDACTED
    assert sanitized["Authorization"] == REDACTED
    assert sanitized["model"] == "gpt-4o-mini"


def test_redact_masks_uploaded_content():
    data = {
        "image_data_url": "data:image/png;base64,AAAA",
        "message_content": "student notes",
        "variant": "debug_report",
    }
    sanitized = redact(data)

    assert sanitized["image_data_url"] == REDACTED
    assert sanitized["message_content"] == REDACTED
    assert sanitized["variant"] == "debug_report"


def test_redact_walks_nested_values():
    sanitized = redact(
        {"upload": {"filename": "a.png", "bytes": b"\x89PNG"}, "items": [{"token": "t"}]}
    )

    assert sanitized["upload"]["filename"] == "a.png"
    assert sanitized["upload"]["bytes"] == "<4 bytes>"
    assert sanitized["items"] == [{"token": REDACTED}]


def test_redact_does_not_mutate_input():
    data = {"token": "t"}
    redact(data)
    assert data == {"token": "t"}


def test_structured_logger_includes_correlation_id(caplog):
    logger = StructuredLogger("tests.structured")
    set_correlation_id("cid-123")
    try:
        with caplog.at_level(logging.INFO, logger="tests.structured"):
            logger.info("Inference call completed", model="gpt-4o", api_key="k")
    finally:
        set_correlation_id(None)

    record = caplog.records[-1]
    assert record.getMessage() == (
        "[cid-123] Inference call completed model=gpt-4o api_key=[REDACTED]"
    )
    assert record.structured_data == {
        "correlation_id": "cid-123",
        "event": "Inference call completed",
        "model": "gpt-4o",
        "api_key": REDACTED,
    }


def test_structured_logger_skips_disabled_levels(caplog):
    logger = StructuredLogger("tests.structured.quiet")
    with caplog.at_level(logging.WARNING, logger="tests.structured.quiet"):
        logger.debug("not emitted")

    assert not [r for r in caplog.records if r.name == "tests.structured.quiet"]


def test_exception_uses_given_exception(caplog):
    logger = StructuredLogger("tests.structured.exc")
    error = ValueError("boom")
    with caplog.at_level(logging.ERROR, logger="tests.structured.exc"):
        logger.exception("Failed", exc_info=error)

    record = caplog.records[-1]
    assert record.exc_info[1] is error
