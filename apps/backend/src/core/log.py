"""Structured logging for the relay.

``StructuredLogger`` attaches the request's correlation ID and a redacted copy
of its keyword fields to every record as ``structured_data``. In production
``setup_logging`` renders records as JSON with python-json-logger, which nests
``structured_data`` in the output; elsewhere the fields are appended to a
readable line.
"""

import logging
import logging.config
from typing import Any

from core.config import get_settings
from core.context import get_correlation_id
from core.security_config import redact


# Third-party loggers that are too chatty at INFO in production
QUIET_IN_PRODUCTION = ("uvicorn.access", "httpx", "openai")


class StructuredLogger:
    """Logger that takes an event name plus keyword fields.

    Usage:
        structured_logger = StructuredLogger(__name__)
        structured_logger.info("Inference call completed", model="gpt-4o")
    """

    def __init__(self, logger_name: str) -> None:
        self.logger = logging.getLogger(logger_name)

    def _emit(
        self,
        level: int,
        event: str,
        fields: dict[str, Any],
        exc_info: BaseException | bool = False,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return

        correlation_id = get_correlation_id()
        safe_fields = redact(fields)

        if get_settings().ENVIRONMENT == "production":
            text = event
        else:
            rendered = " ".join(f"{key}={value}" for key, value in safe_fields.items())
            text = f"[{correlation_id}] {event} {rendered}".rstrip()

        self.logger.log(
            level,
            text,
            exc_info=exc_info,
            extra={
                "structured_data": {
                    "correlation_id": correlation_id,
                    "event": event,
                    **safe_fields,
                }
            },
        )

    def debug(self, event: str, **fields: Any) -> None:
        self._emit(logging.DEBUG, event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._emit(logging.INFO, event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._emit(logging.WARNING, event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._emit(logging.ERROR, event, fields)

    def exception(
        self, event: str, exc_info: BaseException | bool = True, **fields: Any
    ) -> None:
        """Log at ERROR with a traceback, from ``exc_info`` or the active one."""
        self._emit(logging.ERROR, event, fields, exc_info=exc_info)


def _formatter_config(environment: str) -> dict[str, Any]:
    if environment == "production":
        return {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
            "rename_fields": {"levelname": "level", "asctime": "timestamp"},
        }
    return {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}


def setup_logging() -> None:
    """Install the stdout root handler.

    Idempotent: once the root logger has a handler (from an earlier call, from
    uvicorn or from a test runner) this does nothing.
    """
    if logging.getLogger().handlers:
        return

    environment = get_settings().ENVIRONMENT
    level = "DEBUG" if environment == "development" else "INFO"
    quiet = QUIET_IN_PRODUCTION if environment == "production" else ()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": _formatter_config(environment)},
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "default",
                    "level": level,
                }
            },
            "root": {"level": level, "handlers": ["stdout"]},
            "loggers": {name: {"level": "WARNING"} for name in quiet},
        }
    )
