"""Init file for AI relay services."""

from .dispatcher import TaskDispatcher
from .gateway import InferenceGateway
from .sanitizer import sanitize_completion
from .validator import validate_completion


__all__ = [
    "InferenceGateway",
    "TaskDispatcher",
    "sanitize_completion",
    "validate_completion",
]
