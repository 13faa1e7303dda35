"""Validation utilities for screenshot uploads.

Uploads are checked for size and type before they are inlined into a
provider payload. Bytes are only ever held in memory; nothing here writes
to disk.
"""

import io
import logging

from PIL import Image, UnidentifiedImageError

from services.ai.exceptions import InvalidInputError, MissingInputError
from services.ai.models import ImageUpload


logger = logging.getLogger(__name__)

# Image types accepted by vision-capable chat completion models
ALLOWED_MIME_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}

# Declared types that say nothing about the payload; sniff these instead
_UNTYPED_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


class ImageValidationError(InvalidInputError):
    """Raised when image validation fails."""


class ImageSizeLimitError(ImageValidationError):
    """Raised when image size exceeds limits."""


class ImageFormatError(ImageValidationError):
    """Raised when image format is not supported."""


def validate_file_size(size: int, max_bytes: int) -> None:
    """Validate that a file size is within the per-file limit.

    Raises:
        MissingInputError: If the file is empty
        ImageSizeLimitError: If file size exceeds the limit
    """
    if size == 0:
        raise MissingInputError("Uploaded image is empty")
    if size > max_bytes:
        raise ImageSizeLimitError(
            f"Image size {size} bytes exceeds limit of {max_bytes} bytes"
        )


def sniff_mime_type(content: bytes) -> str:
    """Identify the image format from its bytes.

    Raises:
        ImageFormatError: If Pillow cannot identify an allowed image format
    """
    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError) as e:
        raise ImageFormatError("Uploaded file is not a recognised image") from e

    mime_type = Image.MIME.get(image_format or "", "")
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ImageFormatError(f"Unsupported image type: {mime_type or image_format}")
    return mime_type


def resolve_mime_type(content: bytes, declared: str | None) -> str:
    """Return the MIME type to send upstream for an uploaded image.

    A declared allowed type is trusted as-is. A missing or generic type is
    resolved by sniffing the bytes. Anything else is rejected.
    """
    mime_type = (declared or "").split(";", 1)[0].strip().lower()
    if mime_type in ALLOWED_MIME_TYPES:
        return mime_type
    if mime_type in _UNTYPED_MIME_TYPES:
        sniffed = sniff_mime_type(content)
        logger.debug("Resolved untyped upload to %s", sniffed)
        return sniffed
    raise ImageFormatError(
        f"Unsupported image type: {mime_type}. "
        f"Only {', '.join(sorted(ALLOWED_MIME_TYPES))} are allowed."
    )


def build_image_upload(
    content: bytes,
    declared_type: str | None,
    filename: str | None,
    max_bytes: int,
) -> ImageUpload:
    """Validate raw upload bytes and wrap them for the payload builder."""
    validate_file_size(len(content), max_bytes)
    mime_type = resolve_mime_type(content, declared_type)
    return ImageUpload(content=content, mime_type=mime_type, filename=filename)
