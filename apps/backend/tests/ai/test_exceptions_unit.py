"""Unit tests for relay domain exceptions."""

import pytest

from services.ai.exceptions import (
    InvalidInputError,
    MissingInputError,
    TutorInputError,
    TutorRelayError,
    UpstreamServiceError,
)
from services.images.uploads import ImageFormatError, ImageSizeLimitError


class TestExceptionHierarchy:
    def test_input_errors_share_a_base(self):
        assert issubclass(MissingInputError, TutorInputError)
        assert issubclass(InvalidInputError, TutorInputError)
        assert issubclass(TutorInputError, TutorRelayError)

    def test_upstream_error_is_not_an_input_error(self):
        assert not issubclass(UpstreamServiceError, TutorInputError)
        assert issubclass(UpstreamServiceError, TutorRelayError)

    def test_image_errors_are_invalid_input(self):
        assert issubclass(ImageSizeLimitError, InvalidInputError)
        assert issubclass(ImageFormatError, InvalidInputError)


class TestExceptionAttributes:
    def test_error_codes(self):
        assert MissingInputError().error_code == "missing_input"
        assert InvalidInputError().error_code == "invalid_input"
        assert UpstreamServiceError().error_code == "upstream_error"

    def test_upstream_error_details(self):
        exc = UpstreamServiceError("quota", status_code=429, error_type="insufficient_quota")

        assert exc.message == "quota"
        assert exc.status_code == 429
        assert exc.error_type == "insufficient_quota"

    def test_upstream_error_defaults(self):
        exc = UpstreamServiceError()

        assert exc.status_code is None
        assert exc.error_type is None

    def test_can_be_raised_and_caught_as_base(self):
        with pytest.raises(TutorRelayError) as exc_info:
            raise MissingInputError("No image uploaded. Expected field name: image")

        assert exc_info.value.message.startswith("No image uploaded")

    def test_exceptions_are_hashable(self):
        errors = {MissingInputError(), MissingInputError()}
        assert len(errors) == 2
