"""Tests for maplehttp.errors module."""

import pytest
from maplehttp.errors import (
    InvalidArgumentError,
    MapleHttpError,
    RequestError,
    ResponseError,
    StreamError,
    UploadError,
)


class TestErrorHierarchy:
    """Tests for error class hierarchy."""

    def test_maplehttp_error_is_exception(self):
        """Test MapleHttpError inherits from Exception."""
        assert issubclass(MapleHttpError, Exception)

    @pytest.mark.parametrize(
        "error_cls", [StreamError, RequestError, ResponseError, InvalidArgumentError, UploadError]
    )
    def test_errors_inherit_base(self, error_cls):
        """Test every error inherits from MapleHttpError."""
        assert issubclass(error_cls, MapleHttpError)

    def test_stream_error_is_os_error(self):
        """Test StreamError is also an OSError."""
        assert issubclass(StreamError, OSError)

    def test_invalid_argument_is_value_error(self):
        """Test InvalidArgumentError is also a ValueError."""
        assert issubclass(InvalidArgumentError, ValueError)


class TestErrorCatching:
    """Tests for catching errors at different hierarchy levels."""

    def test_catch_stream_error_as_base(self):
        """Test StreamError can be caught as MapleHttpError."""
        with pytest.raises(MapleHttpError, match="closed"):
            raise StreamError("stream closed")

    def test_catch_invalid_argument_as_value_error(self):
        """Test InvalidArgumentError can be caught as ValueError."""
        with pytest.raises(ValueError, match="bad port"):
            raise InvalidArgumentError("bad port")

    def test_upload_error_not_os_error(self):
        """Test UploadError is not caught as OSError."""
        with pytest.raises(UploadError):
            try:
                raise UploadError("moved")
            except OSError:
                pytest.fail("UploadError must not be an OSError")
