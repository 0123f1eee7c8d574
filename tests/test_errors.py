"""Tests for spatialview.model.errors - exception classes."""
import pytest

from spatialview.model.errors import (
    DecodeError,
    EmptyInputError,
    PipelineError,
    UnsupportedFormatError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize("exc_class", [EmptyInputError, DecodeError])
    def test_catchable_by_base(self, exc_class):
        with pytest.raises(PipelineError):
            raise exc_class()

    def test_unsupported_format_names_file(self):
        err = UnsupportedFormatError("photo.png")
        assert isinstance(err, PipelineError)
        assert err.file_name == "photo.png"
        assert str(err) == "Unsupported file format: photo.png"

    def test_empty_input_default_message(self):
        assert "empty" in str(EmptyInputError())
