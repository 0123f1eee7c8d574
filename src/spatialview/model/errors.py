"""
Pipeline Errors
===============
Exception taxonomy for a single file's ingestion run.

Every error here is terminal for the file it was raised for and is reported to
the user as one ERROR log event. None of them affects other files.
"""


class PipelineError(Exception):
    """Base class for all ingestion failures."""


class EmptyInputError(PipelineError):
    """The source file holds zero bytes."""

    def __init__(self, message: str = "Invalid point cloud file: empty or corrupted data.") -> None:
        super().__init__(message)


class DecodeError(PipelineError):
    """The content is malformed, truncated or uses an unsupported layout."""


class UnsupportedFormatError(PipelineError):
    """A decode was requested for a file the classifier did not recognise."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"Unsupported file format: {file_name}")
        self.file_name = file_name
