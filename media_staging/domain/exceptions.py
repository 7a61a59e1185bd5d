"""
Defines custom exception types for the Media Staging application.

Every staging failure is reported to callers as one of these exceptions, either
through a completion callback or through the future returned by the stager.
Each staging exception carries a numeric `code` so callers that only care about
the category of a failure can branch on it without importing every class.

All custom exceptions inherit from the base `MediaStagingException`.
"""


class MediaStagingException(Exception):
    """Base class for all custom exceptions in the Media Staging application."""

    code: int = 0
    default_message: str = "Media staging failed"

    def __init__(self, message: str = "", *args):
        super().__init__(message or self.default_message, *args)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


# --- Staging Exceptions ---
class StagingException(MediaStagingException):
    """Base class for failures of a single staging request."""

    pass


class ContentUnavailableException(StagingException):
    """
    Raised when the media library cannot provide the content of a reference.

    Typical causes are a file that disappeared from the library or a download
    that was not permitted.
    """

    code = -1
    default_message = "Unable to retrieve content from media reference"


class ImageDecodeException(StagingException):
    """Raised when the full-size image of a reference cannot be decoded."""

    code = -2
    default_message = "Unable to retrieve image from media reference"


class VideoAssetUnavailableException(StagingException):
    """
    Raised when a video reference has no usable audiovisual asset.

    The asset is considered unusable when it is missing, cannot be probed or
    contains no video stream.
    """

    code = -3
    default_message = "Unable to retrieve video from media reference"


class ExportFailedException(StagingException):
    """
    Raised when a video export does not complete.

    `status` holds the terminal `ExportStatus` of the session, so callers can
    tell an FFmpeg failure from an abandoned (timed out) export.
    """

    code = -4
    default_message = "Failed to export video from media reference"

    def __init__(self, message: str = "", status=None):
        super().__init__(message)
        self.status = status


class UnsupportedMediaTypeException(StagingException):
    """Raised when a reference is neither an image nor a video."""

    code = -5
    default_message = "Unsupported file type"


class WriteFailedException(StagingException):
    """Raised when an encoded file cannot be written to the staging directory."""

    code = -6
    default_message = "Unable to write staged file"


# --- Directory Exceptions ---
class TempDirectoryException(MediaStagingException):
    """
    Raised when the staging directory cannot be created or deleted.

    `TempDirectory` only raises this in strict mode; otherwise directory
    failures are logged and swallowed.
    """

    code = -7
    default_message = "Temporary directory operation failed"
