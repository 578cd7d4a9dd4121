class GalleryError(Exception):
    """Base class for all domain errors raised by the gallery service."""

class FetchError(GalleryError):
    """Generic transport or remote failure while reading records."""

class NotFoundError(GalleryError):
    """Requested record is absent from the active source."""

class FileValidationError(GalleryError):
    """A selected clip was rejected before any network call was made.

    `reason` is one of: type, size, duration, unreadable.
    """

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

class ProbeError(GalleryError):
    """The media decoder could not report a duration for the file."""

class UploadError(GalleryError):
    """Media host (or signing proxy) rejected or failed the upload."""

class BackendError(GalleryError):
    """Processing backend did not acknowledge the uploaded asset."""

class UploadInProgressError(GalleryError):
    """Submit was called on a job that is not idle with a file."""
