"""Error taxonomy for the photo stream."""


class PhotoStreamError(Exception):
    """Base class for photo stream errors."""

    message = "Photo stream error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidIdentifier(PhotoStreamError):
    """Client supplied a malformed stream id or payload."""

    message = "Invalid streamId"


class StorageFailure(PhotoStreamError):
    """Storage backend call failed."""


class UploadPreparationFailed(StorageFailure):
    message = "Failed to presign upload"


class ListingFailed(StorageFailure):
    message = "Failed to list photos"


class DeleteFailed(StorageFailure):
    message = "Failed to clear stream"


class PollError(PhotoStreamError):
    """Viewer could not fetch or parse the photo list."""

    message = "Error loading photos"


class UploadFailed(PhotoStreamError):
    """Phone-side upload flow failed at one of its steps."""

    message = "Upload failed"

    def __init__(self, step: str, message: str | None = None) -> None:
        super().__init__(message or f"Upload failed during {step}")
        self.step = step
