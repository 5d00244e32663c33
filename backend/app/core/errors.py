"""
Upload rejection taxonomy.

Every guard raises UploadRejected with a ready-to-display message; the
pipeline turns it into a Rejected outcome and the route maps the kind to
an HTTP status.
"""

from enum import Enum


class ErrorKind(str, Enum):
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    PAYLOAD_TOO_SMALL = "PayloadTooSmall"
    PAYLOAD_TOO_LARGE = "PayloadTooLarge"
    UNREADABLE_IMAGE = "UnreadableImage"
    RESOLUTION_TOO_SMALL = "ResolutionTooSmall"
    STORAGE_UNAVAILABLE = "StorageUnavailable"
    NO_FILE_PRESENT = "NoFilePresent"

    @property
    def status_code(self) -> int:
        # environment fault, not a bad request
        if self is ErrorKind.STORAGE_UNAVAILABLE:
            return 503
        return 400

    @property
    def is_client_fault(self) -> bool:
        return self.status_code < 500


class UploadRejected(Exception):
    """A guard refused the upload."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}, {self.message!r})"


class StorageUnavailable(UploadRejected):
    """The storage directory cannot be created or written."""

    def __init__(self, message: str = "Upload storage is unavailable"):
        super().__init__(ErrorKind.STORAGE_UNAVAILABLE, message)
