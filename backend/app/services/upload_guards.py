"""
Upload guards.

Each guard has one responsibility and raises UploadRejected with a
client-facing message when its check fails:
- TypeGuard: declared media type against the allow-list
- SizeGuard: payload length against the byte bounds
- ResolutionGuard: decoded pixel dimensions against the minimum
"""

from typing import Optional, Tuple

from app.core.config import GuardConfig
from app.core.errors import ErrorKind, UploadRejected

SVG_MEDIA_TYPE = "image/svg+xml"


def format_bytes(size: int) -> str:
    """2048 -> '2 KB', 10485760 -> '10 MB'."""
    for unit, factor in (("MB", 1024 * 1024), ("KB", 1024)):
        if size >= factor and size % factor == 0:
            return f"{size // factor} {unit}"
    return f"{size} bytes"


class TypeGuard:
    def __init__(self, config: GuardConfig):
        self.config = config

    def check(self, media_type: Optional[str]) -> str:
        # exact match: "IMAGE/PNG" is not on the list
        if media_type not in self.config.allowed_media_types:
            allowed = ", .".join(self.config.allowed_extensions)
            raise UploadRejected(
                ErrorKind.UNSUPPORTED_MEDIA_TYPE,
                f"Unsupported file type. Allowed types: .{allowed}",
            )
        return media_type


class SizeGuard:
    def __init__(self, config: GuardConfig):
        self.config = config

    def check(self, size: Optional[int]) -> Optional[int]:
        """
        Check a byte length against the configured bounds (inclusive).

        None means the length is not known yet; the check is deferred to
        the observed size after the transfer.
        """
        if size is None:
            return None
        if size < self.config.min_size_bytes:
            raise UploadRejected(
                ErrorKind.PAYLOAD_TOO_SMALL,
                f"File is too small. Minimum size is {format_bytes(self.config.min_size_bytes)}",
            )
        if size > self.config.max_size_bytes:
            raise UploadRejected(
                ErrorKind.PAYLOAD_TOO_LARGE,
                f"File is too large. Maximum size is {format_bytes(self.config.max_size_bytes)}",
            )
        return size


class ResolutionGuard:
    def __init__(self, config: GuardConfig):
        self.config = config

    def check(self, dimensions: Optional[Tuple[int, int]]) -> None:
        if dimensions is None:
            return

        width, height = dimensions
        if width < self.config.min_width or height < self.config.min_height:
            raise UploadRejected(
                ErrorKind.RESOLUTION_TOO_SMALL,
                f"Minimum image resolution is {self.config.min_width}x{self.config.min_height}px",
            )
