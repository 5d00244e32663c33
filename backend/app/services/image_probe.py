"""
Image header probe.

Responsibilities:
- Read pixel dimensions of a stored raster image without decoding pixels
- Check that the bytes really are the declared format
- Keep the event loop free while Pillow parses the file
"""

import asyncio
import struct
from pathlib import Path
from typing import FrozenSet, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from app.core.errors import ErrorKind, UploadRejected
from app.core.logger import get_logger

logger = get_logger(__name__)

# Declared media type -> Pillow formats accepted for it
RASTER_FORMATS = {
    "image/png": frozenset({"PNG"}),
    # multi-picture JPEGs from phone cameras open as MPO
    "image/jpg": frozenset({"JPEG", "MPO"}),
    "image/jpeg": frozenset({"JPEG", "MPO"}),
    "image/gif": frozenset({"GIF"}),
}

# Only headers are parsed, so a large canvas costs no memory; the byte cap
# bounds uploads instead of Pillow's pixel-count limit.
Image.MAX_IMAGE_PIXELS = None

_PARSE_ERRORS = (
    UnidentifiedImageError,
    OSError,
    SyntaxError,
    ValueError,
    EOFError,
    struct.error,
)


class ImageProbe:
    """
    Extracts (width, height) from an image file on disk.

    Only the header is parsed; Image.verify() walks the remaining
    structure (PNG chunk checksums etc.) without rasterizing.
    """

    async def probe(self, path: Path, media_type: str) -> Optional[Tuple[int, int]]:
        """
        Decode the header of a stored payload.

        Args:
            path: File written by the pipeline
            media_type: Declared media type (already allow-listed)

        Returns:
            (width, height), or None when the format carries no
            intrinsic pixel size

        Raises:
            UploadRejected: UnreadableImage if the bytes do not parse as
                the declared type
        """
        expected = RASTER_FORMATS.get(media_type)
        if expected is None:
            return None

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_dimensions, path, expected, media_type)

    def _read_dimensions(self, path: Path, expected: FrozenSet[str], media_type: str) -> Optional[Tuple[int, int]]:
        try:
            with Image.open(path) as image:
                actual = image.format
                width, height = image.size
                image.verify()
        except _PARSE_ERRORS as e:
            logger.info(f"Could not parse {path.name} as {media_type}: {e}")
            raise self._unreadable(media_type) from e

        if actual not in expected:
            logger.info(f"{path.name} declared {media_type} but contains {actual}")
            raise self._unreadable(media_type)

        if not width or not height:
            return None
        return width, height

    @staticmethod
    def _unreadable(media_type: str) -> UploadRejected:
        return UploadRejected(
            ErrorKind.UNREADABLE_IMAGE,
            f"File could not be read as a valid {media_type.split('/')[1]} image",
        )
