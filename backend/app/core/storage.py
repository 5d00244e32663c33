"""
Local disk storage helpers for uploaded files.

Handles every filesystem interaction of the upload pipeline:
- Resolving (and creating) the destination directory
- Allocating collision-resistant file names
- Streaming payloads into hidden temp files
- Promoting accepted temp files and discarding rejected ones
"""

import inspect
import os
import re
import secrets
import time
from pathlib import Path, PureWindowsPath
from typing import AsyncIterator, BinaryIO, Optional, Union

from starlette.requests import ClientDisconnect

from app.core.errors import ErrorKind, StorageUnavailable, UploadRejected
from app.core.logger import get_logger

logger = get_logger(__name__)

INTERRUPTED_MESSAGE = "Upload was interrupted before the file was fully received"

# ".png", ".jpeg", ".svg" ... anything else is treated as no extension
_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9][A-Za-z0-9_+-]{0,15}$")

PayloadSource = Union[bytes, bytearray, memoryview, object]


class StorageManager:
    """Handles file placement inside the public upload directory."""

    TEMP_SUFFIX = ".part"

    @staticmethod
    def resolve_destination(base: Union[str, Path], subpath: Optional[str] = None) -> Path:
        """
        Return the absolute upload directory, creating it if needed.

        Args:
            base: Public storage root
            subpath: Optional segment below the root (empty means the root itself)

        Returns:
            Absolute, existing, writable directory

        Raises:
            StorageUnavailable: If the directory cannot be created or written
        """
        directory = Path(base)
        if subpath and subpath.strip("/"):
            directory = directory / subpath.strip("/")
        directory = directory.resolve()

        try:
            # exist_ok covers a concurrent request creating it first
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create upload directory {directory}: {e}")
            raise StorageUnavailable() from e

        if not os.access(directory, os.W_OK | os.X_OK):
            logger.error(f"Upload directory is not writable: {directory}")
            raise StorageUnavailable()

        return directory

    @staticmethod
    def allocate_name(original_name: Optional[str]) -> str:
        """
        Build a unique file name that keeps the original extension.

        Uniqueness comes from the millisecond timestamp plus a random
        component; no registry is consulted.
        """
        base_name = PureWindowsPath(original_name or "").name
        extension = os.path.splitext(base_name)[1]
        if not _EXTENSION_RE.match(extension):
            extension = ""

        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9 + 1)}"
        return unique + extension

    @staticmethod
    def temp_path(directory: Path, file_name: str) -> Path:
        """Hidden sibling that holds the payload until every guard has passed."""
        return directory / f".{file_name}{StorageManager.TEMP_SUFFIX}"

    @staticmethod
    def open_temp(path: Path) -> BinaryIO:
        """
        Create the temp file exclusively.

        Raises:
            StorageUnavailable: If the file cannot be created
        """
        try:
            return open(path, "xb")
        except OSError as e:
            logger.error(f"Cannot create temp file {path}: {e}")
            raise StorageUnavailable() from e

    @staticmethod
    async def write_stream(
        source: PayloadSource,
        handle: BinaryIO,
        max_bytes: int,
        chunk_size: int = 64 * 1024,
    ) -> int:
        """
        Stream a payload into an open file and close it.

        Reading stops at the first chunk that pushes the total past
        max_bytes; that chunk is not written and the returned count then
        exceeds max_bytes, which the caller rejects.

        Args:
            source: Bytes buffer, or an object with a sync or async read(n)
            handle: File returned by open_temp
            max_bytes: Hard transfer cap
            chunk_size: Bytes per read

        Returns:
            Number of bytes observed

        Raises:
            StorageUnavailable: If the file cannot be written
            UploadRejected: If the client connection dropped mid-transfer
        """
        written = 0
        with handle:
            async for chunk in _read_chunks(source, chunk_size):
                written += len(chunk)
                if written > max_bytes:
                    break
                try:
                    handle.write(chunk)
                except OSError as e:
                    logger.error(f"Failed writing {handle.name}: {e}")
                    raise StorageUnavailable() from e

        return written

    @staticmethod
    def promote(temp: Path, final: Path) -> Path:
        """Atomically move an accepted temp file to its public name."""
        try:
            os.replace(temp, final)
        except OSError as e:
            logger.error(f"Cannot promote {temp.name} to {final.name}: {e}")
            raise StorageUnavailable() from e
        return final

    @staticmethod
    def discard(path: Path) -> None:
        """Delete a file; a file that is already gone counts as deleted."""
        Path(path).unlink(missing_ok=True)


async def _read_chunks(source: PayloadSource, chunk_size: int) -> AsyncIterator[bytes]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        view = memoryview(source)
        for start in range(0, len(view), chunk_size):
            yield bytes(view[start:start + chunk_size])
        return

    while True:
        try:
            chunk = source.read(chunk_size)
            if inspect.isawaitable(chunk):
                chunk = await chunk
        except (ClientDisconnect, ConnectionError) as e:
            raise UploadRejected(ErrorKind.PAYLOAD_TOO_SMALL, INTERRUPTED_MESSAGE) from e
        if not chunk:
            return
        yield chunk
