"""
Upload pipeline orchestrator.

Runs the guards for a single uploaded file in a fixed order:

    TypeGuard -> SizeGuard -> temp write -> ImageProbe -> ResolutionGuard

Cheap metadata checks come first so that nothing touches the disk for an
obviously bad request. The payload is written to a hidden temp file before
it is decoded; it only gets its public name once every guard has passed,
and it is deleted on any rejection.
"""

from pathlib import Path
from typing import Optional

from app.core.config import GuardConfig, Settings, get_guard_config, settings as default_settings
from app.core.errors import ErrorKind, UploadRejected
from app.core.logger import get_logger
from app.core.storage import INTERRUPTED_MESSAGE, StorageManager
from app.models.request_models import UploadRequest
from app.models.validation_models import Accepted, Rejected, StoredArtifact, ValidationOutcome
from app.services.image_probe import ImageProbe
from app.services.upload_guards import SVG_MEDIA_TYPE, ResolutionGuard, SizeGuard, TypeGuard

logger = get_logger(__name__)

NO_FILE_MESSAGE = "No file was uploaded"


class UploadPipeline:
    """
    Validates and stores uploaded images.

    Holds no per-request state, so one instance serves concurrent
    requests.
    """

    def __init__(
        self,
        guard_config: Optional[GuardConfig] = None,
        settings: Optional[Settings] = None,
        probe: Optional[ImageProbe] = None,
    ):
        self.config = guard_config or get_guard_config()
        self.settings = settings or default_settings
        self.type_guard = TypeGuard(self.config)
        self.size_guard = SizeGuard(self.config)
        self.resolution_guard = ResolutionGuard(self.config)
        self.probe = probe or ImageProbe()

    async def process(self, request: Optional[UploadRequest]) -> ValidationOutcome:
        """
        Validate one upload and store it if every guard passes.

        Args:
            request: Declared metadata plus byte source, or None when the
                multipart body carried no file

        Returns:
            Accepted with the stored artifact, or Rejected with the kind
            and message of the first failing guard

        Raises:
            asyncio.CancelledError: Propagated after temp cleanup
        """
        temp_path = None
        try:
            if request is None:
                raise UploadRejected(ErrorKind.NO_FILE_PRESENT, NO_FILE_MESSAGE)

            media_type = self.type_guard.check(request.media_type)
            known_size = request.buffered_size
            self.size_guard.check(known_size if known_size is not None else request.declared_size)

            directory = StorageManager.resolve_destination(
                self.settings.PUBLIC_DIR, self.settings.storage_subpath
            )
            file_name = StorageManager.allocate_name(request.original_name)
            candidate = StorageManager.temp_path(directory, file_name)
            handle = StorageManager.open_temp(candidate)
            temp_path = candidate

            observed = await StorageManager.write_stream(
                request.source, handle, self.config.max_size_bytes, self.config.chunk_size
            )
            if request.declared_size is not None and observed < request.declared_size:
                raise UploadRejected(ErrorKind.PAYLOAD_TOO_SMALL, INTERRUPTED_MESSAGE)
            self.size_guard.check(observed)

            if media_type != SVG_MEDIA_TYPE:
                dimensions = await self.probe.probe(temp_path, media_type)
                self.resolution_guard.check(dimensions)

            final_path = StorageManager.promote(temp_path, directory / file_name)
            temp_path = None

        except UploadRejected as e:
            name = request.original_name if request is not None else None
            if e.kind.is_client_fault:
                logger.warning(f"Rejected upload {name!r}: {e.kind.value}: {e.message}")
            else:
                logger.error(f"Rejected upload {name!r}: {e.kind.value}: {e.message}")
            return Rejected(kind=e.kind, message=e.message)

        finally:
            if temp_path is not None:
                self._discard(temp_path)

        artifact = StoredArtifact(
            file_name=file_name,
            path=str(final_path),
            original_name=request.original_name or "",
            served_path=self.settings.served_path(file_name),
        )
        logger.info(f"Stored upload {artifact.original_name!r} as {artifact.file_name} ({observed} bytes)")
        return Accepted(artifact=artifact)

    @staticmethod
    def _discard(path: Path) -> None:
        # a failed delete never replaces the rejection already returned
        try:
            StorageManager.discard(path)
        except OSError as e:
            logger.error(f"Failed to remove temp file {path}: {e}")
