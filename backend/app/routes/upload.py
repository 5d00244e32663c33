"""
Handles image upload.

Responsibilities:
- Accept a single multipart file field
- Run it through the upload pipeline
- Map the outcome to 201 / 4xx / 5xx responses
"""

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from app.models.request_models import UploadRequest
from app.models.response_models import ErrorResponse, UploadResponse
from app.services.upload_pipeline import UploadPipeline

router = APIRouter(prefix="/upload", tags=["Upload"])


@lru_cache(maxsize=1)
def get_pipeline() -> UploadPipeline:
    return UploadPipeline()


@router.post(
    "",
    status_code=201,
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    pipeline: UploadPipeline = Depends(get_pipeline),
):
    """
    Validates an uploaded image and stores it under the public mount.
    """
    request = None
    if file is not None:
        request = UploadRequest(
            original_name=file.filename,
            media_type=file.content_type,
            source=file,
            declared_size=file.size,
        )

    outcome = await pipeline.process(request)
    if not outcome.valid:
        body = ErrorResponse(detail=outcome.message, kind=outcome.kind)
        return JSONResponse(status_code=outcome.kind.status_code, content=body.model_dump(mode="json"))

    return UploadResponse(
        file_name=outcome.artifact.served_path,
        original_name=outcome.artifact.original_name,
    )
