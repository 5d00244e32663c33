"""
Pydantic models for API response schemas.

Responsibilities:
- Define the upload response bodies
- Keep the public camelCase field names
"""

from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import ErrorKind


class UploadResponse(BaseModel):
    """Body of a 201 response."""
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="fileName", description="Served path of the stored file")
    original_name: str = Field(..., alias="originalName", description="Original filename")


class ErrorResponse(BaseModel):
    """Body of a rejected upload."""
    detail: str = Field(..., description="Message explaining the rejection")
    kind: ErrorKind = Field(..., description="Rejection kind")
