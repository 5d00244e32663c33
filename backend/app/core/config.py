"""
Application configuration settings.

Responsibilities:
- Load environment variables
- Define the public storage root and upload sub-paths
- Hold the immutable upload guard thresholds
"""

import os
from functools import lru_cache
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

# order is the order shown to clients
ALLOWED_MEDIA_TYPES = (
    "image/png",
    "image/jpg",
    "image/jpeg",
    "image/gif",
    "image/svg+xml",
)

KIB = 1024
MIB = 1024 * KIB


class Settings:
    PROJECT_NAME: str = "Weblarek Uploads"
    API_PREFIX: str = "/api"
    PUBLIC_DIR: str = os.getenv("PUBLIC_DIR", "public")
    UPLOAD_PATH_TEMP: str = os.getenv("UPLOAD_PATH_TEMP", "")
    UPLOAD_PATH: str = os.getenv("UPLOAD_PATH", "uploads")
    CORS_ORIGINS: list = os.getenv("ORIGIN_ALLOW", "http://localhost:5173").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def storage_subpath(self) -> str:
        """Directory under PUBLIC_DIR that receives files (falls back to UPLOAD_PATH)."""
        return self.UPLOAD_PATH_TEMP or self.UPLOAD_PATH

    def served_path(self, file_name: str) -> str:
        """Public URL path of a stored file."""
        mount = self.UPLOAD_PATH.strip("/")
        return f"/{mount}/{file_name}" if mount else f"/{file_name}"


class GuardConfig(BaseModel):
    """Thresholds shared read-only by every upload."""

    model_config = ConfigDict(frozen=True)

    allowed_media_types: Tuple[str, ...] = Field(
        default=ALLOWED_MEDIA_TYPES, description="Accepted declared media types (case-sensitive)"
    )
    min_size_bytes: int = Field(2 * KIB, ge=0, description="Smallest accepted payload")
    max_size_bytes: int = Field(10 * MIB, ge=0, description="Largest accepted payload")
    min_width: int = Field(50, gt=0, description="Minimum raster width in pixels")
    min_height: int = Field(50, gt=0, description="Minimum raster height in pixels")
    chunk_size: int = Field(64 * KIB, gt=0, description="Bytes read per chunk while streaming to disk")

    @model_validator(mode="after")
    def _check_bounds(self) -> "GuardConfig":
        if self.min_size_bytes > self.max_size_bytes:
            raise ValueError("min_size_bytes must not exceed max_size_bytes")
        if not self.allowed_media_types:
            raise ValueError("allowed_media_types must not be empty")
        return self

    @property
    def allowed_extensions(self) -> list:
        """Extensions shown to clients, in allow-list order."""
        return [media_type.split("/")[1] for media_type in self.allowed_media_types]


settings = Settings()


@lru_cache(maxsize=1)
def get_guard_config() -> GuardConfig:
    """Build the process-wide guard configuration once."""
    return GuardConfig()
