"""
Outcome models for the upload pipeline.

Responsibilities:
- Describe a stored file
- Represent the two mutually exclusive pipeline outcomes
"""

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import ErrorKind


class StoredArtifact(BaseModel):
    """A file that passed every guard and now lives on disk."""
    model_config = ConfigDict(frozen=True)

    file_name: str = Field(..., description="Generated file name")
    path: str = Field(..., description="Absolute storage path")
    original_name: str = Field(..., description="Client supplied name, display only")
    served_path: str = Field(..., description="URL path under the public mount")


class Accepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: Literal[True] = True
    artifact: StoredArtifact


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: Literal[False] = False
    kind: ErrorKind
    message: str


ValidationOutcome = Union[Accepted, Rejected]
