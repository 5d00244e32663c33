"""
Input handed to the upload pipeline by the HTTP layer.

Responsibilities:
- Carry the declared metadata of one uploaded file
- Carry the byte source the pipeline reads from
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class UploadRequest:
    original_name: Optional[str]
    media_type: Optional[str]
    source: Any  # bytes, or anything with sync/async read(n)
    declared_size: Optional[int] = None

    def __post_init__(self):
        if self.declared_size is not None and self.declared_size < 0:
            raise ValueError("declared_size must be >= 0")

    @property
    def buffered_size(self) -> Optional[int]:
        """Length of an in-memory payload, known before anything is written."""
        if isinstance(self.source, (bytes, bytearray, memoryview)):
            return len(self.source)
        return None
