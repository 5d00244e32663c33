import io
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from app.core.config import GuardConfig, Settings
from app.models.request_models import UploadRequest
from app.services.upload_pipeline import UploadPipeline

PIL_FORMATS = {"png": "PNG", "jpeg": "JPEG", "gif": "GIF"}

SVG_TEMPLATE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}">'
    '<rect width="{w}" height="{h}" fill="red"/></svg>'
)


def make_image(fmt: str = "png", size=(100, 100), min_bytes: int = 5000) -> bytes:
    """Noise image of the given format, padded after its end marker up to min_bytes."""
    rng = np.random.default_rng(seed=7)
    pixels = rng.integers(0, 256, (size[1], size[0], 3), dtype=np.uint8)
    buffer = io.BytesIO()
    Image.fromarray(pixels).save(buffer, format=PIL_FORMATS[fmt])
    data = buffer.getvalue()
    if len(data) < min_bytes:
        data += b"\0" * (min_bytes - len(data))
    return data


def make_mpo(size=(100, 100), min_bytes: int = 5000) -> bytes:
    """Two-frame multi-picture JPEG, as written by phone cameras."""
    rng = np.random.default_rng(seed=11)
    frames = [Image.fromarray(rng.integers(0, 256, (size[1], size[0], 3), dtype=np.uint8)) for _ in range(2)]
    buffer = io.BytesIO()
    frames[0].save(buffer, format="MPO", save_all=True, append_images=frames[1:])
    data = buffer.getvalue()
    return data + b"\0" * max(0, min_bytes - len(data))


def make_large_canvas(size=(14000, 14000)) -> bytes:
    """Blank 1-bit PNG whose pixel count is above Pillow's default bomb limit."""
    buffer = io.BytesIO()
    Image.new("1", size).save(buffer, format="PNG")
    return buffer.getvalue()


def make_svg(width: int = 10, height: int = 10, min_bytes: int = 5000) -> bytes:
    data = SVG_TEMPLATE.format(w=width, h=height).encode()
    return data + b" " * max(0, min_bytes - len(data))


class AsyncReader:
    """Mimics UploadFile.read(n)."""

    def __init__(self, data: bytes, fail_after: int = None, error: Exception = None):
        self._buffer = io.BytesIO(data)
        self._reads = 0
        self._fail_after = fail_after
        self._error = error or ConnectionResetError("client went away")

    async def read(self, size: int = -1) -> bytes:
        if self._fail_after is not None and self._reads >= self._fail_after:
            raise self._error
        self._reads += 1
        return self._buffer.read(size)


def stored_files(root: Path) -> list:
    """Every file below root, hidden temp files included."""
    if not root.exists():
        return []
    return sorted(p.resolve() for p in root.rglob("*") if p.is_file())


def upload(data, name="cat.png", media_type="image/png", declared_size=None) -> UploadRequest:
    return UploadRequest(original_name=name, media_type=media_type, source=data, declared_size=declared_size)


@pytest.fixture
def public_dir(tmp_path) -> Path:
    return tmp_path / "public"


@pytest.fixture
def upload_settings(public_dir) -> Settings:
    settings = Settings()
    settings.PUBLIC_DIR = str(public_dir)
    settings.UPLOAD_PATH_TEMP = ""
    settings.UPLOAD_PATH = "uploads"
    return settings


@pytest.fixture
def guard_config() -> GuardConfig:
    return GuardConfig()


@pytest.fixture
def pipeline(guard_config, upload_settings) -> UploadPipeline:
    return UploadPipeline(guard_config=guard_config, settings=upload_settings)
