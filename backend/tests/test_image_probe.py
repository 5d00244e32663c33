import asyncio

import pytest

from app.core.errors import ErrorKind, UploadRejected
from app.services.image_probe import ImageProbe

from conftest import make_image, make_large_canvas, make_mpo, make_svg


def _probe(tmp_path, data: bytes, media_type: str):
    path = tmp_path / ".payload.part"
    path.write_bytes(data)
    return asyncio.run(ImageProbe().probe(path, media_type))


@pytest.mark.parametrize(
    "fmt, media_type",
    [("png", "image/png"), ("jpeg", "image/jpeg"), ("jpeg", "image/jpg"), ("gif", "image/gif")],
)
def test_probe_reads_dimensions(tmp_path, fmt, media_type):
    assert _probe(tmp_path, make_image(fmt, size=(120, 80)), media_type) == (120, 80)


def test_probe_ignores_trailing_padding(tmp_path):
    data = make_image("png", size=(60, 60), min_bytes=50_000)

    assert _probe(tmp_path, data, "image/png") == (60, 60)


def test_probe_rejects_garbage(tmp_path):
    with pytest.raises(UploadRejected) as excinfo:
        _probe(tmp_path, b"definitely not an image" * 200, "image/png")

    assert excinfo.value.kind is ErrorKind.UNREADABLE_IMAGE
    assert excinfo.value.message == "File could not be read as a valid png image"


def test_probe_rejects_format_mismatch(tmp_path):
    with pytest.raises(UploadRejected) as excinfo:
        _probe(tmp_path, make_image("gif"), "image/png")

    assert excinfo.value.kind is ErrorKind.UNREADABLE_IMAGE


def test_probe_rejects_corrupt_png_chunk(tmp_path):
    data = bytearray(make_image("png", min_bytes=0))
    # flip bytes inside the first IDAT payload so its CRC no longer matches
    idat = data.index(b"IDAT")
    for i in range(idat + 10, idat + 20):
        data[i] ^= 0xFF

    with pytest.raises(UploadRejected) as excinfo:
        _probe(tmp_path, bytes(data), "image/png")

    assert excinfo.value.kind is ErrorKind.UNREADABLE_IMAGE


def test_probe_skips_svg(tmp_path):
    assert _probe(tmp_path, make_svg(1, 1), "image/svg+xml") is None


@pytest.mark.parametrize("media_type", ["image/jpeg", "image/jpg"])
def test_probe_accepts_multi_picture_jpeg(tmp_path, media_type):
    assert _probe(tmp_path, make_mpo(size=(100, 80)), media_type) == (100, 80)


def test_probe_reads_canvas_beyond_pillow_pixel_limit(tmp_path):
    assert _probe(tmp_path, make_large_canvas((14000, 14000)), "image/png") == (14000, 14000)
