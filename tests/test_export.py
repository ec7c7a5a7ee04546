from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image
import pytest

from tonelab.write import ExportError, ExportFormat, encode_image, export_format_for_path


def _rgba() -> np.ndarray:
    image = np.zeros((4, 5, 4), dtype=np.uint8)
    image[..., 0] = 180
    image[..., 3] = 128
    return image


def test_format_aliases_and_clamping() -> None:
    fmt = ExportFormat(kind="JPG", quality=400, compression=-3)
    assert fmt.kind == "jpeg"
    assert fmt.quality == 100
    assert fmt.compression == 0
    assert ExportFormat(kind="tif").extension == ".tiff"
    with pytest.raises(ValueError):
        ExportFormat(kind="gif")


def test_export_format_for_path() -> None:
    assert export_format_for_path(Path("a/b.PNG")).kind == "png"
    assert export_format_for_path(Path("shot.jpeg"), quality=80).quality == 80


def test_png_keeps_alpha() -> None:
    data = encode_image(_rgba(), ExportFormat(kind="png", compression=9))
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGBA"
        assert img.size == (5, 4)
        assert img.getpixel((0, 0)) == (180, 0, 0, 128)


def test_jpeg_drops_alpha() -> None:
    data = encode_image(_rgba(), ExportFormat(kind="jpeg"))
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGB"


def test_tiff_keeps_alpha() -> None:
    data = encode_image(_rgba(), ExportFormat(kind="tiff"))
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGBA"
        assert img.getpixel((1, 1)) == (180, 0, 0, 128)


def test_png_compression_level_is_honored() -> None:
    rng = np.random.default_rng(5)
    image = np.zeros((64, 64, 4), dtype=np.uint8)
    image[..., :3] = rng.integers(0, 4, size=(64, 64, 3), dtype=np.uint8)
    image[..., 3] = 255
    stored = encode_image(image, ExportFormat(kind="png", compression=0))
    packed = encode_image(image, ExportFormat(kind="png", compression=9))
    assert len(packed) < len(stored)


def test_malformed_raster_is_export_error() -> None:
    with pytest.raises(ExportError):
        encode_image(np.zeros((2, 2, 3), dtype=np.uint8), ExportFormat())
