from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image
import pytest

from tonelab.decode import ImageLoader, ImageOpenError, LoadError, RawDecoder, UnsupportedFormatError
from tonelab.decode.base import Decoder
from tonelab.decode.standard_decoder import StandardDecoder


def _write_png(path: Path) -> None:
    data = np.zeros((2, 3, 3), dtype=np.uint8)
    data[..., 0] = 200
    Image.fromarray(data).save(path)


def test_extension_routing() -> None:
    loader = ImageLoader()
    assert loader.is_raw_format("NEF")
    assert loader.is_raw_format(".cr3")
    assert loader.is_standard_format("jpeg")
    assert not loader.is_supported_format("xyz")
    assert "dng" in loader.get_supported_extensions()
    assert "png" in loader.get_supported_extensions()


def test_load_png_adds_opaque_alpha(tmp_path: Path) -> None:
    path = tmp_path / "frame.png"
    _write_png(path)
    image = ImageLoader().load_image(path)
    assert image.shape == (2, 3, 4)
    assert image.dtype == np.uint8
    assert (image[..., 0] == 200).all()
    assert (image[..., 3] == 255).all()


def test_standard_metadata(tmp_path: Path) -> None:
    path = tmp_path / "frame.png"
    _write_png(path)
    meta = ImageLoader().get_image_metadata(path)
    assert (meta.width, meta.height) == (3, 2)
    assert not meta.is_raw
    assert meta.color_space == "sRGB"


def test_unsupported_extension(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedFormatError, match="Unsupported format: xyz") as info:
        ImageLoader().load_image(tmp_path / "frame.xyz")
    assert info.value.extension == "xyz"


def test_missing_extension(tmp_path: Path) -> None:
    with pytest.raises(UnsupportedFormatError):
        ImageLoader().load_image(tmp_path / "frame")


def test_corrupt_standard_file(tmp_path: Path) -> None:
    path = tmp_path / "broken.png"
    path.write_bytes(b"not really a png")
    with pytest.raises(ImageOpenError, match="Image open error"):
        ImageLoader().load_image(path)


def test_garbage_raw_is_a_load_error(tmp_path: Path) -> None:
    path = tmp_path / "frame.nef"
    path.write_bytes(b"\x00" * 64)
    with pytest.raises(LoadError):
        ImageLoader().load_image(path)


def test_decoder_for_dispatches_by_extension() -> None:
    loader = ImageLoader()
    assert isinstance(loader.decoder_for("NEF"), RawDecoder)
    assert isinstance(loader.decoder_for(".png"), StandardDecoder)
    assert isinstance(loader.decoder_for("dng"), Decoder)
    with pytest.raises(UnsupportedFormatError) as info:
        loader.decoder_for(".XYZ")
    assert info.value.extension == "xyz"
