from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from .base import ImageOpenError
from .types import ImageMetadata


class StandardDecoder:
    """Pillow-backed decoder for jpeg/png/tiff/bmp/gif/webp."""

    def decode(self, path: Path) -> np.ndarray:
        try:
            with Image.open(path) as img:
                rgba = img.convert("RGBA")
        except (OSError, UnidentifiedImageError, ValueError) as exc:
            raise ImageOpenError(f"Failed to open image {path}: {exc}") from exc
        return np.array(rgba, dtype=np.uint8)

    def read_metadata(self, path: Path) -> ImageMetadata:
        # Image.open only parses the header; pixels load on first access.
        try:
            with Image.open(path) as img:
                width, height = img.size
        except (OSError, UnidentifiedImageError, ValueError) as exc:
            raise ImageOpenError(f"Failed to open image {path}: {exc}") from exc
        return ImageMetadata(width=int(width), height=int(height), is_raw=False, color_space="sRGB")
