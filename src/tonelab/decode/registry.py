from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .base import Decoder, UnsupportedFormatError
from .raw_decoder import RawDecoder
from .standard_decoder import StandardDecoder
from .types import ImageMetadata


logger = logging.getLogger(__name__)

RAW_EXTENSIONS: tuple[str, ...] = (
    "cr2", "cr3",          # Canon
    "nef", "nrw",          # Nikon
    "arw", "srf", "sr2",   # Sony
    "dng",                 # Adobe
    "raf",                 # Fujifilm
    "orf",                 # Olympus
    "rw2",                 # Panasonic
    "pef", "ptx",          # Pentax
    "x3f",                 # Sigma
    "dcr", "kdc", "k25", "dcs",  # Kodak
    "mrw",                 # Minolta
    "3fr",                 # Hasselblad
    "ari",                 # Arri
    "bay",                 # Casio
    "cap", "iiq", "eip",   # Phase One
    "fff",                 # Imacon
    "mef",                 # Mamiya
    "mos",                 # Leaf
    "raw", "rwl",          # Panasonic/Leica
)

STANDARD_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "tiff", "tif", "bmp", "gif", "webp")


def _extension_of(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if not ext:
        raise UnsupportedFormatError("No extension")
    return ext


class ImageLoader:
    """Routes a path to the RAW or standard decoder by its extension."""

    def __init__(self) -> None:
        self._raw = RawDecoder()
        self._standard = StandardDecoder()

    @staticmethod
    def is_raw_format(extension: str) -> bool:
        return extension.lower().lstrip(".") in RAW_EXTENSIONS

    @staticmethod
    def is_standard_format(extension: str) -> bool:
        return extension.lower().lstrip(".") in STANDARD_EXTENSIONS

    def is_supported_format(self, extension: str) -> bool:
        return self.is_raw_format(extension) or self.is_standard_format(extension)

    def get_supported_extensions(self) -> list[str]:
        return [*RAW_EXTENSIONS, *STANDARD_EXTENSIONS]

    def decoder_for(self, extension: str) -> Decoder:
        if self.is_raw_format(extension):
            return self._raw
        if self.is_standard_format(extension):
            return self._standard
        raise UnsupportedFormatError(extension.lower().lstrip("."))

    def load_image(self, path: str | Path) -> np.ndarray:
        path = Path(path)
        decoder = self.decoder_for(_extension_of(path))
        logger.info("decoding %s with %s", path, type(decoder).__name__)
        return decoder.decode(path)

    def get_image_metadata(self, path: str | Path) -> ImageMetadata:
        path = Path(path)
        ext = _extension_of(path)
        if self.is_raw_format(ext):
            # No header-only path exists for RAW; this decodes the sensor payload.
            sensor = self._raw.read_sensor(path)
            return ImageMetadata(
                width=sensor.width,
                height=sensor.height,
                is_raw=True,
                color_space=sensor.color_space or "Unknown",
                white_balance=sensor.wb_coeffs,
                iso=sensor.iso,
                exposure_time=sensor.exposure_time,
                aperture=sensor.aperture,
                make=sensor.make,
                model=sensor.model,
            )
        if self.is_standard_format(ext):
            return self._standard.read_metadata(path)
        raise UnsupportedFormatError(ext)
