from .base import (
    ImageOpenError,
    InvalidDataError,
    LoadError,
    MissingDependencyError,
    RawDecodeError,
    UnsupportedFormatError,
)
from .raw_decoder import RawDecoder, develop_raw
from .registry import RAW_EXTENSIONS, STANDARD_EXTENSIONS, ImageLoader
from .types import ImageMetadata, RawSensorImage

__all__ = [
    "ImageOpenError",
    "InvalidDataError",
    "LoadError",
    "MissingDependencyError",
    "RawDecodeError",
    "UnsupportedFormatError",
    "RawDecoder",
    "develop_raw",
    "RAW_EXTENSIONS",
    "STANDARD_EXTENSIONS",
    "ImageLoader",
    "ImageMetadata",
    "RawSensorImage",
]
