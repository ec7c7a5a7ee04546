from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

# exifread walks TIFF IFDs; ISO BMFF (.cr3) and Foveon containers are not readable.
EXIFREAD_EXTENSIONS = frozenset(
    {".cr2", ".nef", ".nrw", ".arw", ".srf", ".sr2", ".dng", ".orf", ".rw2", ".pef", ".raf", ".3fr", ".iiq", ".mos"}
)


@dataclass
class ExifMetadata:
    iso: float | None = None
    shutter_s: float | None = None
    aperture_f: float | None = None
    make: str | None = None
    model: str | None = None
    color_space: str | None = None

    def is_empty(self) -> bool:
        fields = (self.iso, self.shutter_s, self.aperture_f, self.make, self.model, self.color_space)
        return all(value is None for value in fields)


def _ratio_like_to_float(value: Any) -> float | None:
    if value is None:
        return None

    # exifread wraps values in IfdTag objects holding a list of Ratio values.
    values = getattr(value, "values", value)
    if isinstance(values, (list, tuple)):
        if not values:
            return None
        values = values[0]

    if hasattr(values, "num") and hasattr(values, "den"):
        den = float(getattr(values, "den", 0) or 0)
        if den == 0.0:
            return None
        return float(getattr(values, "num", 0)) / den

    try:
        return float(values)
    except (TypeError, ValueError):
        return None


# EXIF ColorSpace tag values (0xA001).
COLOR_SPACE_NAMES = {1: "sRGB", 2: "Adobe RGB", 65535: "Uncalibrated"}


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip().strip("\x00").strip()
    return text or None


def _color_space_name(value: float | None) -> str | None:
    if value is None:
        return None
    return COLOR_SPACE_NAMES.get(int(value))


def _positive(value: float | None) -> float | None:
    if value is None or value <= 0:
        return None
    return value


def extract_exif_metadata(path: Path) -> ExifMetadata:
    """Exposure, camera and color space fields from EXIF tags; empty when unreadable."""
    if path.suffix.lower() not in EXIFREAD_EXTENSIONS:
        return ExifMetadata()

    try:
        import exifread  # type: ignore
    except Exception:
        logger.debug("exifread not installed; skipping EXIF for %s", path)
        return ExifMetadata()

    try:
        with path.open("rb") as f:
            tags = exifread.process_file(f, details=False)
    except Exception as exc:
        logger.debug("EXIF read failed for %s: %s", path, exc)
        return ExifMetadata()

    return ExifMetadata(
        iso=_positive(_ratio_like_to_float(tags.get("EXIF ISOSpeedRatings") or tags.get("EXIF PhotographicSensitivity"))),
        shutter_s=_positive(_ratio_like_to_float(tags.get("EXIF ExposureTime"))),
        aperture_f=_positive(_ratio_like_to_float(tags.get("EXIF FNumber"))),
        make=_text(tags.get("Image Make")),
        model=_text(tags.get("Image Model")),
        color_space=_color_space_name(_ratio_like_to_float(tags.get("EXIF ColorSpace"))),
    )
