from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from .base import InvalidDataError, MissingDependencyError, RawDecodeError
from .demosaic import demosaic_rggb
from .exif_metadata import extract_exif_metadata
from .types import RawSensorImage


try:
    import rawpy  # type: ignore
except Exception:  # pragma: no cover - dependency is optional
    rawpy = None


logger = logging.getLogger(__name__)

SAMPLE_MAX = 65535.0
DISPLAY_GAMMA = 2.2


def _safe_meta(raw: Any, key: str) -> float | None:
    meta = getattr(raw, "metadata", None)
    if meta is None:
        return None
    value = getattr(meta, key, None)
    if value in (None, 0):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _cfa_pattern(raw: Any) -> str | None:
    pattern = getattr(raw, "raw_pattern", None)
    desc = getattr(raw, "color_desc", None)
    if pattern is None or desc is None:
        return None
    try:
        colors = desc.decode("ascii") if isinstance(desc, bytes) else str(desc)
        return "".join(colors[int(v)] for v in np.array(pattern).flatten())
    except Exception:
        return None


def _normalize_wb(values: Any) -> tuple[float, float, float] | None:
    try:
        coeffs = [float(v) for v in list(values or [])]
    except (TypeError, ValueError):
        return None
    if len(coeffs) < 3 or not all(np.isfinite(coeffs[:3])) or coeffs[1] <= 0.0:
        return None
    green = coeffs[1]
    return (coeffs[0] / green, 1.0, coeffs[2] / green)


def read_sensor_image(path: Path) -> RawSensorImage:
    """Decode the sensor payload of a RAW file without developing it."""
    if rawpy is None:
        raise MissingDependencyError("rawpy is required for RAW decode: pip install rawpy")

    try:
        with rawpy.imread(str(path)) as raw:
            samples = np.array(raw.raw_image_visible, copy=True)
            cfa = _cfa_pattern(raw) if samples.ndim == 2 else None
            wb = _normalize_wb(getattr(raw, "camera_whitebalance", None))
            iso = _safe_meta(raw, "iso_speed")
            shutter = _safe_meta(raw, "shutter")
            aperture = _safe_meta(raw, "aperture")
    except Exception as exc:
        raise RawDecodeError(f"Failed to decode RAW {path}: {exc}") from exc

    # LibRaw does not surface camera identity or color space; EXIF also backs up exposure fields.
    exif = extract_exif_metadata(path)
    iso = iso if iso is not None else exif.iso
    shutter = shutter if shutter is not None else exif.shutter_s
    aperture = aperture if aperture is not None else exif.aperture_f

    height, width = samples.shape[:2]
    return RawSensorImage(
        width=int(width),
        height=int(height),
        data=samples,
        cfa_pattern=cfa,
        wb_coeffs=wb,
        iso=iso,
        exposure_time=shutter,
        aperture=aperture,
        color_space=exif.color_space,
        make=exif.make,
        model=exif.model,
    )


def extract_samples(sensor: RawSensorImage) -> np.ndarray:
    """Flat uint16 samples; 8-bit sensors are shifted up to the 16-bit scale."""
    data = np.asarray(sensor.data)
    if data.dtype == np.uint8:
        samples = data.astype(np.uint16).ravel() << 8
    elif data.dtype == np.uint16:
        samples = data.astype(np.uint16).ravel()
    else:
        raise InvalidDataError(f"unsupported sensor sample type {data.dtype}")

    per_pixel = 1 if sensor.cfa_pattern else 3
    expected = sensor.width * sensor.height * per_pixel
    if samples.size != expected:
        raise InvalidDataError(f"sensor sample count mismatch: expected {expected}, got {samples.size}")
    return samples


def apply_white_balance(
    samples: np.ndarray,
    wb_coeffs: tuple[float, ...],
    width: int,
    height: int,
    cfa_pattern: str | None,
) -> np.ndarray:
    if len(wb_coeffs) < 3:
        raise InvalidDataError("Insufficient white balance coefficients")

    gains = np.asarray(wb_coeffs[:3], dtype=np.float32)
    if cfa_pattern:
        yy, xx = np.mgrid[0:height, 0:width]
        # RGGB site color index: 0 red, 1 green, 2 blue.
        site = (yy % 2) + (xx % 2)
        gain_map = gains[site].ravel()
    else:
        gain_map = np.tile(gains, width * height)

    scaled = samples.astype(np.float32) * gain_map
    return np.minimum(scaled, SAMPLE_MAX).astype(np.uint16)


def _s_curve(x: np.ndarray) -> np.ndarray:
    return np.where(x < 0.5, 2.0 * x * x, 1.0 - 2.0 * (1.0 - x) * (1.0 - x)).astype(np.float32)


def apply_tone_map(samples: np.ndarray) -> np.ndarray:
    """Fixed gamma 2.2 plus S-curve baked into every RAW decode."""
    normalized = samples.astype(np.float32) / np.float32(SAMPLE_MAX)
    gamma_corrected = np.power(normalized, np.float32(1.0 / DISPLAY_GAMMA))
    curved = _s_curve(gamma_corrected)
    return np.minimum(curved * np.float32(SAMPLE_MAX), SAMPLE_MAX).astype(np.uint16)


def pack_rgba(rgb: np.ndarray, width: int, height: int) -> np.ndarray:
    expected = width * height * 3
    flat = np.asarray(rgb, dtype=np.uint16).ravel()
    if flat.size != expected:
        raise InvalidDataError(f"RGB data length mismatch: expected {expected}, got {flat.size}")

    rgba = np.empty((height * width, 4), dtype=np.uint8)
    rgba[:, :3] = (flat.reshape(-1, 3) >> 8).astype(np.uint8)
    rgba[:, 3] = 255
    try:
        return rgba.reshape(height, width, 4)
    except ValueError as exc:
        raise InvalidDataError(f"Failed to create image buffer: {exc}") from exc


def develop_raw(sensor: RawSensorImage) -> np.ndarray:
    """Sensor samples -> (H, W, 4) uint8 RGBA raster."""
    samples = extract_samples(sensor)

    if sensor.wb_coeffs is not None:
        samples = apply_white_balance(samples, sensor.wb_coeffs, sensor.width, sensor.height, sensor.cfa_pattern)

    samples = apply_tone_map(samples)

    if sensor.cfa_pattern:
        if sensor.cfa_pattern.upper() != "RGGB":
            logger.warning("CFA pattern %s demosaiced as RGGB", sensor.cfa_pattern)
        rgb = demosaic_rggb(samples.reshape(sensor.height, sensor.width))
    else:
        rgb = samples

    return pack_rgba(rgb, sensor.width, sensor.height)


class RawDecoder:
    """RAW decoder: rawpy (LibRaw) for sensor samples, in-house development."""

    def read_sensor(self, path: Path) -> RawSensorImage:
        return read_sensor_image(path)

    def decode(self, path: Path) -> np.ndarray:
        sensor = self.read_sensor(path)
        logger.debug(
            "developing %s: %dx%d cfa=%s wb=%s",
            path.name,
            sensor.width,
            sensor.height,
            sensor.cfa_pattern,
            sensor.wb_coeffs,
        )
        return develop_raw(sensor)
