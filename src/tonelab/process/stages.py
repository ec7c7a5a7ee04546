"""Per-stage pixel operations.

Every stage takes an (H, W, 4) uint8 RGBA raster owned by the pipeline and
rewrites its RGB channels in place. Math runs in float32; results are clipped
to [0, 255] and truncated back to uint8. Alpha is never touched.
"""

from __future__ import annotations

import math

import numpy as np

from tonelab.adjust import ColorGrading, LensCorrections, ToneCurve

from .base import StageError


LUMA_R = np.float32(0.299)
LUMA_G = np.float32(0.587)
LUMA_B = np.float32(0.114)

HIGHLIGHT_THRESHOLD = np.float32(0.7)
SHADOW_THRESHOLD = np.float32(0.3)

SHARPEN_KERNEL = np.array(
    [
        [0.0, -1.0, 0.0],
        [-1.0, 5.0, -1.0],
        [0.0, -1.0, 0.0],
    ],
    dtype=np.float32,
)


def check_rgba(image: np.ndarray) -> None:
    if not isinstance(image, np.ndarray):
        raise StageError(f"expected a numpy raster, got {type(image).__name__}")
    if image.ndim != 3 or image.shape[2] != 4:
        raise StageError(f"malformed buffer: expected (height, width, 4), got {image.shape}")
    if image.dtype != np.uint8:
        raise StageError(f"malformed buffer: expected uint8 samples, got {image.dtype}")


def luminance(rgb: np.ndarray) -> np.ndarray:
    rgb = rgb.astype(np.float32, copy=False)
    return LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]


def _rgb(image: np.ndarray) -> np.ndarray:
    return image[..., :3].astype(np.float32)


def _store(image: np.ndarray, rgb: np.ndarray) -> None:
    image[..., :3] = np.clip(rgb, 0.0, 255.0).astype(np.uint8)


def apply_exposure(image: np.ndarray, exposure: float) -> None:
    check_rgba(image)
    factor = np.float32(2.0 ** exposure)
    _store(image, _rgb(image) * factor)


def apply_highlights_shadows(image: np.ndarray, highlights: float, shadows: float) -> None:
    check_rgba(image)
    highlight_factor = np.float32(1.0 - min(max(highlights / 100.0, -1.0), 1.0))
    shadow_factor = np.float32(1.0 + min(max(shadows / 100.0, -1.0), 1.0))

    rgb = _rgb(image)
    lum_norm = luminance(rgb) / np.float32(255.0)
    highlight_weight = (lum_norm - SHADOW_THRESHOLD) / np.float32(0.4)
    midtone_factor = highlight_factor * highlight_weight + shadow_factor * (np.float32(1.0) - highlight_weight)

    factor = np.where(
        lum_norm > HIGHLIGHT_THRESHOLD,
        highlight_factor,
        np.where(lum_norm < SHADOW_THRESHOLD, shadow_factor, midtone_factor),
    ).astype(np.float32)
    _store(image, rgb * factor[..., np.newaxis])


def apply_whites_blacks(image: np.ndarray, whites: float, blacks: float) -> None:
    check_rgba(image)
    white_point = np.float32(255.0 * min(max(1.0 + whites / 100.0, 0.5), 1.5))
    black_point = np.float32(255.0 * min(max(blacks / 100.0, -0.5), 0.5))

    rgb = _rgb(image)
    span = white_point - black_point
    if span <= 0.0:
        # Collapsed range: every sample lands on one side of the shared point.
        _store(image, np.where(rgb > black_point, np.float32(255.0), np.float32(0.0)))
        return
    _store(image, (rgb - black_point) * (np.float32(255.0) / span))


def kelvin_to_rgb(kelvin: float) -> tuple[float, float, float]:
    """Empirical blackbody approximation, each multiplier in [0, 1]."""
    temp = kelvin / 100.0

    if temp <= 66.0:
        r = 1.0
        g = (99.4708025861 * math.log(temp) - 161.1195681661) / 255.0
    else:
        r = (329.698727446 * (temp - 60.0) ** -0.1332047592) / 255.0
        g = (288.1221695283 * (temp - 60.0) ** -0.0755148492) / 255.0

    if temp >= 66.0:
        b = 1.0
    elif temp <= 19.0:
        b = 0.0
    else:
        b = (138.5177312231 * math.log(temp - 10.0) - 305.0447927307) / 255.0

    return (min(max(r, 0.0), 1.0), min(max(g, 0.0), 1.0), min(max(b, 0.0), 1.0))


def white_balance_multipliers(temperature: float, tint: float) -> np.ndarray:
    r_temp, g_temp, b_temp = kelvin_to_rgb(5500.0 + temperature * 50.0)
    tint_factor = tint / 100.0
    return np.array(
        [
            r_temp * (1.0 - tint_factor * 0.1),
            g_temp * (1.0 + tint_factor * 0.1),
            b_temp,
        ],
        dtype=np.float32,
    )


def apply_white_balance(image: np.ndarray, temperature: float, tint: float) -> None:
    check_rgba(image)
    _store(image, _rgb(image) * white_balance_multipliers(temperature, tint))


def apply_contrast(image: np.ndarray, contrast: float) -> None:
    check_rgba(image)
    factor = np.float32(max(contrast / 100.0 + 1.0, 0.0))
    pivot = np.float32(128.0)
    _store(image, pivot + (_rgb(image) - pivot) * factor)


def apply_tone_curve(image: np.ndarray, tone_curve: ToneCurve) -> None:
    check_rgba(image)
    table = tone_curve.lookup_table()
    image[..., :3] = table[image[..., :3]]


def _scale_from_luminance(rgb: np.ndarray, factor: np.ndarray | np.float32) -> np.ndarray:
    lum = luminance(rgb)[..., np.newaxis]
    return lum + (rgb - lum) * factor


def apply_saturation(image: np.ndarray, saturation: float) -> None:
    check_rgba(image)
    factor = np.float32(1.0 + saturation / 100.0)
    _store(image, _scale_from_luminance(_rgb(image), factor))


def apply_vibrance(image: np.ndarray, vibrance: float) -> None:
    check_rgba(image)
    factor = np.float32(1.0 + vibrance / 100.0)

    rgb = _rgb(image)
    max_rgb = rgb.max(axis=-1)
    min_rgb = rgb.min(axis=-1)
    current_sat = np.zeros_like(max_rgb)
    np.divide(max_rgb - min_rgb, max_rgb, out=current_sat, where=max_rgb > 0.0)

    adjusted = np.float32(1.0) + (factor - np.float32(1.0)) * (np.float32(1.0) - current_sat)
    _store(image, _scale_from_luminance(rgb, adjusted[..., np.newaxis]))


def apply_clarity(image: np.ndarray, clarity: float) -> None:
    """Local contrast against the 3x3 mean; the 1-pixel border is left as is."""
    check_rgba(image)
    height, width = image.shape[:2]
    if height < 3 or width < 3:
        return

    strength = np.float32(clarity / 100.0)
    src = image[..., :3].astype(np.int32)
    window_sum = np.zeros((height - 2, width - 2, 3), dtype=np.int32)
    for dy in range(3):
        for dx in range(3):
            window_sum += src[dy : dy + height - 2, dx : dx + width - 2]
    local_mean = window_sum.astype(np.float32) / np.float32(9.0)

    center = src[1:-1, 1:-1].astype(np.float32)
    out = np.clip(center + (center - local_mean) * strength, 0.0, 255.0).astype(np.uint8)
    image[1:-1, 1:-1, :3] = out


def apply_sharpening(image: np.ndarray, sharpening: float) -> None:
    """3x3 sharpen kernel blended with the original; the border is left as is."""
    check_rgba(image)
    if sharpening <= 0.0:
        return
    height, width = image.shape[:2]
    if height < 3 or width < 3:
        return

    strength = np.float32(sharpening / 100.0)
    src = image[..., :3].astype(np.float32)
    convolved = np.zeros((height - 2, width - 2, 3), dtype=np.float32)
    for ky in range(3):
        for kx in range(3):
            weight = SHARPEN_KERNEL[ky, kx]
            if weight != 0.0:
                convolved += src[ky : ky + height - 2, kx : kx + width - 2] * weight

    original = src[1:-1, 1:-1]
    blended = original * (np.float32(1.0) - strength) + np.clip(convolved, 0.0, 255.0) * strength
    image[1:-1, 1:-1, :3] = np.clip(blended, 0.0, 255.0).astype(np.uint8)


# Dehaze, noise reduction, color grading and lens corrections have no pixel
# implementation yet. They still run (and validate the buffer) when their
# parameters are non-neutral, and leave every pixel untouched.


def apply_dehaze(image: np.ndarray, dehaze: float) -> None:
    check_rgba(image)


def apply_noise_reduction(image: np.ndarray, noise_reduction: float) -> None:
    check_rgba(image)


def apply_color_grading(image: np.ndarray, color_grading: ColorGrading) -> None:
    check_rgba(image)


def apply_lens_corrections(image: np.ndarray, lens_corrections: LensCorrections) -> None:
    check_rgba(image)
