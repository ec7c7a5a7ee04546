from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .stages import check_rgba, luminance


BINS = 256


@dataclass(frozen=True)
class ImageHistogram:
    red: np.ndarray
    green: np.ndarray
    blue: np.ndarray
    luminance: np.ndarray
    total_pixels: int

    def get_peak_value(self) -> int:
        return int(max(self.red.max(), self.green.max(), self.blue.max(), self.luminance.max()))

    def _normalized(self, counts: np.ndarray) -> np.ndarray:
        peak = self.get_peak_value()
        if peak <= 0:
            return np.zeros(BINS, dtype=np.float32)
        return counts.astype(np.float32) / np.float32(peak)

    def get_normalized_red(self) -> np.ndarray:
        return self._normalized(self.red)

    def get_normalized_green(self) -> np.ndarray:
        return self._normalized(self.green)

    def get_normalized_blue(self) -> np.ndarray:
        return self._normalized(self.blue)

    def get_normalized_luminance(self) -> np.ndarray:
        return self._normalized(self.luminance)


def _tally(values: np.ndarray) -> np.ndarray:
    return np.bincount(values.ravel(), minlength=BINS).astype(np.int64)


def calculate_histogram(image: np.ndarray) -> ImageHistogram:
    """Per-channel and luminance counts; never mutates ``image``."""
    check_rgba(image)
    rgb = image[..., :3]
    lum = np.clip(luminance(rgb), 0.0, 255.0).astype(np.uint8)
    return ImageHistogram(
        red=_tally(rgb[..., 0]),
        green=_tally(rgb[..., 1]),
        blue=_tally(rgb[..., 2]),
        luminance=_tally(lum),
        total_pixels=int(image.shape[0] * image.shape[1]),
    )
