"""Neighbor-window demosaicing for RGGB Bayer mosaics.

Each photosite keeps its own sample for its native channel. The two missing
channels are the integer mean of same-color sites in a ring around it: the
3x3 ring for green, the 5x5 ring for red and blue. Sites near the border just
average fewer neighbors. This is a placeholder quality level, not AHD/VNG.
"""

from __future__ import annotations

import numpy as np


GREEN_RADIUS = 1
RED_BLUE_RADIUS = 2


def rggb_masks(height: int, width: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    yy, xx = np.mgrid[0:height, 0:width]
    even_row = (yy % 2) == 0
    even_col = (xx % 2) == 0
    red = even_row & even_col
    blue = ~even_row & ~even_col
    green = ~(red | blue)
    return red, green, blue


def _ring_mean(samples: np.ndarray, mask: np.ndarray, radius: int) -> np.ndarray:
    height, width = samples.shape
    values = np.pad(np.where(mask, samples, 0).astype(np.uint64), radius)
    counts = np.pad(mask.astype(np.uint32), radius)

    total = np.zeros((height, width), dtype=np.uint64)
    n = np.zeros((height, width), dtype=np.uint32)
    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            if dy == 0 and dx == 0:
                continue
            rows = slice(radius + dy, radius + dy + height)
            cols = slice(radius + dx, radius + dx + width)
            total += values[rows, cols]
            n += counts[rows, cols]

    out = np.zeros((height, width), dtype=np.uint16)
    has_neighbors = n > 0
    out[has_neighbors] = (total[has_neighbors] // n[has_neighbors]).astype(np.uint16)
    return out


def demosaic_rggb(samples: np.ndarray) -> np.ndarray:
    """(H, W) uint16 mosaic -> (H, W, 3) uint16 RGB."""
    mosaic = np.asarray(samples, dtype=np.uint16)
    if mosaic.ndim != 2:
        raise ValueError(f"expected a 2-D mosaic, got shape {mosaic.shape}")

    height, width = mosaic.shape
    red, green, blue = rggb_masks(height, width)

    rgb = np.empty((height, width, 3), dtype=np.uint16)
    for channel, (mask, radius) in enumerate(((red, RED_BLUE_RADIUS), (green, GREEN_RADIUS), (blue, RED_BLUE_RADIUS))):
        rgb[..., channel] = np.where(mask, mosaic, _ring_mean(mosaic, mask, radius))
    return rgb
