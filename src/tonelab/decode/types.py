from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class RawSensorImage:
    """Undeveloped sensor samples as handed over by the RAW codec.

    ``data`` holds one sample per photosite when ``cfa_pattern`` is set, or
    three interleaved samples per pixel otherwise.
    """

    width: int
    height: int
    data: np.ndarray
    cfa_pattern: str | None = "RGGB"
    wb_coeffs: tuple[float, ...] | None = None
    iso: float | None = None
    exposure_time: float | None = None
    aperture: float | None = None
    color_space: str | None = None
    make: str | None = None
    model: str | None = None


@dataclass
class ImageMetadata:
    width: int
    height: int
    is_raw: bool
    color_space: str
    white_balance: tuple[float, ...] | None = None
    iso: float | None = None
    exposure_time: float | None = None
    aperture: float | None = None
    make: str | None = None
    model: str | None = None
