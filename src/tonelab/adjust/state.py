from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from typing import Any

from tonelab.utils.formatting import format_adjustment

from .tone_curve import EPSILON, ToneCurve


class Adjustment(str, enum.Enum):
    EXPOSURE = "exposure"
    CONTRAST = "contrast"
    HIGHLIGHTS = "highlights"
    SHADOWS = "shadows"
    WHITES = "whites"
    BLACKS = "blacks"
    SATURATION = "saturation"
    VIBRANCE = "vibrance"
    TEMPERATURE = "temperature"
    TINT = "tint"
    CLARITY = "clarity"
    DEHAZE = "dehaze"
    NOISE_REDUCTION = "noise_reduction"
    SHARPENING = "sharpening"


ADJUSTMENT_RANGES: dict[Adjustment, tuple[float, float]] = {
    Adjustment.EXPOSURE: (-5.0, 5.0),
    Adjustment.CONTRAST: (-100.0, 100.0),
    Adjustment.HIGHLIGHTS: (-100.0, 100.0),
    Adjustment.SHADOWS: (-100.0, 100.0),
    Adjustment.WHITES: (-100.0, 100.0),
    Adjustment.BLACKS: (-100.0, 100.0),
    Adjustment.SATURATION: (-100.0, 100.0),
    Adjustment.VIBRANCE: (-100.0, 100.0),
    Adjustment.TEMPERATURE: (-100.0, 100.0),
    Adjustment.TINT: (-100.0, 100.0),
    Adjustment.CLARITY: (-100.0, 100.0),
    Adjustment.DEHAZE: (-100.0, 100.0),
    Adjustment.NOISE_REDUCTION: (0.0, 100.0),
    Adjustment.SHARPENING: (0.0, 100.0),
}


def is_neutral(value: float) -> bool:
    return abs(value) <= EPSILON


def _clamp(value: float, lo: float, hi: float) -> float:
    return min(max(float(value), lo), hi)


@dataclass
class ColorGrading:
    shadows_hue: float = 0.0
    shadows_saturation: float = 0.0
    shadows_luminance: float = 0.0
    midtones_hue: float = 0.0
    midtones_saturation: float = 0.0
    midtones_luminance: float = 0.0
    highlights_hue: float = 0.0
    highlights_saturation: float = 0.0
    highlights_luminance: float = 0.0
    global_hue: float = 0.0
    global_saturation: float = 0.0
    global_luminance: float = 0.0

    def has_changes(self) -> bool:
        return any(not is_neutral(getattr(self, f.name)) for f in dataclasses.fields(self))

    def reset(self) -> None:
        for f in dataclasses.fields(self):
            setattr(self, f.name, 0.0)

    def validate(self) -> None:
        for f in dataclasses.fields(self):
            bound = 180.0 if f.name.endswith("_hue") else 100.0
            setattr(self, f.name, _clamp(getattr(self, f.name), -bound, bound))


@dataclass
class LensCorrections:
    chromatic_aberration: float = 0.0
    vignetting: float = 0.0
    distortion: float = 0.0
    lens_profile_enabled: bool = False
    lens_profile_name: str | None = None

    def has_changes(self) -> bool:
        return (
            not is_neutral(self.chromatic_aberration)
            or not is_neutral(self.vignetting)
            or not is_neutral(self.distortion)
            or self.lens_profile_enabled
        )

    def reset(self) -> None:
        self.chromatic_aberration = 0.0
        self.vignetting = 0.0
        self.distortion = 0.0
        self.lens_profile_enabled = False
        self.lens_profile_name = None

    def validate(self) -> None:
        self.chromatic_aberration = _clamp(self.chromatic_aberration, -100.0, 100.0)
        self.vignetting = _clamp(self.vignetting, -100.0, 100.0)
        self.distortion = _clamp(self.distortion, -100.0, 100.0)


@dataclass
class AdjustmentVector:
    """Every tonal and color parameter of one edit.

    All scalars are neutral at 0.0. Callers copy the vector per job and must
    call ``validate`` before dispatching; the pipeline trusts its input.
    """

    exposure: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0
    saturation: float = 0.0
    vibrance: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    clarity: float = 0.0
    dehaze: float = 0.0
    noise_reduction: float = 0.0
    sharpening: float = 0.0
    tone_curve: ToneCurve = field(default_factory=ToneCurve)
    color_grading: ColorGrading = field(default_factory=ColorGrading)
    lens_corrections: LensCorrections = field(default_factory=LensCorrections)

    def get(self, adjustment: Adjustment) -> float:
        return float(getattr(self, Adjustment(adjustment).value))

    def set(self, adjustment: Adjustment, value: float) -> None:
        setattr(self, Adjustment(adjustment).value, float(value))

    def reset(self) -> None:
        for adjustment in Adjustment:
            self.set(adjustment, 0.0)
        self.tone_curve.reset()
        self.color_grading.reset()
        self.lens_corrections.reset()

    def has_changes(self) -> bool:
        return (
            any(not is_neutral(self.get(a)) for a in Adjustment)
            or self.tone_curve.has_changes()
            or self.color_grading.has_changes()
            or self.lens_corrections.has_changes()
        )

    def validate(self) -> None:
        for adjustment, (lo, hi) in ADJUSTMENT_RANGES.items():
            self.set(adjustment, _clamp(self.get(adjustment), lo, hi))
        self.color_grading.validate()
        self.lens_corrections.validate()

    def summary(self) -> list[str]:
        lines = [format_adjustment(a.value, self.get(a)) for a in Adjustment if not is_neutral(self.get(a))]
        if self.tone_curve.has_changes():
            lines.append(f"Tone curve: {len(self.tone_curve.points)} points ({self.tone_curve.curve_type.value})")
        if self.color_grading.has_changes():
            lines.append("Color grading")
        if self.lens_corrections.has_changes():
            lines.append("Lens corrections")
        return lines or ["No adjustments"]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {a.value: self.get(a) for a in Adjustment}
        data["tone_curve"] = self.tone_curve.to_dict()
        data["color_grading"] = dataclasses.asdict(self.color_grading)
        data["lens_corrections"] = dataclasses.asdict(self.lens_corrections)
        return data

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "AdjustmentVector":
        raw = dict(raw or {})
        vector = cls()

        curve_raw = raw.pop("tone_curve", None)
        if curve_raw is not None:
            vector.tone_curve = ToneCurve.from_dict(curve_raw)

        grading_raw = raw.pop("color_grading", None)
        if grading_raw is not None:
            vector.color_grading = ColorGrading(**{k: float(v) for k, v in grading_raw.items()})

        lens_raw = raw.pop("lens_corrections", None)
        if lens_raw is not None:
            vector.lens_corrections = LensCorrections(**lens_raw)

        for key, value in raw.items():
            try:
                adjustment = Adjustment(key)
            except ValueError as exc:
                raise ValueError(f"unknown adjustment: {key}") from exc
            vector.set(adjustment, float(value))
        return vector
