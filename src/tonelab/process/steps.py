from __future__ import annotations

import enum


class ProcessStep(str, enum.Enum):
    EXPOSURE = "exposure"
    HIGHLIGHTS_SHADOWS = "highlights_shadows"
    WHITES_BLACKS = "whites_blacks"
    WHITE_BALANCE = "white_balance"
    CONTRAST = "contrast"
    TONE_CURVE = "tone_curve"
    SATURATION = "saturation"
    VIBRANCE = "vibrance"
    COLOR_GRADING = "color_grading"
    CLARITY = "clarity"
    DEHAZE = "dehaze"
    NOISE_REDUCTION = "noise_reduction"
    SHARPENING = "sharpening"
    LENS_CORRECTIONS = "lens_corrections"

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.value.split("_"))


# Each stage consumes the previous stage's output; do not reorder.
PROCESSING_ORDER: tuple[ProcessStep, ...] = (
    ProcessStep.EXPOSURE,
    ProcessStep.HIGHLIGHTS_SHADOWS,
    ProcessStep.WHITES_BLACKS,
    ProcessStep.WHITE_BALANCE,
    ProcessStep.CONTRAST,
    ProcessStep.TONE_CURVE,
    ProcessStep.SATURATION,
    ProcessStep.VIBRANCE,
    ProcessStep.COLOR_GRADING,
    ProcessStep.CLARITY,
    ProcessStep.DEHAZE,
    ProcessStep.NOISE_REDUCTION,
    ProcessStep.SHARPENING,
    ProcessStep.LENS_CORRECTIONS,
)
