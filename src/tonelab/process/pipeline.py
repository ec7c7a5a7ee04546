from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Iterable

import numpy as np
from PIL import Image

from tonelab.adjust import AdjustmentVector, is_neutral
from tonelab.adjust.tone_curve import EPSILON
from tonelab.write.export import ExportError, ExportFormat, encode_image

from . import stages
from .base import StageError
from .steps import PROCESSING_ORDER, ProcessStep


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingJob:
    image: np.ndarray
    adjustments: AdjustmentVector


@dataclass
class ProcessingStatistics:
    total_time_ms: float = 0.0
    step_times_ms: dict[ProcessStep, float] = field(default_factory=dict)
    image_dimensions: tuple[int, int] = (0, 0)
    memory_usage_mb: float = 0.0


@dataclass(frozen=True)
class ProcessingResult:
    image: np.ndarray | None = None
    error: str | None = None
    failed_step: ProcessStep | None = None
    sequence: int | None = None
    statistics: ProcessingStatistics | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, image: np.ndarray, statistics: ProcessingStatistics | None = None) -> "ProcessingResult":
        return cls(image=image, statistics=statistics)

    @classmethod
    def failure(cls, message: str, failed_step: ProcessStep | None = None) -> "ProcessingResult":
        return cls(error=message, failed_step=failed_step)


def _step_is_active(step: ProcessStep, adj: AdjustmentVector) -> bool:
    if step is ProcessStep.EXPOSURE:
        return not is_neutral(adj.exposure)
    if step is ProcessStep.HIGHLIGHTS_SHADOWS:
        return not is_neutral(adj.highlights) or not is_neutral(adj.shadows)
    if step is ProcessStep.WHITES_BLACKS:
        return not is_neutral(adj.whites) or not is_neutral(adj.blacks)
    if step is ProcessStep.WHITE_BALANCE:
        return not is_neutral(adj.temperature) or not is_neutral(adj.tint)
    if step is ProcessStep.CONTRAST:
        return not is_neutral(adj.contrast)
    if step is ProcessStep.TONE_CURVE:
        return adj.tone_curve.has_changes()
    if step is ProcessStep.SATURATION:
        return not is_neutral(adj.saturation)
    if step is ProcessStep.VIBRANCE:
        return not is_neutral(adj.vibrance)
    if step is ProcessStep.COLOR_GRADING:
        return adj.color_grading.has_changes()
    if step is ProcessStep.CLARITY:
        return not is_neutral(adj.clarity)
    if step is ProcessStep.DEHAZE:
        return not is_neutral(adj.dehaze)
    if step is ProcessStep.NOISE_REDUCTION:
        return adj.noise_reduction > EPSILON
    if step is ProcessStep.SHARPENING:
        return adj.sharpening > EPSILON
    if step is ProcessStep.LENS_CORRECTIONS:
        return adj.lens_corrections.has_changes()
    raise StageError(f"unknown processing step: {step!r}")


def _run_step(image: np.ndarray, step: ProcessStep, adj: AdjustmentVector) -> None:
    if step is ProcessStep.EXPOSURE:
        stages.apply_exposure(image, adj.exposure)
    elif step is ProcessStep.HIGHLIGHTS_SHADOWS:
        stages.apply_highlights_shadows(image, adj.highlights, adj.shadows)
    elif step is ProcessStep.WHITES_BLACKS:
        stages.apply_whites_blacks(image, adj.whites, adj.blacks)
    elif step is ProcessStep.WHITE_BALANCE:
        stages.apply_white_balance(image, adj.temperature, adj.tint)
    elif step is ProcessStep.CONTRAST:
        stages.apply_contrast(image, adj.contrast)
    elif step is ProcessStep.TONE_CURVE:
        stages.apply_tone_curve(image, adj.tone_curve)
    elif step is ProcessStep.SATURATION:
        stages.apply_saturation(image, adj.saturation)
    elif step is ProcessStep.VIBRANCE:
        stages.apply_vibrance(image, adj.vibrance)
    elif step is ProcessStep.COLOR_GRADING:
        stages.apply_color_grading(image, adj.color_grading)
    elif step is ProcessStep.CLARITY:
        stages.apply_clarity(image, adj.clarity)
    elif step is ProcessStep.DEHAZE:
        stages.apply_dehaze(image, adj.dehaze)
    elif step is ProcessStep.NOISE_REDUCTION:
        stages.apply_noise_reduction(image, adj.noise_reduction)
    elif step is ProcessStep.SHARPENING:
        stages.apply_sharpening(image, adj.sharpening)
    elif step is ProcessStep.LENS_CORRECTIONS:
        stages.apply_lens_corrections(image, adj.lens_corrections)


def _owned_copy(image: np.ndarray) -> np.ndarray:
    return np.array(image, copy=True)


class ProcessingPipeline:
    """Applies the fixed stage sequence to an RGBA raster.

    Stages whose parameters are neutral are skipped outright, so a neutral
    adjustment vector returns the input bytes unchanged.
    """

    def __init__(self, order: Iterable[ProcessStep] | None = None) -> None:
        self._order: tuple[ProcessStep, ...] = PROCESSING_ORDER
        if order is not None:
            self.set_processing_order(order)

    def set_processing_order(self, order: Iterable[ProcessStep]) -> None:
        self._order = tuple(ProcessStep(step) for step in order)

    def get_processing_order(self) -> tuple[ProcessStep, ...]:
        return self._order

    def _apply_step(self, image: np.ndarray, step: ProcessStep, adjustments: AdjustmentVector) -> bool:
        if not _step_is_active(step, adjustments):
            return False
        try:
            _run_step(image, step, adjustments)
        except StageError as exc:
            raise StageError(f"Error in {step.label}: {exc}", step) from exc
        return True

    def process(self, job: ProcessingJob) -> ProcessingResult:
        started = time.perf_counter()
        image = _owned_copy(job.image)
        stats = ProcessingStatistics()

        try:
            for step in self._order:
                step_started = time.perf_counter()
                if self._apply_step(image, step, job.adjustments):
                    stats.step_times_ms[step] = (time.perf_counter() - step_started) * 1000.0
            if not stats.step_times_ms:
                # Nothing ran, so nothing has looked at the buffer yet.
                try:
                    stages.check_rgba(image)
                except StageError as exc:
                    raise StageError(f"Invalid raster: {exc}") from exc
        except StageError as exc:
            logger.warning("processing aborted: %s", exc)
            return ProcessingResult.failure(str(exc), exc.step)

        stats.image_dimensions = (int(image.shape[1]), int(image.shape[0]))
        stats.memory_usage_mb = image.nbytes / (1024.0 * 1024.0)
        stats.total_time_ms = (time.perf_counter() - started) * 1000.0
        logger.debug(
            "processed %dx%d in %.1f ms (%d steps)",
            stats.image_dimensions[0],
            stats.image_dimensions[1],
            stats.total_time_ms,
            len(stats.step_times_ms),
        )
        return ProcessingResult.success(image, stats)

    def apply_single_step(self, image: np.ndarray, step: ProcessStep, adjustments: AdjustmentVector) -> np.ndarray:
        """Run exactly one stage on a copy of ``image``; raises StageError."""
        out = _owned_copy(image)
        self._apply_step(out, ProcessStep(step), adjustments)
        return out

    def process_preview(self, job: ProcessingJob, max_dimension: int) -> ProcessingResult:
        image = np.asarray(job.image)
        if image.ndim >= 2:
            height, width = image.shape[:2]
            longest = max(width, height)
            if longest > max_dimension:
                ratio = min(max_dimension / float(longest), 1.0)
                size = (max(int(width * ratio), 1), max(int(height * ratio), 1))
                try:
                    resized = Image.fromarray(image).resize(size, Image.Resampling.LANCZOS)
                except (TypeError, ValueError) as exc:
                    return ProcessingResult.failure(f"Error in preview resize: {exc}")
                image = np.asarray(resized)
        return self.process(ProcessingJob(image=image, adjustments=job.adjustments))

    def export_image(self, job: ProcessingJob, fmt: ExportFormat | None = None) -> bytes:
        """Full-resolution re-run of the pipeline, encoded for ``fmt``."""
        result = self.process(job)
        if not result.ok or result.image is None:
            raise ExportError(result.error or "processing produced no image")
        return encode_image(result.image, fmt or ExportFormat())
