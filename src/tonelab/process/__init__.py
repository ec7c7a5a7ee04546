from .base import StageError
from .histogram import ImageHistogram, calculate_histogram
from .pipeline import ProcessingJob, ProcessingPipeline, ProcessingResult, ProcessingStatistics
from .steps import PROCESSING_ORDER, ProcessStep

__all__ = [
    "StageError",
    "ImageHistogram",
    "calculate_histogram",
    "ProcessingJob",
    "ProcessingPipeline",
    "ProcessingResult",
    "ProcessingStatistics",
    "PROCESSING_ORDER",
    "ProcessStep",
]
