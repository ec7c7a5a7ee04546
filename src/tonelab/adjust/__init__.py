from .state import ADJUSTMENT_RANGES, Adjustment, AdjustmentVector, ColorGrading, LensCorrections, is_neutral
from .tone_curve import CurvePoint, CurveType, ToneCurve

__all__ = [
    "ADJUSTMENT_RANGES",
    "Adjustment",
    "AdjustmentVector",
    "ColorGrading",
    "LensCorrections",
    "is_neutral",
    "CurvePoint",
    "CurveType",
    "ToneCurve",
]
